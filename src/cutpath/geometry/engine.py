"""
Polygon engine: offsets and boolean operations on CutPaths.

``PolygonEngine`` is the contract the toolpath generators program against;
``PyclipperEngine`` implements it with **pyclipper** (Python bindings for
Angus Johnson's Clipper 6).

Clipper works on integer coordinates, so vertices are scaled by
``_CLIPPER_SCALE`` and rounded on the way in, then scaled back on the way
out. Offsets of a fraction of a unit stay symmetric. Clipper 6 as exposed by pyclipper carries no Z, so ``clip_open``
recovers Z for every output vertex by projecting it back onto the input
segments and interpolating between their end depths.

References:
- pyclipper: https://github.com/fonttools/pyclipper
- Clipper library: http://www.angusj.com/delphi/clipper.php
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, List, Optional, Tuple

import pyclipper

from cutpath.core.config import ARC_TOLERANCE, CLEAN_POLY_DIST, JoinType
from cutpath.geometry.path import CutPath, CutPaths, CutPoint

logger = logging.getLogger(__name__)

IntPath = List[Tuple[int, int]]

# Integer units are scaled by this factor before reaching pyclipper.
_CLIPPER_SCALE = 1000  # 1 unit -> 1000 clipper units


class EndType(Enum):
    """How the ends of a path are treated when offsetting."""

    CLOSED_POLYGON = "closed_polygon"
    CLOSED_LINE = "closed_line"
    OPEN_BUTT = "open_butt"
    OPEN_SQUARE = "open_square"
    OPEN_ROUND = "open_round"

    @property
    def is_open(self) -> bool:
        return self.value.startswith("open")


class FillRule(Enum):
    """Which regions of a path set count as inside."""

    EVEN_ODD = "even_odd"
    NON_ZERO = "non_zero"
    POSITIVE = "positive"
    NEGATIVE = "negative"


class ClipType(Enum):
    INTERSECTION = "intersection"
    UNION = "union"
    DIFFERENCE = "difference"
    XOR = "xor"


_JOIN_TYPES = {
    JoinType.SQUARE: pyclipper.JT_SQUARE,
    JoinType.ROUND: pyclipper.JT_ROUND,
    JoinType.MITER: pyclipper.JT_MITER,
}

_END_TYPES = {
    EndType.CLOSED_POLYGON: pyclipper.ET_CLOSEDPOLYGON,
    EndType.CLOSED_LINE: pyclipper.ET_CLOSEDLINE,
    EndType.OPEN_BUTT: pyclipper.ET_OPENBUTT,
    EndType.OPEN_SQUARE: pyclipper.ET_OPENSQUARE,
    EndType.OPEN_ROUND: pyclipper.ET_OPENROUND,
}

_FILL_RULES = {
    FillRule.EVEN_ODD: pyclipper.PFT_EVENODD,
    FillRule.NON_ZERO: pyclipper.PFT_NONZERO,
    FillRule.POSITIVE: pyclipper.PFT_POSITIVE,
    FillRule.NEGATIVE: pyclipper.PFT_NEGATIVE,
}

_CLIP_TYPES = {
    ClipType.INTERSECTION: pyclipper.CT_INTERSECTION,
    ClipType.UNION: pyclipper.CT_UNION,
    ClipType.DIFFERENCE: pyclipper.CT_DIFFERENCE,
    ClipType.XOR: pyclipper.CT_XOR,
}


class PolygonEngine(ABC):
    """Offset and boolean operations needed by the toolpath generators."""

    @abstractmethod
    def offset(
        self,
        paths: CutPaths,
        amount: float,
        join_type: JoinType = JoinType.MITER,
        end_type: Optional[EndType] = None,
        mitre_limit: float = 2.0,
        arc_tolerance: float = ARC_TOLERANCE,
    ) -> CutPaths:
        """
        Offset paths by ``amount`` (positive grows outer contours).

        Closed paths are offset as polygons. Open paths pass through
        unchanged unless ``end_type`` is one of the open end types, in
        which case they are inflated into closed outlines.
        """

    @abstractmethod
    def clip(
        self,
        subject: CutPaths,
        clip: CutPaths,
        clip_type: ClipType,
        fill_rule: FillRule = FillRule.EVEN_ODD,
    ) -> CutPaths:
        """Boolean operation on closed polygons."""

    @abstractmethod
    def clean(
        self,
        paths: CutPaths,
        tolerance: float = CLEAN_POLY_DIST,
        fill_rule: FillRule = FillRule.EVEN_ODD,
    ) -> CutPaths:
        """Remove self-intersections and merge vertices closer than ``tolerance``."""

    @abstractmethod
    def clip_open(
        self,
        paths: CutPaths,
        clip: CutPaths,
        clip_type: ClipType,
        fill_rule: FillRule = FillRule.EVEN_ODD,
    ) -> CutPaths:
        """Clip open paths against closed polygons, keeping interpolated Z."""

    def union(self, a: CutPaths, b: Optional[CutPaths] = None) -> CutPaths:
        return self.clip(a, b or CutPaths(), ClipType.UNION)

    def difference(self, a: CutPaths, b: CutPaths) -> CutPaths:
        return self.clip(a, b, ClipType.DIFFERENCE)

    def intersection(self, a: CutPaths, b: CutPaths) -> CutPaths:
        return self.clip(a, b, ClipType.INTERSECTION)

    def xor(self, a: CutPaths, b: CutPaths) -> CutPaths:
        return self.clip(a, b, ClipType.XOR)

    def crosses(self, bounds: CutPaths, p1: CutPoint, p2: CutPoint) -> bool:
        """
        Does the segment p1-p2 leave the area ``bounds`` covers?

        A zero-length segment never crosses. Otherwise the segment crosses
        unless clipping it against ``bounds`` gives back exactly the
        segment itself.
        """
        a = _scale_point(p1)
        b = _scale_point(p2)
        if a == b:
            return False
        segment = CutPaths([CutPath((CutPoint(p1.x, p1.y), CutPoint(p2.x, p2.y)), False)])
        clipped = self.clip_open(segment, bounds, ClipType.INTERSECTION)
        if len(clipped) != 1 or len(clipped[0]) != 2:
            return True
        ends = {_scale_point(pt) for pt in clipped[0]}
        return ends != {a, b}


def _scale_point(pt: CutPoint) -> Tuple[int, int]:
    return int(round(pt.x * _CLIPPER_SCALE)), int(round(pt.y * _CLIPPER_SCALE))


def _to_clipper(path: CutPath) -> Optional[IntPath]:
    """Scaled, rounded and unduplicated coordinates, or None if too degenerate for Clipper."""
    out: IntPath = []
    for pt in path:
        ip = _scale_point(pt)
        if not out or out[-1] != ip:
            out.append(ip)
    if path.is_closed:
        while len(out) > 1 and out[-1] == out[0]:
            out.pop()
        if len(out) < 3 or pyclipper.Area(out) == 0:
            return None
    elif len(out) < 2:
        return None
    return out


def _from_clipper(path: Iterable[Iterable[int]], is_closed: bool) -> CutPath:
    return CutPath(
        tuple(CutPoint(x / _CLIPPER_SCALE, y / _CLIPPER_SCALE) for x, y in path), is_closed
    )


def _closed_paths(paths: Iterable[CutPath]) -> List[IntPath]:
    out = []
    for path in paths:
        if not path.is_closed:
            continue
        ip = _to_clipper(path)
        if ip is not None:
            out.append(ip)
    return out


def _segment_z(pt: Tuple[float, float], sources: List[CutPath]) -> Optional[float]:
    """Depth of the input segment nearest ``pt``, interpolated along it."""
    best_d2 = None
    best_z = None
    px, py = pt
    for path in sources:
        pts = path.points
        if len(pts) == 1:
            a = pts[0]
            d2 = (a.x - px) ** 2 + (a.y - py) ** 2
            if best_d2 is None or d2 < best_d2:
                best_d2, best_z = d2, a.z
            continue
        for a, b in path.edges():
            dx = b.x - a.x
            dy = b.y - a.y
            len2 = dx * dx + dy * dy
            t = 0.0
            if len2 > 0:
                t = ((px - a.x) * dx + (py - a.y) * dy) / len2
                t = min(1.0, max(0.0, t))
            qx = a.x + t * dx
            qy = a.y + t * dy
            d2 = (qx - px) ** 2 + (qy - py) ** 2
            if best_d2 is None or d2 < best_d2:
                best_d2 = d2
                if a.z is None or b.z is None:
                    best_z = a.z if b.z is None else b.z
                else:
                    best_z = a.z + t * (b.z - a.z)
    return best_z


class PyclipperEngine(PolygonEngine):
    """``PolygonEngine`` backed by pyclipper."""

    def offset(
        self,
        paths: CutPaths,
        amount: float,
        join_type: JoinType = JoinType.MITER,
        end_type: Optional[EndType] = None,
        mitre_limit: float = 2.0,
        arc_tolerance: float = ARC_TOLERANCE,
    ) -> CutPaths:
        pco = pyclipper.PyclipperOffset(mitre_limit, arc_tolerance * _CLIPPER_SCALE)
        jt = _JOIN_TYPES[join_type or JoinType.MITER]
        closed_et = pyclipper.ET_CLOSEDPOLYGON
        if end_type is EndType.CLOSED_LINE:
            closed_et = pyclipper.ET_CLOSEDLINE
        open_et = _END_TYPES[end_type] if end_type is not None and end_type.is_open else None

        passthrough: List[CutPath] = []
        added = 0
        for path in paths:
            if not path.is_closed and open_et is None:
                passthrough.append(path)
                continue
            ip = _to_clipper(path)
            if ip is None:
                continue
            pco.AddPath(ip, jt, closed_et if path.is_closed else open_et)
            added += 1

        result = CutPaths()
        if added:
            result.extend(_from_clipper(p, True) for p in pco.Execute(amount * _CLIPPER_SCALE))
        result.extend(passthrough)
        logger.debug("offset by %s: %d paths in, %d out", amount, len(paths), len(result))
        return result

    def clip(
        self,
        subject: CutPaths,
        clip: CutPaths,
        clip_type: ClipType,
        fill_rule: FillRule = FillRule.EVEN_ODD,
    ) -> CutPaths:
        subj = _closed_paths(subject)
        clips = _closed_paths(clip)
        if not subj and clip_type in (ClipType.INTERSECTION, ClipType.DIFFERENCE):
            return CutPaths()
        if not subj and not clips:
            return CutPaths()

        pc = pyclipper.Pyclipper()
        for ip in subj:
            pc.AddPath(ip, pyclipper.PT_SUBJECT, True)
        for ip in clips:
            pc.AddPath(ip, pyclipper.PT_CLIP, True)
        pft = _FILL_RULES[fill_rule]
        solution = pc.Execute(_CLIP_TYPES[clip_type], pft, pft)
        return CutPaths([_from_clipper(p, True) for p in solution])

    def clean(
        self,
        paths: CutPaths,
        tolerance: float = CLEAN_POLY_DIST,
        fill_rule: FillRule = FillRule.EVEN_ODD,
    ) -> CutPaths:
        closed = _closed_paths(paths)
        if not closed:
            return CutPaths()
        simple = pyclipper.SimplifyPolygons(closed, _FILL_RULES[fill_rule])
        cleaned = pyclipper.CleanPolygons(simple, tolerance * _CLIPPER_SCALE)
        return CutPaths([_from_clipper(p, True) for p in cleaned if len(p) >= 3])

    def clip_open(
        self,
        paths: CutPaths,
        clip: CutPaths,
        clip_type: ClipType,
        fill_rule: FillRule = FillRule.EVEN_ODD,
    ) -> CutPaths:
        sources = [p for p in paths if not p.is_closed]
        subj = [ip for ip in (_to_clipper(p) for p in sources) if ip is not None]
        if not subj:
            return CutPaths()
        clips = _closed_paths(clip)
        if not clips:
            # Nothing to clip against: the whole path is outside
            if clip_type is ClipType.DIFFERENCE:
                return CutPaths([p for p in sources if _to_clipper(p) is not None])
            return CutPaths()

        pc = pyclipper.Pyclipper()
        for ip in subj:
            pc.AddPath(ip, pyclipper.PT_SUBJECT, False)
        for ip in clips:
            pc.AddPath(ip, pyclipper.PT_CLIP, True)
        pft = _FILL_RULES[fill_rule]
        tree = pc.Execute2(_CLIP_TYPES[clip_type], pft, pft)

        result = CutPaths()
        for ip in pyclipper.OpenPathsFromPolyTree(tree):
            path = _from_clipper(ip, False)
            pts = tuple(pt.with_z(_segment_z((pt.x, pt.y), sources)) for pt in path)
            result.append(CutPath(pts, False))
        return result
