"""
Toolpath generator framework.

Each operation is described by a ``GeneratorSpec``: which kinds of path it
works on, whether it produces Z, which parameters it needs, and the
functions that compute its toolpaths and preview geometry. The specs are
collected in ``cutpath.toolpaths.registry``.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

import numpy as np

from cutpath.core.config import BOUNDS_TOLERANCE, JoinType, ToolpathParams
from cutpath.core.exceptions import ParameterError
from cutpath.geometry.engine import EndType, PolygonEngine
from cutpath.geometry.path import CutPath, CutPaths, CutPoint
from cutpath.toolpaths.merge import MergeStrategy


class Operation(str, Enum):
    """Toolpath operations, named as they appear in stored operation records."""

    ANNULAR_POCKET = "AnnularPocket"
    RASTER_POCKET = "RasterPocket"
    POCKET = "Pocket"
    INSIDE = "Inside"
    OUTSIDE = "Outside"
    ENGRAVE = "Engrave"
    VGROOVE = "VGroove"
    PERFORATE = "Perforate"
    DRILL = "Drill"

    @classmethod
    def parse(cls, name: "str | Operation") -> "Operation":
        """
        Look up an operation by name.

        Raises:
            ParameterError: If no operation has that name.
        """
        if isinstance(name, Operation):
            return name
        for op in cls:
            if op.value.lower() == str(name).strip().lower():
                return op
        available = ", ".join(op.value for op in cls)
        raise ParameterError(
            f"Unknown operation '{name}'. Available operations: {available}",
            operation=str(name),
        )


class PathKind(Enum):
    """Which input paths an operation works on."""

    ALL = "ALL"
    OPEN = "OPEN"
    CLOSED = "CLOSED"

    def accepts(self, path: CutPath) -> bool:
        if self is PathKind.ALL:
            return True
        return path.is_closed == (self is PathKind.CLOSED)


class ZMode(Enum):
    """Whether an operation assigns Z to its toolpaths."""

    NONE = "none"  # Z left for the caller
    ALWAYS = "always"  # Every vertex carries Z
    VBIT = "vbit"  # Z assigned only when cutting with a V-bit


GenerateFn = Callable[[CutPaths, ToolpathParams, PolygonEngine, MergeStrategy], CutPaths]
PreviewFn = Callable[[CutPaths, ToolpathParams, PolygonEngine], CutPaths]


def no_bloat(width: float) -> float:
    return 0.0


def full_bloat(width: float) -> float:
    return width


def half_bloat(width: float) -> float:
    return width / 2


@dataclass(frozen=True)
class GeneratorSpec:
    """
    Description of one toolpath operation.

    Attributes:
        operation: Operation tag
        kinds: Input paths the operation accepts; others are ignored
        z_mode: Whether Z is produced
        required: Parameter names that must be present
        generate: Computes toolpaths
        preview: Computes the area the operation will touch
        bloat: Extra bounding-box margin needed around the geometry, given
            the toolpath width
        description: One-line summary for listings
    """

    operation: Operation
    kinds: PathKind
    z_mode: ZMode
    required: tuple
    generate: GenerateFn
    preview: PreviewFn
    bloat: Callable[[float], float] = no_bloat
    description: str = ""


def offset_kwargs(params: ToolpathParams, default_join: JoinType = JoinType.MITER) -> dict:
    """Offset settings from the parameters, for ``PolygonEngine.offset``."""
    return {
        "join_type": params.join_type or default_join,
        "mitre_limit": params.mitre_limit,
        "arc_tolerance": params.arc_tolerance,
    }


def pass_distances(first: float, last: float, step: float) -> List[float]:
    """
    Offset distances from ``first`` to ``last`` in steps of ``step``.

    The final distance is always exactly ``last``, even when it is less
    than a whole step beyond the previous one.
    """
    span = abs(last - first)
    direction = 1.0 if last >= first else -1.0
    if span == 0 or step <= 0:
        return [first]
    count = math.ceil(span / step - 1e-9)
    return [first + direction * min(i * step, span) for i in range(count + 1)]


def stepped_passes(
    geometry: CutPaths,
    first: float,
    last: float,
    params: ToolpathParams,
    engine: PolygonEngine,
    end_type: Optional[EndType] = None,
) -> CutPaths:
    """
    Closed offsets of ``geometry`` at each distance from ``first`` to ``last``.

    At distance 0 the geometry itself is the pass. Passes are offset
    directly from the input geometry, so rounding does not accumulate from
    one pass to the next.
    """
    passes = CutPaths()
    kwargs = offset_kwargs(params)
    for distance in pass_distances(first, last, params.step_over):
        if distance == 0:
            passes.extend(geometry)
            continue
        offset = engine.offset(geometry, distance, end_type=end_type, **kwargs)
        passes.extend(p for p in offset if p.is_closed)
    return passes


def swept_band(
    geometry: CutPaths,
    first: float,
    last: float,
    params: ToolpathParams,
    engine: PolygonEngine,
) -> CutPaths:
    """
    The area swept by the cutter centre between two offsets of closed
    geometry, grown by ``BOUNDS_TOLERANCE`` on both sides.
    """
    lo, hi = min(first, last), max(first, last)
    kwargs = offset_kwargs(params)
    outer = engine.offset(geometry, hi + BOUNDS_TOLERANCE, **kwargs)
    inner = engine.offset(geometry, lo - BOUNDS_TOLERANCE, **kwargs)
    return engine.xor(outer, inner)


def reverse_all(paths: CutPaths) -> CutPaths:
    return CutPaths([p.reversed() for p in paths])


def band_preview(
    geometry: CutPaths,
    outer: float,
    inner: float,
    params: ToolpathParams,
    engine: PolygonEngine,
) -> CutPaths:
    """Closed geometry grown by ``outer`` minus the same grown by ``inner``."""
    kwargs = offset_kwargs(params)
    return engine.difference(
        engine.offset(geometry.closed(), outer, **kwargs),
        engine.offset(geometry.closed(), inner, **kwargs),
    )


def open_preview(geometry: CutPaths, width: float, params: ToolpathParams, engine: PolygonEngine) -> CutPaths:
    """Round-ended band of ``width`` following each open path."""
    if width <= 0:
        return CutPaths()
    return engine.offset(
        geometry.open(),
        width / 2,
        end_type=EndType.OPEN_ROUND,
        **offset_kwargs(params, JoinType.ROUND),
    )


def hole_outline(centre: CutPoint, diameter: float, segments: int = 32) -> CutPath:
    """A polygon approximating a drilled hole."""
    angles = np.linspace(0.0, 2 * np.pi, segments, endpoint=False)
    r = diameter / 2
    return CutPath(
        tuple(
            CutPoint(float(centre.x + r * c), float(centre.y + r * s))
            for c, s in zip(np.cos(angles), np.sin(angles))
        ),
        True,
    )


def drill_hole(pt: CutPoint, safe_z: float, bot_z: float) -> List[CutPoint]:
    """Plunge and retract at a point."""
    return [
        CutPoint(pt.x, pt.y, safe_z),
        CutPoint(pt.x, pt.y, bot_z),
        CutPoint(pt.x, pt.y, safe_z),
    ]
