"""
Convex partition of polygons with holes.

Regions are triangulated with **mapbox_earcut** and the triangles are then
merged back together across shared diagonals for as long as the merged
piece stays convex (Hertel-Mehlhorn). The pieces are not minimal in
number, but each is convex, which is all the raster sweep needs.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

import mapbox_earcut as earcut
import numpy as np

from cutpath.geometry.path import CutPath, CutPaths, CutPoint, Inside

logger = logging.getLogger(__name__)

Region = Tuple[CutPath, List[CutPath]]


def _cross(o: Sequence[float], a: Sequence[float], b: Sequence[float]) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def is_convex(path: CutPath) -> bool:
    """True if no vertex of the polygon turns against its orientation."""
    pts = [(p.x, p.y) for p in path.unduplicated()]
    if len(pts) < 3:
        return False
    sign = 1.0 if path.area() >= 0 else -1.0
    n = len(pts)
    return all(
        sign * _cross(pts[i - 1], pts[i], pts[(i + 1) % n]) >= 0 for i in range(n)
    )


def group_polygons(paths: CutPaths) -> List[Region]:
    """
    Nest holes under their outer contours.

    Outer contours have positive orientation, holes negative. Each hole is
    assigned to the smallest outer contour containing it; a hole with no
    container is dropped.

    Returns:
        ``(outer, holes)`` pairs in the order the outers appear.
    """
    outers = [p for p in paths if p.is_closed and p.area() > 0]
    holes = [p for p in paths if p.is_closed and p.area() < 0]
    regions: List[Region] = [(outer, []) for outer in outers]

    for hole in holes:
        owner = None
        for k, outer in enumerate(outers):
            if any(outer.inside(pt) is Inside.OUTSIDE for pt in hole):
                continue
            if owner is None or abs(outer.area()) < abs(outers[owner].area()):
                owner = k
        if owner is None:
            logger.debug("dropping hole with no enclosing contour")
            continue
        regions[owner][1].append(hole)
    return regions


def _merge_pieces(p: List[int], q: List[int], a: int, b: int) -> List[int]:
    """Join ``p`` (containing edge a->b) and ``q`` (containing b->a)."""
    i = p.index(b)
    p_rot = p[i:] + p[:i]
    j = q.index(a)
    q_rot = q[j:] + q[:j]
    return p_rot + q_rot[1:-1]


def _convex_indices(piece: List[int], coords: np.ndarray) -> bool:
    n = len(piece)
    return all(
        _cross(coords[piece[k - 1]], coords[piece[k]], coords[piece[(k + 1) % n]]) >= 0
        for k in range(n)
    )


def convex_partition(outer: CutPath, holes: Sequence[CutPath] = ()) -> List[CutPath]:
    """
    Split a region into convex pieces.

    Args:
        outer: Outer contour, closed
        holes: Hole contours lying inside ``outer``

    Returns:
        Closed, counter-clockwise convex pieces covering the region. A
        convex region without holes is returned as is.
    """
    if not holes and is_convex(outer):
        return [outer]

    rings = [outer.unduplicated()] + [h.unduplicated() for h in holes]
    verts: List[Tuple[float, float]] = []
    ring_ends: List[int] = []
    for ring in rings:
        verts.extend((float(p.x), float(p.y)) for p in ring)
        ring_ends.append(len(verts))

    coords = np.asarray(verts, dtype=np.float64)
    tri = earcut.triangulate_float64(coords, np.asarray(ring_ends, dtype=np.uint32))
    tri = np.asarray(tri, dtype=np.int64).reshape(-1, 3)

    pieces: List[List[int]] = []
    for a, b, c in tri.tolist():
        area = _cross(coords[a], coords[b], coords[c])
        if area > 0:
            pieces.append([a, b, c])
        elif area < 0:
            pieces.append([a, c, b])

    merged = True
    while merged:
        merged = False
        owner: Dict[Tuple[int, int], int] = {}
        for k, piece in enumerate(pieces):
            for i in range(len(piece)):
                owner[(piece[i], piece[(i + 1) % len(piece)])] = k
        for (a, b), k in owner.items():
            m = owner.get((b, a))
            if m is None or m == k:
                continue
            candidate = _merge_pieces(pieces[k], pieces[m], a, b)
            if _convex_indices(candidate, coords):
                pieces[k] = candidate
                del pieces[m]
                merged = True
                break

    logger.debug("convex partition: %d triangles -> %d pieces", len(tri), len(pieces))
    return [
        CutPath(tuple(CutPoint(*verts[i]) for i in piece), True) for piece in pieces
    ]
