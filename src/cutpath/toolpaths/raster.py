"""
Raster sweep of convex regions.

Line-polygon clipping uses **shapely**. Each scan line is intersected with
the piece; for a convex piece that gives at most one segment per line, so
the crossings can be strung together back and forth (boustrophedon) into
a single open path without leaving the piece.

References:
- shapely: https://shapely.readthedocs.io/
"""

from __future__ import annotations

import math
from typing import List, Tuple

from shapely.geometry import LineString, Polygon as ShapelyPolygon

from cutpath.geometry.path import CutPath, CutPoint

Point2D = Tuple[float, float]


def _crossings(line: LineString, poly: ShapelyPolygon) -> List[Point2D]:
    """Points where a scan line enters and leaves the polygon."""
    result = line.intersection(poly)
    if result.is_empty:
        return []

    points: List[Point2D] = []
    geom_type = result.geom_type
    if geom_type in ("LineString", "Point"):
        parts = [result]
    else:
        parts = list(result.geoms)
    for part in parts:
        if part.geom_type == "LineString":
            coords = list(part.coords)
            points.extend([(float(coords[0][0]), float(coords[0][1])),
                           (float(coords[-1][0]), float(coords[-1][1]))])
        elif part.geom_type == "Point":
            points.append((float(part.x), float(part.y)))

    unique: List[Point2D] = []
    for pt in points:
        if pt not in unique:
            unique.append(pt)
    return unique


def rasterise_convex(
    piece: CutPath,
    step: float,
    horizontal: bool = True,
    climb: bool = False,
) -> CutPath:
    """
    Sweep a convex polygon with parallel scan lines.

    The first line lies ``step`` inside the far edge of the bounding box:
    the maximum edge for conventional milling, the minimum edge for climb
    milling. Lines then advance by ``step`` across the piece. Crossings are
    sorted ascending along the scan axis on even lines and descending on
    odd ones.

    Parameters:
        piece: Closed convex polygon.
        step: Distance between scan lines.
        horizontal: Scan lines parallel to X (True) or to Y (False).
        climb: Start from the minimum edge instead of the maximum.

    Returns:
        One open path through every crossing, empty if no line hits.
    """
    bb = piece.bbox()
    if bb is None or step <= 0 or len(piece) < 3:
        return CutPath((), False)

    extent = bb.height if horizontal else bb.width
    count = math.ceil(extent / step)
    if climb:
        level = (bb.min_y if horizontal else bb.min_x) + step
        stepway = 1
    else:
        level = (bb.max_y if horizontal else bb.max_x) - step
        stepway = -1

    poly = ShapelyPolygon([(p.x, p.y) for p in piece])
    axis = 0 if horizontal else 1
    ascending = True
    points: List[CutPoint] = []
    for _ in range(count):
        if horizontal:
            ray = LineString([(bb.min_x - step, level), (bb.max_x + step, level)])
        else:
            ray = LineString([(level, bb.min_y - step), (level, bb.max_y + step)])
        crossings = _crossings(ray, poly)
        crossings.sort(key=lambda c: c[axis], reverse=not ascending)
        points.extend(CutPoint(x, y) for x, y in crossings)
        level += step * stepway
        ascending = not ascending

    return CutPath(tuple(points), False)
