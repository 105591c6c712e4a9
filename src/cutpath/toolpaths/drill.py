"""
Drilling and perforation.

Both produce a single open path in which every hole is a plunge and
retract (``safeZ``, ``botZ``, ``safeZ``) at the hole position. Drill puts a
hole at every input vertex; perforate spaces holes evenly along each path.
"""

import math
from typing import List

import numpy as np

from cutpath.core.config import JoinType, OffsetMode, ToolpathParams
from cutpath.core.logging import get_logger
from cutpath.geometry.engine import PolygonEngine
from cutpath.geometry.path import CutPath, CutPaths, CutPoint
from cutpath.toolpaths.base import drill_hole, hole_outline, offset_kwargs
from cutpath.toolpaths.merge import MergeStrategy

logger = get_logger(__name__)


def perforation_points(path: CutPath, diameter: float, spacing: float) -> List[CutPoint]:
    """
    Evenly spaced hole positions along a path.

    The path length L is divided into ``ceil(L / (diameter + spacing))``
    equal steps with a hole at every step. On a closed path the hole that
    would land back on the start is dropped. A path of zero length gives
    its vertices.
    """
    path = path.unduplicated()
    pts = path.points
    if not pts:
        return []
    if path.is_closed:
        pts = pts + (pts[0],)

    xy = np.array([(p.x, p.y) for p in pts], dtype=float)
    seg = np.hypot(np.diff(xy[:, 0]), np.diff(xy[:, 1]))
    total = float(seg.sum())
    if total == 0:
        return list(path.points)

    count = math.ceil(total / (diameter + spacing))
    step = total / count
    cum = np.concatenate([[0.0], np.cumsum(seg)])
    dists = np.minimum(np.arange(count + 1) * step, total)
    if path.is_closed:
        dists = dists[:-1]

    xs = np.interp(dists, cum, xy[:, 0])
    ys = np.interp(dists, cum, xy[:, 1])
    holes = CutPath(
        tuple(CutPoint(float(x), float(y)) for x, y in zip(xs, ys)), False
    )
    return list(holes.unduplicated().points)


def perforation_paths(
    geometry: CutPaths, params: ToolpathParams, engine: PolygonEngine
) -> CutPaths:
    """
    Paths the holes are spaced along.

    Closed paths are moved out by the cutter radius for "Outside" (round
    joins unless another join is given) or in for "Inside" (mitre joins
    unless another join is given). "On" and open paths are used as is.
    """
    r = params.cutter_diameter / 2
    result = CutPaths()
    for path in geometry:
        if not path.is_closed or params.offset is OffsetMode.ON:
            result.append(path)
        elif params.offset is OffsetMode.OUTSIDE:
            result.extend(
                engine.offset(CutPaths([path]), r, **offset_kwargs(params, JoinType.ROUND))
            )
        else:
            result.extend(
                engine.offset(CutPaths([path]), -r, **offset_kwargs(params, JoinType.MITER))
            )
    return result


def perforate(
    geometry: CutPaths,
    params: ToolpathParams,
    engine: PolygonEngine,
    merger: MergeStrategy,
) -> CutPaths:
    toolpath: List[CutPoint] = []
    for path in perforation_paths(geometry, params, engine):
        for hole in perforation_points(path, params.cutter_diameter, params.spacing):
            toolpath.extend(drill_hole(hole, params.safe_z, params.bot_z))
    logger.debug("perforate", paths=len(geometry), holes=len(toolpath) // 3)
    if not toolpath:
        return CutPaths()
    return CutPaths([CutPath(tuple(toolpath), False)])


def drill(
    geometry: CutPaths,
    params: ToolpathParams,
    engine: PolygonEngine,
    merger: MergeStrategy,
) -> CutPaths:
    toolpath: List[CutPoint] = []
    for path in geometry:
        for vertex in path:
            toolpath.extend(drill_hole(vertex, params.safe_z, params.bot_z))
    logger.debug("drill", paths=len(geometry), holes=len(toolpath) // 3)
    if not toolpath:
        return CutPaths()
    return CutPaths([CutPath(tuple(toolpath), False)])


def perforate_preview(
    geometry: CutPaths, params: ToolpathParams, engine: PolygonEngine
) -> CutPaths:
    d = params.cutter_diameter
    return CutPaths(
        [
            hole_outline(hole, d)
            for path in perforation_paths(geometry, params, engine)
            for hole in perforation_points(path, d, params.spacing)
        ]
    )


def drill_preview(
    geometry: CutPaths, params: ToolpathParams, engine: PolygonEngine
) -> CutPaths:
    d = params.cutter_diameter or params.width
    if not d:
        return CutPaths()
    return CutPaths([hole_outline(vertex, d) for path in geometry for vertex in path])
