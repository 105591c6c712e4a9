"""
Pocket clearing.

Two ways to clear the inside of closed geometry:

- **Annular**: concentric rings, shrinking from the boundary inwards
  until nothing is left. With a V-bit each ring also steps down, so the
  pocket ends up V-carved.
- **Raster**: the shrunk pocket is split into convex pieces and each piece
  is swept back and forth with parallel scan lines.

``pocket`` picks between them according to ``params.strategy``.
"""

import math

from cutpath.core.config import MIN_STEP_OVER, PocketStrategy, ToolpathParams
from cutpath.core.exceptions import ParameterError
from cutpath.core.logging import get_logger
from cutpath.geometry.engine import PolygonEngine
from cutpath.geometry.partition import convex_partition, group_polygons
from cutpath.geometry.path import CutPaths
from cutpath.toolpaths.base import offset_kwargs, reverse_all
from cutpath.toolpaths.merge import MergeStrategy
from cutpath.toolpaths.raster import rasterise_convex

logger = get_logger(__name__)


def _net_area(paths: CutPaths) -> float:
    # Outer rings are positive, holes negative
    return sum(p.area() for p in paths)


def annular_passes(
    geometry: CutPaths, params: ToolpathParams, engine: PolygonEngine
) -> tuple[CutPaths, CutPaths]:
    """
    Concentric rings clearing closed geometry.

    Rings stop once shrinking leaves nothing, or leaves the area no smaller.

    Returns:
        ``(passes, bounds)`` where bounds is the first ring set, the
        outermost line the cutter centre may follow.

    Raises:
        ParameterError: If a V-bit has no cutDepth, or rings would shrink by
            less than ``MIN_STEP_OVER``.
    """
    kwargs = offset_kwargs(params)
    d = params.cutter_diameter
    shrink = params.step_over
    z = None
    z_step = 0.0
    floor = None
    if params.vbit:
        if params.cut_depth is None:
            raise ParameterError(
                "A V-bit pocket needs cutDepth", operation="AnnularPocket"
            )
        # A V-bit cannot shrink by more than its radius per ring
        shrink = min(d / 2, shrink)
        z_step = shrink / math.tan(params.cutter_angle)
        z = params.top_z
        floor = params.top_z - params.cut_depth
    if shrink < MIN_STEP_OVER:
        raise ParameterError(
            f"Rings would shrink by {shrink:g}, less than {MIN_STEP_OVER}",
            operation="AnnularPocket",
            details={"stepOver": shrink},
        )

    current = engine.offset(geometry.closed(), -(d / 2 + params.margin), **kwargs)
    bounds = current.copy()
    passes = CutPaths()
    area = _net_area(current)
    while len(current) > 0:
        rings = current
        if z is not None:
            z = max(z - z_step, floor)
            rings = rings.with_z(z)
        if params.climb:
            rings = reverse_all(rings)
        passes.extend(rings)
        current = engine.offset(current, -shrink, **kwargs)
        previous, area = area, _net_area(current)
        if len(current) > 0 and area >= previous:
            logger.warning("annular_pocket_stalled", rings=len(passes), area=area)
            break
    return passes, bounds


def annular_pocket(
    geometry: CutPaths,
    params: ToolpathParams,
    engine: PolygonEngine,
    merger: MergeStrategy,
) -> CutPaths:
    passes, bounds = annular_passes(geometry, params, engine)
    logger.debug("annular_pocket", paths=len(geometry), passes=len(passes), vbit=params.vbit)
    return merger.merge_paths(passes, bounds)


def raster_pocket(
    geometry: CutPaths,
    params: ToolpathParams,
    engine: PolygonEngine,
    merger: MergeStrategy,
    horizontal: bool = True,
) -> CutPaths:
    """
    Clear closed geometry with rasters.

    For each region of the shrunk pocket the outline comes first, rotated
    to start at the vertex nearest the first raster point, then its holes,
    then one zig-zag path per convex piece. Rasters are not merged.
    """
    d = params.cutter_diameter
    pockets = engine.offset(
        geometry.closed(), -(d / 2 + params.margin), **offset_kwargs(params)
    )
    step = params.step_over

    toolpaths = CutPaths()
    for outer, holes in group_polygons(pockets):
        rasters = []
        for piece in convex_partition(outer, holes):
            path = rasterise_convex(piece, step, horizontal, params.climb)
            if len(path) > 0:
                rasters.append(path)
        if rasters:
            index, _ = outer.closest_vertex(rasters[0][0])
            outer = outer.make_first(index)
        toolpaths.append(outer)
        toolpaths.extend(holes)
        toolpaths.extend(rasters)

    logger.debug(
        "raster_pocket",
        paths=len(geometry),
        regions=len(pockets),
        toolpaths=len(toolpaths),
        horizontal=horizontal,
    )
    return toolpaths


def pocket(
    geometry: CutPaths,
    params: ToolpathParams,
    engine: PolygonEngine,
    merger: MergeStrategy,
) -> CutPaths:
    """Clear a pocket with the strategy named in ``params.strategy``."""
    if params.strategy is PocketStrategy.ANNULAR:
        return annular_pocket(geometry, params, engine, merger)
    if params.strategy is PocketStrategy.X_RASTER:
        return raster_pocket(geometry, params, engine, merger, horizontal=True)
    if params.strategy is PocketStrategy.Y_RASTER:
        return raster_pocket(geometry, params, engine, merger, horizontal=False)
    raise ParameterError(f"Unknown pocket strategy '{params.strategy}'", operation="Pocket")


def pocket_preview(
    geometry: CutPaths, params: ToolpathParams, engine: PolygonEngine
) -> CutPaths:
    """The area cleared: the closed geometry less the margin."""
    closed = geometry.closed()
    if params.margin == 0:
        return engine.union(closed)
    return engine.offset(closed, -params.margin, **offset_kwargs(params))
