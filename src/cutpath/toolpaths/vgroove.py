"""
V-grooves: a band of ``width`` centred on each path.

Closed paths are cut in passes from half the band outside the path to
half the band inside it. An open path is treated as closed by reflection:
the pass at distance r from the centre line is the round-ended outline of
the polyline grown by r, and the centre pass is the polyline itself.
"""

from cutpath.core.config import BOUNDS_TOLERANCE, JoinType, ToolpathParams
from cutpath.core.logging import get_logger
from cutpath.geometry.engine import EndType, PolygonEngine
from cutpath.geometry.path import CutPaths
from cutpath.toolpaths.base import (
    band_preview,
    offset_kwargs,
    open_preview,
    reverse_all,
    stepped_passes,
    swept_band,
)
from cutpath.toolpaths.merge import MergeStrategy

logger = get_logger(__name__)


def vgroove_passes(
    geometry: CutPaths, params: ToolpathParams, engine: PolygonEngine
) -> tuple[CutPaths, CutPaths]:
    """
    Passes and merge boundary for a v-groove.

    Closed paths come first, then the passes around open paths.
    """
    half = (params.cut_width - params.cutter_diameter) / 2
    closed = geometry.closed()
    opened = geometry.open()

    passes = stepped_passes(closed, half, -half, params, engine)
    band = swept_band(closed, half, -half, params, engine)

    if len(opened):
        passes.extend(
            stepped_passes(opened, half, 0, params, engine, end_type=EndType.OPEN_ROUND)
        )
        reach = engine.offset(
            opened,
            half + BOUNDS_TOLERANCE,
            end_type=EndType.OPEN_ROUND,
            **offset_kwargs(params, JoinType.ROUND),
        )
        band = engine.union(band, reach)

    if params.climb:
        passes = reverse_all(passes)
    return passes, band


def vgroove(
    geometry: CutPaths,
    params: ToolpathParams,
    engine: PolygonEngine,
    merger: MergeStrategy,
) -> CutPaths:
    passes, band = vgroove_passes(geometry, params, engine)
    logger.debug("vgroove", paths=len(geometry), passes=len(passes))
    return merger.merge_paths(passes, band)


def vgroove_preview(
    geometry: CutPaths, params: ToolpathParams, engine: PolygonEngine
) -> CutPaths:
    w = params.cut_width
    return engine.union(
        band_preview(geometry, w / 2, -w / 2, params, engine),
        open_preview(geometry, w, params, engine),
    )
