"""
Inside and outside outlines of closed geometry.

The cutter follows the boundary at a distance, in as many passes as it
takes to cut a path ``width`` wide. Moves between passes are allowed only
inside the band the cutter centre sweeps.
"""

from cutpath.core.config import ToolpathParams
from cutpath.core.logging import get_logger
from cutpath.geometry.engine import PolygonEngine
from cutpath.geometry.path import CutPaths
from cutpath.toolpaths.base import band_preview, reverse_all, stepped_passes, swept_band
from cutpath.toolpaths.merge import MergeStrategy

logger = get_logger(__name__)


def outline_passes(
    geometry: CutPaths,
    params: ToolpathParams,
    engine: PolygonEngine,
    outside: bool,
) -> tuple[CutPaths, CutPaths]:
    """
    Passes for an inside or outside outline.

    Returns:
        ``(passes, band)``; the band is the merge boundary.
    """
    closed = geometry.closed()
    d = params.cutter_diameter
    sign = 1 if outside else -1
    first = sign * (d / 2 + params.margin)
    last = sign * (params.cut_width - d / 2 + params.margin)

    passes = stepped_passes(closed, first, last, params, engine)
    band = swept_band(closed, first, last, params, engine)
    # Inside reverses when climbing, outside when not
    if params.climb != outside:
        passes = reverse_all(passes)
    return passes, band


def inside(
    geometry: CutPaths,
    params: ToolpathParams,
    engine: PolygonEngine,
    merger: MergeStrategy,
) -> CutPaths:
    passes, band = outline_passes(geometry, params, engine, outside=False)
    logger.debug("inside", paths=len(geometry), passes=len(passes))
    return merger.merge_paths(passes, band)


def outside(
    geometry: CutPaths,
    params: ToolpathParams,
    engine: PolygonEngine,
    merger: MergeStrategy,
) -> CutPaths:
    passes, band = outline_passes(geometry, params, engine, outside=True)
    logger.debug("outside", paths=len(geometry), passes=len(passes))
    return merger.merge_paths(passes, band)


def inside_preview(
    geometry: CutPaths, params: ToolpathParams, engine: PolygonEngine
) -> CutPaths:
    return band_preview(
        geometry, -params.margin, -(params.margin + params.cut_width), params, engine
    )


def outside_preview(
    geometry: CutPaths, params: ToolpathParams, engine: PolygonEngine
) -> CutPaths:
    return band_preview(
        geometry, params.margin + params.cut_width, params.margin, params, engine
    )
