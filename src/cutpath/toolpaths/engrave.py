"""
Engraving along paths.

``offset`` chooses where the engraved band sits: centred on the path
("On"), or on one side of it starting ``margin`` away ("Inside",
"Outside"). Closed paths are cut in stepped passes across the band; open
paths are followed directly. Each input path is merged on its own.
"""

from cutpath.core.config import OffsetMode, ToolpathParams
from cutpath.core.logging import get_logger
from cutpath.geometry.engine import PolygonEngine
from cutpath.geometry.path import CutPath, CutPaths
from cutpath.toolpaths.base import (
    band_preview,
    open_preview,
    reverse_all,
    stepped_passes,
    swept_band,
)
from cutpath.toolpaths.merge import MergeStrategy

logger = get_logger(__name__)


def engrave_limits(params: ToolpathParams) -> tuple[float, float]:
    """Offsets of the first and last pass for a closed path."""
    d = params.cutter_diameter
    w = params.cut_width
    if params.offset is OffsetMode.ON:
        return (w - d) / 2, -(w - d) / 2
    sign = 1 if params.offset is OffsetMode.OUTSIDE else -1
    return sign * (params.margin + d / 2), sign * (params.margin + w - d / 2)


def engrave_path(
    path: CutPath, params: ToolpathParams, engine: PolygonEngine
) -> tuple[CutPaths, CutPaths | None]:
    """Passes and merge boundary for one input path."""
    if not path.is_closed:
        passes = CutPaths([path])
        band = None
    else:
        first, last = engrave_limits(params)
        geometry = CutPaths([path])
        passes = stepped_passes(geometry, first, last, params, engine)
        band = swept_band(geometry, first, last, params, engine)
    if not params.climb:
        passes = reverse_all(passes)
    return passes, band


def engrave(
    geometry: CutPaths,
    params: ToolpathParams,
    engine: PolygonEngine,
    merger: MergeStrategy,
) -> CutPaths:
    toolpaths = CutPaths()
    for path in geometry:
        passes, band = engrave_path(path, params, engine)
        toolpaths.extend(merger.merge_paths(passes, band))
    logger.debug("engrave", paths=len(geometry), toolpaths=len(toolpaths), offset=params.offset.value)
    return toolpaths


def engrave_preview(
    geometry: CutPaths, params: ToolpathParams, engine: PolygonEngine
) -> CutPaths:
    w = params.cut_width
    if params.offset is OffsetMode.ON:
        closed = band_preview(geometry, w / 2, -w / 2, params, engine)
    elif params.offset is OffsetMode.OUTSIDE:
        closed = band_preview(geometry, params.margin + w, params.margin, params, engine)
    else:
        closed = band_preview(geometry, -params.margin, -(params.margin + w), params, engine)
    return engine.union(closed, open_preview(geometry, w, params, engine))
