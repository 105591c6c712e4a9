"""
Holding tabs.

A tab is an area where the cutter must stay above ``tab_z`` so the work
piece stays attached to the stock. A finished toolpath is split where it
enters and leaves tabs; the parts outside tabs are cut at ``cut_z`` and the
parts over tabs at ``tab_z``. Depths already on the path are never pushed
deeper than the assigned depth.
"""

from typing import Optional

from cutpath.core.logging import get_logger
from cutpath.geometry.engine import ClipType, FillRule, PolygonEngine, PyclipperEngine
from cutpath.geometry.path import CutPath, CutPaths
from cutpath.toolpaths.merge import GreedyMerge, MergeStrategy

logger = get_logger(__name__)


def split_path_over_tabs(
    tool_path: CutPath,
    tabs: CutPaths,
    cut_z: float,
    tab_z: float,
    engine: Optional[PolygonEngine] = None,
    merger: Optional[MergeStrategy] = None,
) -> CutPaths:
    """
    Split one toolpath into segments at cut depth and segments over tabs.

    Args:
        tool_path: Path to split; a closed path is followed all the way
            round back to its start
        tabs: Closed tab outlines, filled non-zero
        cut_z: Depth outside tabs
        tab_z: Depth over tabs
        engine: Polygon engine, ``PyclipperEngine`` by default
        merger: Used to put the segments back in path order

    Returns:
        Open segments, in the order the cutter meets them starting from
        the first vertex of ``tool_path``. Every vertex has a Z.
    """
    path = tool_path.closed_explicitly()
    if len(path) == 0:
        return CutPaths()
    if len(tabs.closed()) == 0 or len(path.unduplicated()) < 2:
        return CutPaths([path.clamp_z(cut_z)])

    engine = engine or PyclipperEngine()
    merger = merger or GreedyMerge(engine)
    subject = CutPaths([path])
    cut = engine.clip_open(subject, tabs, ClipType.DIFFERENCE, FillRule.NON_ZERO)
    over = engine.clip_open(subject, tabs, ClipType.INTERSECTION, FillRule.NON_ZERO)

    pieces = cut.clamp_z(cut_z)
    pieces.extend(over.clamp_z(tab_z))
    logger.debug("split_over_tabs", cut_segments=len(cut), tab_segments=len(over))
    return merger.sort_paths(pieces, match_z=True, start=path[0])


def split_paths_over_tabs(
    tool_paths: CutPaths,
    tabs: CutPaths,
    cut_z: float,
    tab_z: float,
    engine: Optional[PolygonEngine] = None,
    merger: Optional[MergeStrategy] = None,
) -> CutPaths:
    """Apply ``split_path_over_tabs`` to every path in turn."""
    engine = engine or PyclipperEngine()
    merger = merger or GreedyMerge(engine)
    result = CutPaths()
    for path in tool_paths:
        result.extend(split_path_over_tabs(path, tabs, cut_z, tab_z, engine, merger))
    return result
