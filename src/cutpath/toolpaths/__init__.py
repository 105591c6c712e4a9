"""Toolpath generators, merging and holding tabs."""

from cutpath.toolpaths.base import GeneratorSpec, Operation, PathKind, ZMode
from cutpath.toolpaths.merge import GreedyMerge, MergeStrategy
from cutpath.toolpaths.raster import rasterise_convex
from cutpath.toolpaths.registry import (
    GENERATOR_REGISTRY,
    bb_bloat,
    generate_toolpaths,
    get_generator,
    preview_geometry,
)
from cutpath.toolpaths.tabs import split_path_over_tabs, split_paths_over_tabs

__all__ = [
    "GENERATOR_REGISTRY",
    "GeneratorSpec",
    "GreedyMerge",
    "MergeStrategy",
    "Operation",
    "PathKind",
    "ZMode",
    "bb_bloat",
    "generate_toolpaths",
    "get_generator",
    "preview_geometry",
    "rasterise_convex",
    "split_path_over_tabs",
    "split_paths_over_tabs",
]
