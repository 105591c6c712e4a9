"""Path model, polygon engine and convex partition."""

from cutpath.geometry.engine import (
    ClipType,
    EndType,
    FillRule,
    PolygonEngine,
    PyclipperEngine,
)
from cutpath.geometry.partition import convex_partition, group_polygons, is_convex
from cutpath.geometry.path import BBox3D, CutPath, CutPaths, CutPoint, Inside

__all__ = [
    "BBox3D",
    "ClipType",
    "CutPath",
    "CutPaths",
    "CutPoint",
    "EndType",
    "FillRule",
    "Inside",
    "PolygonEngine",
    "PyclipperEngine",
    "convex_partition",
    "group_polygons",
    "is_convex",
]
