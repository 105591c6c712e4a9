"""
cutpath - toolpath geometry for 2D CNC machining

Turns closed polygons and open polylines into ordered, depth-tagged
toolpaths: pockets, outlines, engraving, v-grooves, drilling and
perforation, with optional holding tabs.
"""

__version__ = "0.1.0"

from cutpath.core.config import INTEGER_UNITS_PER_MM, ConfigManager, ToolpathParams
from cutpath.geometry.path import BBox3D, CutPath, CutPaths, CutPoint, Inside
from cutpath.toolpaths import (
    Operation,
    generate_toolpaths,
    preview_geometry,
    split_paths_over_tabs,
)

__all__ = [
    "INTEGER_UNITS_PER_MM",
    "BBox3D",
    "ConfigManager",
    "CutPath",
    "CutPaths",
    "CutPoint",
    "Inside",
    "Operation",
    "ToolpathParams",
    "generate_toolpaths",
    "preview_geometry",
    "split_paths_over_tabs",
]
