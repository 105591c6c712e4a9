"""
Registry of toolpath operations.

Maps each ``Operation`` to its ``GeneratorSpec`` and provides the entry
points used by callers: ``generate_toolpaths`` to compute toolpaths,
``preview_geometry`` for the area an operation will touch, and
``bb_bloat`` for bounding-box margins.
"""

from typing import Any, Dict, Mapping, Optional, Union

from pydantic.alias_generators import to_camel

from cutpath.core.config import ToolpathParams
from cutpath.core.exceptions import ParameterError
from cutpath.core.logging import get_logger, operation_context
from cutpath.geometry.engine import PolygonEngine, PyclipperEngine
from cutpath.geometry.path import CutPaths
from cutpath.toolpaths.base import (
    GeneratorSpec,
    Operation,
    PathKind,
    ZMode,
    full_bloat,
    half_bloat,
    no_bloat,
)
from cutpath.toolpaths.drill import drill, drill_preview, perforate, perforate_preview
from cutpath.toolpaths.engrave import engrave, engrave_preview
from cutpath.toolpaths.merge import GreedyMerge, MergeStrategy
from cutpath.toolpaths.outline import inside, inside_preview, outside, outside_preview
from cutpath.toolpaths.pocket import annular_pocket, pocket, pocket_preview, raster_pocket
from cutpath.toolpaths.vgroove import vgroove, vgroove_preview

logger = get_logger(__name__)

ParamsLike = Union[ToolpathParams, Mapping[str, Any], None]

# Operation -> generator description
GENERATOR_REGISTRY: Dict[Operation, GeneratorSpec] = {
    spec.operation: spec
    for spec in (
        GeneratorSpec(
            Operation.ANNULAR_POCKET, PathKind.CLOSED, ZMode.VBIT,
            ("cutter_diameter",), annular_pocket, pocket_preview, no_bloat,
            "Clear closed areas with concentric rings",
        ),
        GeneratorSpec(
            Operation.RASTER_POCKET, PathKind.CLOSED, ZMode.NONE,
            ("cutter_diameter",), raster_pocket, pocket_preview, no_bloat,
            "Clear closed areas with horizontal rasters",
        ),
        GeneratorSpec(
            Operation.POCKET, PathKind.CLOSED, ZMode.VBIT,
            ("cutter_diameter",), pocket, pocket_preview, no_bloat,
            "Clear closed areas, annular or raster",
        ),
        GeneratorSpec(
            Operation.INSIDE, PathKind.CLOSED, ZMode.NONE,
            ("cutter_diameter",), inside, inside_preview, no_bloat,
            "Cut along the inside of closed paths",
        ),
        GeneratorSpec(
            Operation.OUTSIDE, PathKind.CLOSED, ZMode.NONE,
            ("cutter_diameter",), outside, outside_preview, full_bloat,
            "Cut along the outside of closed paths",
        ),
        GeneratorSpec(
            Operation.ENGRAVE, PathKind.ALL, ZMode.NONE,
            ("cutter_diameter",), engrave, engrave_preview, full_bloat,
            "Engrave on, inside or outside paths",
        ),
        GeneratorSpec(
            Operation.VGROOVE, PathKind.ALL, ZMode.NONE,
            ("cutter_diameter",), vgroove, vgroove_preview, no_bloat,
            "Cut a groove centred on paths",
        ),
        GeneratorSpec(
            Operation.PERFORATE, PathKind.ALL, ZMode.ALWAYS,
            ("cutter_diameter", "safe_z", "bot_z"), perforate, perforate_preview, full_bloat,
            "Drill evenly spaced holes along paths",
        ),
        GeneratorSpec(
            Operation.DRILL, PathKind.ALL, ZMode.ALWAYS,
            ("safe_z", "bot_z"), drill, drill_preview, half_bloat,
            "Drill a hole at every vertex",
        ),
    )
}


def get_generator(operation: Union[str, Operation]) -> GeneratorSpec:
    """
    Look up the generator for an operation.

    Raises:
        ParameterError: If the operation is unknown.
    """
    return GENERATOR_REGISTRY[Operation.parse(operation)]


def _checked_params(spec: GeneratorSpec, params: ParamsLike) -> ToolpathParams:
    params = ToolpathParams.from_mapping(params)
    missing = params.missing(spec.required)
    if missing:
        names = [to_camel(name) for name in missing]
        raise ParameterError(
            f"{spec.operation.value} requires {', '.join(names)}",
            operation=spec.operation.value,
            details={"missing": names},
        )
    return params


def generate_toolpaths(
    operation: Union[str, Operation],
    geometry: CutPaths,
    params: ParamsLike,
    engine: Optional[PolygonEngine] = None,
    merger: Optional[MergeStrategy] = None,
) -> CutPaths:
    """
    Compute toolpaths for an operation.

    Paths of a kind the operation does not work on are ignored. Empty or
    degenerate geometry gives an empty result rather than an error.

    Args:
        operation: Operation name or ``Operation``
        geometry: Operand paths, in integer units
        params: ``ToolpathParams`` or a mapping of parameter values
        engine: Polygon engine, ``PyclipperEngine`` by default
        merger: Merge strategy, ``GreedyMerge`` by default

    Raises:
        ParameterError: If the operation is unknown or a required parameter
            is missing or invalid.

    Example:
        >>> square = CutPaths([CutPath.from_xy([(0, 0), (10, 0), (10, 10), (0, 10)], True)])
        >>> toolpaths = generate_toolpaths("Inside", square, {"cutterDiameter": 1})
    """
    spec = get_generator(operation)
    params = _checked_params(spec, params)
    paths = CutPaths([p for p in geometry if spec.kinds.accepts(p) and len(p) > 0])
    if not paths:
        logger.debug("generate_toolpaths_empty", operation=spec.operation.value)
        return CutPaths()

    engine = engine or PyclipperEngine()
    merger = merger or GreedyMerge(engine)
    with operation_context(spec.operation.value):
        result = spec.generate(paths, params, engine, merger)
        logger.debug("generate_toolpaths", paths_in=len(paths), paths_out=len(result))
    return result


def preview_geometry(
    operation: Union[str, Operation],
    geometry: CutPaths,
    params: ParamsLike,
    engine: Optional[PolygonEngine] = None,
) -> CutPaths:
    """Closed polygons covering the area the operation will touch."""
    spec = get_generator(operation)
    params = _checked_params(spec, params)
    paths = CutPaths([p for p in geometry if spec.kinds.accepts(p) and len(p) > 0])
    if not paths:
        return CutPaths()
    with operation_context(spec.operation.value, preview=True):
        return spec.preview(paths, params, engine or PyclipperEngine())


def bb_bloat(operation: Union[str, Operation], width: float) -> float:
    """Margin to add around the geometry's bounding box for this operation."""
    return get_generator(operation).bloat(width)
