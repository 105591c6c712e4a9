"""
Configuration management for cutpath.

Holds the integer-unit constants shared by the geometry engine, the
validated parameter record passed to every toolpath generator, and a
loader for operation presets stored as YAML.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from cutpath.core.exceptions import ConfigurationError, ParameterError

# Coordinates are scaled so that the polygon engine, which truncates to
# integers, does not introduce visible error.
INTEGER_UNITS_PER_MM = 100000

# Maximum deviation of a flattened arc from the true arc when offsetting
# with round joins or ends.
ARC_TOLERANCE = 0.06 * INTEGER_UNITS_PER_MM

# Vertices closer than this are merged when cleaning polygons.
CLEAN_POLY_DIST = 0.001 * INTEGER_UNITS_PER_MM

# Merge boundaries are grown by this much so that joining edges which start
# or end exactly on a pass are not vetoed by integer rounding.
BOUNDS_TOLERANCE = 10

# Smallest distance annular rings may shrink by from one ring to the next.
MIN_STEP_OVER = 1


class JoinType(str, Enum):
    """Corner join used when offsetting."""

    SQUARE = "square"  # Flatten acute joins
    ROUND = "round"  # Approximate acute joins with arc chords
    MITER = "miter"  # Extend joins, square off past the mitre limit


class PocketStrategy(str, Enum):
    """How the interior of a pocket is cleared."""

    ANNULAR = "Annular"
    X_RASTER = "XRaster"
    Y_RASTER = "YRaster"


class OffsetMode(str, Enum):
    """Where engraving and perforation sit relative to the path."""

    ON = "On"
    INSIDE = "Inside"
    OUTSIDE = "Outside"


# Numeric join types as used by the persisted operation records
_JOIN_TYPE_CODES = {0: JoinType.SQUARE, 1: JoinType.ROUND, 2: JoinType.MITER}


class ToolpathParams(BaseModel):
    """
    Parameters shared by every toolpath generator.

    All lengths and Z values are in integer units. Each generator reads
    the subset it needs; keys it does not know are ignored. Both the
    camelCase names (``cutterDiameter``) and the snake_case field names
    are accepted.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    cutter_diameter: Optional[float] = Field(default=None, gt=0)
    # Angle of the cutter edge from the axis of rotation; pi/2 is a flat end mill
    cutter_angle: float = Field(default=math.pi / 2, ge=0, le=math.pi)
    overlap: float = Field(default=0.0, ge=0, lt=1)
    climb: bool = False
    margin: float = 0.0
    width: float = Field(default=0.0, ge=0)
    spacing: float = Field(default=0.0, ge=0)
    join_type: Optional[JoinType] = None
    mitre_limit: float = Field(default=2.0, gt=0)
    arc_tolerance: float = Field(default=ARC_TOLERANCE, gt=0)
    top_z: float = 0.0
    bot_z: Optional[float] = None
    safe_z: Optional[float] = None
    cut_depth: Optional[float] = Field(default=None, ge=0)
    strategy: PocketStrategy = PocketStrategy.ANNULAR
    offset: OffsetMode = OffsetMode.ON

    @field_validator("join_type", mode="before")
    @classmethod
    def _join_type_code(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            if value not in _JOIN_TYPE_CODES:
                raise ValueError(f"unknown join type code {value}")
            return _JOIN_TYPE_CODES[value]
        if isinstance(value, str):
            return value.lower()
        return value

    @classmethod
    def from_mapping(
        cls, params: Union["ToolpathParams", Mapping[str, Any], None]
    ) -> "ToolpathParams":
        """
        Build a validated parameter record.

        Raises:
            ParameterError: If a value is non-numeric or out of range.
        """
        if isinstance(params, ToolpathParams):
            return params
        try:
            return cls.model_validate(dict(params or {}))
        except ValidationError as e:
            raise ParameterError(
                "Invalid toolpath parameters",
                details={"error": str(e)},
            ) from e

    def merged(self, **overrides: Any) -> "ToolpathParams":
        """Return a validated copy with some values replaced."""
        data = self.model_dump()
        data.update(overrides)
        return ToolpathParams.from_mapping(data)

    def missing(self, names: Iterable[str]) -> list[str]:
        """Names from ``names`` that have no value."""
        return [name for name in names if getattr(self, name) is None]

    @property
    def vbit(self) -> bool:
        """True when the cutter is a V-bit rather than a flat end mill."""
        return 0 < self.cutter_angle < math.pi / 2

    @property
    def step_over(self) -> float:
        """Distance between adjacent passes."""
        return self.cutter_diameter * (1 - self.overlap)

    @property
    def cut_width(self) -> float:
        """Requested path width, never narrower than the cutter."""
        return max(self.width, self.cutter_diameter)


class OperationPreset(BaseModel):
    """A named operation with stored parameters."""

    name: str
    operation: str
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)


@dataclass
class ConfigManager:
    """
    Loader for operation presets.

    Presets live in ``<config_dir>/operations/*.yaml``::

        preset:
          name: "Quarter inch pocket"
          operation: "Pocket"
        parameters:
          cutterDiameter: 635000
          overlap: 0.4
          strategy: "XRaster"

    Example:
        >>> config = ConfigManager(config_dir=Path("config"))
        >>> params = config.build_params("quarter_pocket", climb=True)
    """

    config_dir: Path
    _presets: dict[str, OperationPreset] = field(default_factory=dict, init=False)
    _loaded: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.config_dir = Path(self.config_dir)
        if not self.config_dir.exists():
            raise ConfigurationError(
                f"Configuration directory not found: {self.config_dir}"
            )

    def load(self) -> None:
        """Load all presets from disk."""
        self._load_presets()
        self._loaded = True

    def _load_presets(self) -> None:
        operations_dir = self.config_dir / "operations"
        if not operations_dir.exists():
            return

        for config_file in sorted(operations_dir.glob("*.yaml")):
            try:
                with open(config_file) as f:
                    data = yaml.safe_load(f)

                if data and "preset" in data:
                    preset_data = dict(data["preset"])
                    if "parameters" in data:
                        preset_data["parameters"] = data["parameters"] or {}
                    preset = OperationPreset(**preset_data)
                    # Fail at load time rather than at generation time
                    ToolpathParams.model_validate(preset.parameters)
                    self._presets[config_file.stem] = preset
            except (yaml.YAMLError, ValidationError) as e:
                raise ConfigurationError(
                    f"Failed to load operation preset: {config_file}",
                    details={"error": str(e)},
                )

    def get_preset(self, name: str) -> OperationPreset:
        """
        Get an operation preset by name.

        Args:
            name: Preset name (file name without .yaml extension)

        Raises:
            ConfigurationError: If the preset is not found
        """
        if not self._loaded:
            self.load()

        if name not in self._presets:
            available = list(self._presets.keys())
            raise ConfigurationError(
                f"Operation preset not found: {name}",
                details={"available": available},
            )
        return self._presets[name]

    def list_presets(self) -> list[str]:
        """List available preset names."""
        if not self._loaded:
            self.load()
        return list(self._presets.keys())

    def build_params(self, name: str, **overrides: Any) -> ToolpathParams:
        """Parameters of a preset with some values replaced."""
        preset = self.get_preset(name)
        data = dict(preset.parameters)
        data.update(overrides)
        return ToolpathParams.from_mapping(data)
