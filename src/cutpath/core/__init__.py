"""Configuration, error types and logging."""

from cutpath.core.config import ConfigManager, ToolpathParams
from cutpath.core.exceptions import (
    ConfigurationError,
    CutPathError,
    GeometryError,
    ParameterError,
)

__all__ = [
    "ConfigManager",
    "ToolpathParams",
    "CutPathError",
    "ConfigurationError",
    "ParameterError",
    "GeometryError",
]
