"""
Custom exceptions for cutpath.

All cutpath exceptions inherit from CutPathError for easy catching.
Errors raised by the polygon engine (pyclipper) are not wrapped.
"""

from typing import Any


class CutPathError(Exception):
    """Base exception for all cutpath errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(CutPathError):
    """Raised when configuration is invalid or missing."""

    pass


class ParameterError(CutPathError):
    """Raised when a generator is called with missing or out-of-range parameters."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation


class GeometryError(CutPathError):
    """Raised when a path is used in a way its kind does not support."""

    pass
