"""
Error types raised by the geodata engine.
"""

from typing import Optional


class GeodataError(Exception):
    """Base class for all geodata errors."""


class ParseError(GeodataError, ValueError):
    """Raised when a document is not valid JSON or not a valid FeatureCollection."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class EncodeError(GeodataError, ValueError):
    """Raised when a value cannot be written as canonical JSON."""


class DuplicateIdError(GeodataError, ValueError):
    """Raised when two sibling features share the same id."""

    def __init__(self, feature_id: str, path: Optional[str] = None):
        self.feature_id = feature_id
        self.path = path
        message = f"Duplicate ID: {feature_id}"
        super().__init__(f"{path}: {message}" if path else message)


class CoordinateError(GeodataError, ValueError):
    """Raised when a latitude or longitude cannot be understood."""


class InvalidNameWarning(UserWarning):
    """A file or folder name outside the allowed character class."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"{path} is not written using ASCII characters")
