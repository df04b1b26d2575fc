"""
Error types raised by terrainwave.

All errors are local validation failures raised at the call that received the
bad parameter. They derive from ``ValueError`` so callers that already guard
numeric setup code with ``except ValueError`` keep working.
"""


class TerrainwaveError(ValueError):
    """Base class for terrainwave parameter errors."""


class InvalidDimensions(TerrainwaveError):
    """Raised for non-positive, non-finite or oversized sizes and grid counts."""


class InvalidDivisions(InvalidDimensions):
    """Raised when a mesh is requested with zero subdivisions."""


class InvalidProjection(TerrainwaveError):
    """Raised for perspective parameters that cannot form a projection."""


class InvalidSeed(TerrainwaveError):
    """Raised when a noise generator is given a missing or unusable seed."""


__all__ = [
    "TerrainwaveError",
    "InvalidDimensions",
    "InvalidDivisions",
    "InvalidProjection",
    "InvalidSeed",
]
