"""Property listing service module."""

from .repository import InMemoryPropertyRepository, PropertyRepository, sample_properties
from .service import (
    MissingCoordinatesError,
    PropertyNotFoundError,
    PropertyService,
    matches_filters,
)

__all__ = [
    "InMemoryPropertyRepository",
    "PropertyRepository",
    "sample_properties",
    "MissingCoordinatesError",
    "PropertyNotFoundError",
    "PropertyService",
    "matches_filters",
]
