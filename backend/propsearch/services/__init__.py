"""Property Search Services.

Service layer components:
- Cache: two-tier amenity cache (in-memory, plus Redis when available)
- Places: nearby amenity lookups (Google Maps Platform or mock data)
- Properties: listing search, CRUD and amenity lookups through the cache
"""

from .cache import AmenityCache, CacheStats, create_amenity_cache
from .places import (
    GooglePlacesService,
    MockPlacesService,
    PlacesLookupError,
    PlacesService,
    create_places_service,
)
from .properties import (
    InMemoryPropertyRepository,
    MissingCoordinatesError,
    PropertyNotFoundError,
    PropertyRepository,
    PropertyService,
    sample_properties,
)

__all__ = [
    # Cache
    "AmenityCache",
    "CacheStats",
    "create_amenity_cache",
    # Places
    "GooglePlacesService",
    "MockPlacesService",
    "PlacesLookupError",
    "PlacesService",
    "create_places_service",
    # Properties
    "InMemoryPropertyRepository",
    "MissingCoordinatesError",
    "PropertyNotFoundError",
    "PropertyRepository",
    "PropertyService",
    "sample_properties",
]
