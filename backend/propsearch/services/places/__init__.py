"""Places lookup service module.

Provides nearby amenity lookups around a property, backed by Google Maps
Platform or by canned mock data.
"""

from .service import (
    MAX_AMENITIES_PER_TYPE,
    GooglePlacesService,
    MockPlacesService,
    PlacesLookupError,
    PlacesService,
    create_places_service,
    rank_amenities,
)

__all__ = [
    "MAX_AMENITIES_PER_TYPE",
    "GooglePlacesService",
    "MockPlacesService",
    "PlacesLookupError",
    "PlacesService",
    "create_places_service",
    "rank_amenities",
]
