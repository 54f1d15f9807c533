"""Property service.

Search, CRUD and nearby amenity lookups for property listings. Amenity
lookups read through the amenity cache; any update or delete of a listing
invalidates its cached amenities.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, Optional

from propsearch.config import Settings
from propsearch.models import (
    AmenityType,
    NearbyAmenitiesResponse,
    NearbyAmenity,
    Pagination,
    PaginationInfo,
    Property,
    PropertyCreate,
    PropertySummary,
    PropertyUpdate,
    SearchFilters,
    SearchResponse,
    SortField,
    SortOrder,
)
from propsearch.services.cache import AmenityCache
from propsearch.services.places import PlacesLookupError, PlacesService

from .repository import PropertyRepository

logger = logging.getLogger(__name__)


class PropertyNotFoundError(Exception):
    def __init__(self, property_id: str) -> None:
        super().__init__(f"Property not found: {property_id}")
        self.property_id = property_id


class MissingCoordinatesError(Exception):
    def __init__(self, property_id: str) -> None:
        super().__init__(f"Property coordinates not available: {property_id}")
        self.property_id = property_id


def matches_filters(prop: Property, filters: SearchFilters) -> bool:
    """Check a listing against every set filter."""
    if filters.city and filters.city.lower() not in prop.location.city.lower():
        return False
    if filters.min_price is not None and prop.price < filters.min_price:
        return False
    if filters.max_price is not None and prop.price > filters.max_price:
        return False
    if filters.property_type and prop.property_type != filters.property_type:
        return False
    if filters.min_bedrooms is not None and prop.bedrooms < filters.min_bedrooms:
        return False
    return True


class PropertyService:
    """Listing operations over a repository, a places provider and the cache.

    Attributes:
        _repository: Owner of property records.
        _places: Upstream places lookup, called only on cache misses.
        _cache: Process-wide amenity cache.
        _settings: Radius and pagination limits, amenity TTL.
    """

    def __init__(
        self,
        repository: PropertyRepository,
        places: PlacesService,
        cache: AmenityCache,
        settings: Settings,
    ) -> None:
        self._repository = repository
        self._places = places
        self._cache = cache
        self._settings = settings

    async def search_properties(
        self, filters: SearchFilters, pagination: Pagination
    ) -> SearchResponse:
        """Filter, sort and paginate listings."""
        limit = min(pagination.limit, self._settings.max_page_size)
        matching = [p for p in await self._repository.find_all() if matches_filters(p, filters)]

        if filters.sort_by == SortField.PRICE:
            sort_key = lambda p: p.price  # noqa: E731
        else:
            sort_key = lambda p: p.listed_date  # noqa: E731
        matching.sort(key=sort_key, reverse=filters.sort_order == SortOrder.DESC)

        total = len(matching)
        total_pages = math.ceil(total / limit) if total else 0
        start = (pagination.page - 1) * limit
        page_items = matching[start:start + limit]

        return SearchResponse(
            properties=page_items,
            pagination=PaginationInfo(
                current_page=pagination.page,
                total_pages=total_pages,
                total_properties=total,
                has_next=pagination.page < total_pages,
                has_prev=pagination.page > 1,
            ),
        )

    async def get_property(self, property_id: str) -> Property:
        prop = await self._repository.get(property_id)
        if prop is None:
            raise PropertyNotFoundError(property_id)
        return prop

    async def create_property(self, payload: PropertyCreate) -> Property:
        prop = await self._repository.create(payload)
        logger.info(f"[PROPERTY] Created {prop.id}")
        return prop

    async def update_property(self, property_id: str, payload: PropertyUpdate) -> Property:
        prop = await self._repository.update(property_id, payload)
        if prop is None:
            raise PropertyNotFoundError(property_id)
        await self._cache.invalidate(property_id)
        logger.info(f"[PROPERTY] Updated {property_id}")
        return prop

    async def delete_property(self, property_id: str) -> None:
        if not await self._repository.delete(property_id):
            raise PropertyNotFoundError(property_id)
        await self._cache.invalidate(property_id)
        logger.info(f"[PROPERTY] Deleted {property_id}")

    async def get_nearby_amenities(
        self,
        property_id: str,
        amenity_types: Iterable[AmenityType],
        radius: Optional[int] = None,
    ) -> NearbyAmenitiesResponse:
        """Nearby amenities per type, served from cache where possible.

        A failed lookup for one type yields an empty list for that type
        without affecting the others.

        Raises:
            PropertyNotFoundError: Unknown property id.
            MissingCoordinatesError: The listing has no coordinates.
        """
        radius = radius or self._settings.default_search_radius
        prop = await self.get_property(property_id)
        coordinates = prop.location.coordinates
        if coordinates is None:
            raise MissingCoordinatesError(property_id)

        results: dict[AmenityType, list[NearbyAmenity]] = {}
        for amenity_type in dict.fromkeys(amenity_types):
            cached = await self._cache.get(property_id, amenity_type, radius)
            if cached is not None:
                results[amenity_type] = cached
                continue

            try:
                amenities = await self._places.nearby_amenities(coordinates, amenity_type, radius)
            except PlacesLookupError as e:
                logger.error(f"[AMENITIES] {amenity_type.value} lookup failed for {property_id}: {e}")
                results[amenity_type] = []
                continue

            await self._cache.set(
                property_id,
                amenity_type,
                amenities,
                ttl_seconds=self._settings.amenity_cache_ttl,
                radius=radius,
            )
            results[amenity_type] = amenities

        return NearbyAmenitiesResponse(
            property=PropertySummary(id=prop.id, title=prop.title, coordinates=coordinates),
            amenities=results,
            search_radius=radius,
            timestamp=datetime.now(timezone.utc),
        )
