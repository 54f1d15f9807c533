"""API routes for the property search service.

Endpoints:
- /properties/search: filtered, sorted, paginated listing search
- /properties/{id}: single listing CRUD (updates and deletes invalidate the
  listing's cached amenities)
- /properties/{id}/nearby-amenities: amenity lookup through the amenity cache
- /cache: amenity cache stats and clear (admin/testing)
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from propsearch.config import Settings
from propsearch.models import (
    AmenityType,
    AppError,
    ErrorCode,
    ErrorResponse,
    NearbyAmenitiesResponse,
    Pagination,
    Property,
    PropertyCreate,
    PropertyType,
    PropertyUpdate,
    SearchFilters,
    SearchResponse,
    SortField,
    SortOrder,
)
from propsearch.services import (
    AmenityCache,
    CacheStats,
    MissingCoordinatesError,
    PropertyNotFoundError,
    PropertyService,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class ApiResponse(BaseModel):
    success: bool = True
    data: Optional[Any] = None
    message: Optional[str] = None


class SearchApiResponse(ApiResponse):
    data: SearchResponse


class PropertyApiResponse(ApiResponse):
    data: Property


class AmenitiesApiResponse(ApiResponse):
    data: NearbyAmenitiesResponse


class CacheStatsApiResponse(ApiResponse):
    data: CacheStats


# ─── Dependencies (built once in the app lifespan) ───

def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_property_service(request: Request) -> PropertyService:
    return request.app.state.property_service


def get_amenity_cache(request: Request) -> AmenityCache:
    return request.app.state.amenity_cache


def error_response(
    status_code: int, code: ErrorCode, message: str, user_message: str
) -> JSONResponse:
    """Build the standard ``{"success": false, "error": {...}}`` envelope."""
    body = ErrorResponse(
        error=AppError(code=code, message=message, user_message=user_message)
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def not_found(e: PropertyNotFoundError) -> JSONResponse:
    return error_response(
        status.HTTP_404_NOT_FOUND,
        ErrorCode.NOT_FOUND,
        str(e),
        "Property not found.",
    )


def parse_amenity_types(raw: Optional[str]) -> list[AmenityType]:
    """Parse a comma-separated list of amenity types; empty means all.

    Raises:
        ValueError: If any entry is not a known amenity type.
    """
    if not raw or not raw.strip():
        return list(AmenityType)

    types = []
    for part in raw.split(","):
        name = part.strip().lower()
        if not name:
            continue
        try:
            types.append(AmenityType(name))
        except ValueError:
            raise ValueError(f"Unknown amenity type: {name}") from None
    return types or list(AmenityType)


@router.get("/properties/search", response_model=SearchApiResponse)
async def search_properties(
    city: Optional[str] = Query(None, max_length=100),
    min_price: Optional[int] = Query(None, ge=0),
    max_price: Optional[int] = Query(None, ge=0),
    property_type: Optional[PropertyType] = None,
    min_bedrooms: Optional[int] = Query(None, ge=0, le=20),
    sort_by: SortField = SortField.LISTED_DATE,
    sort_order: SortOrder = SortOrder.DESC,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    service: PropertyService = Depends(get_property_service),
    settings: Settings = Depends(get_settings_dep),
):
    """Search listings with filters and pagination."""
    if min_price is not None and max_price is not None and min_price > max_price:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            ErrorCode.INVALID_INPUT,
            "min_price cannot be greater than max_price",
            "Minimum price must not exceed maximum price.",
        )

    filters = SearchFilters(
        city=city,
        min_price=min_price,
        max_price=max_price,
        property_type=property_type,
        min_bedrooms=min_bedrooms,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    pagination = Pagination(page=page, limit=limit or settings.default_page_size)

    result = await service.search_properties(filters, pagination)
    return SearchApiResponse(
        data=result,
        message=f"Found {len(result.properties)} properties",
    )


@router.get("/properties/{property_id}", response_model=PropertyApiResponse)
async def get_property(
    property_id: str,
    service: PropertyService = Depends(get_property_service),
):
    try:
        prop = await service.get_property(property_id)
    except PropertyNotFoundError as e:
        return not_found(e)
    return PropertyApiResponse(data=prop)


@router.get(
    "/properties/{property_id}/nearby-amenities",
    response_model=AmenitiesApiResponse,
)
async def get_nearby_amenities(
    property_id: str,
    types: Optional[str] = Query(None, description="Comma-separated amenity types"),
    radius: Optional[int] = Query(None, ge=1, description="Search radius in meters"),
    service: PropertyService = Depends(get_property_service),
    settings: Settings = Depends(get_settings_dep),
):
    """Nearby amenities for a listing, served through the amenity cache."""
    try:
        amenity_types = parse_amenity_types(types)
    except ValueError as e:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            ErrorCode.INVALID_INPUT,
            str(e),
            f"Valid amenity types: {', '.join(t.value for t in AmenityType)}.",
        )

    if radius is not None and radius > settings.max_search_radius:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            ErrorCode.INVALID_INPUT,
            f"radius must be at most {settings.max_search_radius}",
            "Search radius is too large.",
        )

    try:
        result = await service.get_nearby_amenities(property_id, amenity_types, radius)
    except PropertyNotFoundError as e:
        return not_found(e)
    except MissingCoordinatesError as e:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            ErrorCode.MISSING_COORDINATES,
            str(e),
            "This property has no location on the map yet.",
        )

    return AmenitiesApiResponse(data=result)


@router.post(
    "/properties",
    response_model=PropertyApiResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_property(
    payload: PropertyCreate,
    service: PropertyService = Depends(get_property_service),
):
    prop = await service.create_property(payload)
    return PropertyApiResponse(data=prop, message="Property created successfully")


@router.put("/properties/{property_id}", response_model=PropertyApiResponse)
async def update_property(
    property_id: str,
    payload: PropertyUpdate,
    service: PropertyService = Depends(get_property_service),
):
    try:
        prop = await service.update_property(property_id, payload)
    except PropertyNotFoundError as e:
        return not_found(e)
    return PropertyApiResponse(data=prop, message="Property updated successfully")


@router.delete("/properties/{property_id}", response_model=ApiResponse)
async def delete_property(
    property_id: str,
    service: PropertyService = Depends(get_property_service),
):
    try:
        await service.delete_property(property_id)
    except PropertyNotFoundError as e:
        return not_found(e)
    return ApiResponse(message="Property deleted successfully")


@router.get("/cache/stats", response_model=CacheStatsApiResponse)
async def cache_stats(cache: AmenityCache = Depends(get_amenity_cache)):
    return CacheStatsApiResponse(data=cache.get_stats())


@router.delete("/cache", response_model=ApiResponse)
async def clear_cache(cache: AmenityCache = Depends(get_amenity_cache)):
    await cache.clear()
    return ApiResponse(message="Amenity cache cleared")
