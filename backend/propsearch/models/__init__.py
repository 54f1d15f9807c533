"""Pydantic models for the property search API."""

from .core import (
    AmenityType,
    Coordinates,
    Location,
    NearbyAmenitiesResponse,
    NearbyAmenity,
    Pagination,
    PaginationInfo,
    Property,
    PropertyCreate,
    PropertyStatus,
    PropertySummary,
    PropertyType,
    PropertyUpdate,
    SearchFilters,
    SearchResponse,
    SortField,
    SortOrder,
)
from .errors import AppError, ErrorCode, ErrorResponse

__all__ = [
    "AmenityType",
    "Coordinates",
    "Location",
    "NearbyAmenitiesResponse",
    "NearbyAmenity",
    "Pagination",
    "PaginationInfo",
    "Property",
    "PropertyCreate",
    "PropertyStatus",
    "PropertySummary",
    "PropertyType",
    "PropertyUpdate",
    "SearchFilters",
    "SearchResponse",
    "SortField",
    "SortOrder",
    "AppError",
    "ErrorCode",
    "ErrorResponse",
]
