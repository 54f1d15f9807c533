"""Core data models for the property search API.

This module contains the Pydantic models used throughout the application
for representing coordinates, property listings, search parameters and
nearby amenities.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AmenityType(str, Enum):
    """Kinds of nearby points of interest that can be looked up."""

    HOSPITAL = "hospital"
    SCHOOL = "school"
    RESTAURANT = "restaurant"
    SHOPPING_MALL = "shopping_mall"
    BANK = "bank"
    GAS_STATION = "gas_station"
    PHARMACY = "pharmacy"
    GYM = "gym"
    PARK = "park"
    BUS_STATION = "bus_station"
    TRAIN_STATION = "train_station"
    AIRPORT = "airport"


class PropertyType(str, Enum):
    APARTMENT = "apartment"
    HOUSE = "house"
    VILLA = "villa"
    OFFICE = "office"
    LAND = "land"


class PropertyStatus(str, Enum):
    AVAILABLE = "available"
    SOLD = "sold"
    RENTED = "rented"
    UNDER_NEGOTIATION = "under_negotiation"


class SortField(str, Enum):
    PRICE = "price"
    LISTED_DATE = "listed_date"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Coordinates(BaseModel):
    """Geographic coordinates with validation.

    Latitude must be between -90 and 90 degrees.
    Longitude must be between -180 and 180 degrees.
    """

    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class NearbyAmenity(BaseModel):
    """A point of interest near a property.

    Lists of these are what the amenity cache stores, already sorted by
    ``distance`` and capped by the places service.
    """

    type: AmenityType = Field(..., description="Amenity category")
    name: str = Field(..., min_length=1, description="Display name of the place")
    address: str = Field(default="", description="Formatted address")
    distance: int = Field(..., ge=0, description="Travel distance in meters")
    duration: int = Field(..., ge=0, description="Travel duration in seconds")
    place_id: str = Field(..., min_length=1, description="Provider place identifier")
    rating: Optional[float] = Field(None, ge=0, le=5, description="Average rating")
    user_ratings_total: Optional[int] = Field(
        None, ge=0, description="Number of ratings"
    )
    coordinates: Coordinates = Field(..., description="Geographic location")


class Location(BaseModel):
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    pincode: str = Field(..., pattern=r"^\d{6}$", description="6-digit postal code")
    coordinates: Optional[Coordinates] = None


class PropertyBase(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    price: int = Field(..., ge=0, description="Listing price")
    location: Location
    property_type: PropertyType
    bedrooms: int = Field(..., ge=0, le=20)
    bathrooms: int = Field(..., ge=0, le=20)
    area: int = Field(..., gt=0, description="Area in square feet")
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    status: PropertyStatus = PropertyStatus.AVAILABLE


class PropertyCreate(PropertyBase):
    """Payload for creating a listing."""


class PropertyUpdate(BaseModel):
    """Partial update payload; unset fields are left untouched."""

    title: Optional[str] = Field(None, min_length=5, max_length=200)
    description: Optional[str] = Field(None, min_length=10, max_length=2000)
    price: Optional[int] = Field(None, ge=0)
    location: Optional[Location] = None
    property_type: Optional[PropertyType] = None
    bedrooms: Optional[int] = Field(None, ge=0, le=20)
    bathrooms: Optional[int] = Field(None, ge=0, le=20)
    area: Optional[int] = Field(None, gt=0)
    amenities: Optional[list[str]] = None
    images: Optional[list[str]] = None
    status: Optional[PropertyStatus] = None


class Property(PropertyBase):
    """A stored property listing."""

    id: str = Field(..., min_length=1, description="Listing identifier")
    listed_date: date
    created_at: datetime
    updated_at: datetime


class SearchFilters(BaseModel):
    """Filters for property search. All are optional."""

    city: Optional[str] = None
    min_price: Optional[int] = Field(None, ge=0)
    max_price: Optional[int] = Field(None, ge=0)
    property_type: Optional[PropertyType] = None
    min_bedrooms: Optional[int] = Field(None, ge=0)
    sort_by: SortField = SortField.LISTED_DATE
    sort_order: SortOrder = SortOrder.DESC


class Pagination(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)


class PaginationInfo(BaseModel):
    current_page: int
    total_pages: int
    total_properties: int
    has_next: bool
    has_prev: bool


class SearchResponse(BaseModel):
    properties: list[Property]
    pagination: PaginationInfo


class PropertySummary(BaseModel):
    id: str
    title: str
    coordinates: Coordinates


class NearbyAmenitiesResponse(BaseModel):
    """Nearby amenities grouped by category for one property."""

    property: PropertySummary
    amenities: dict[AmenityType, list[NearbyAmenity]] = Field(default_factory=dict)
    search_radius: int = Field(..., gt=0, description="Search radius in meters")
    timestamp: datetime
