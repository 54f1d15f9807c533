"""Property storage.

The repository owns property records. ``InMemoryPropertyRepository`` keeps
them in a dict and is seeded with sample listings.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Optional
from uuid import uuid4

from propsearch.models import Property, PropertyCreate, PropertyUpdate


class PropertyRepository(ABC):
    """Abstract CRUD store for property listings."""

    @abstractmethod
    async def find_all(self) -> list[Property]:
        pass

    @abstractmethod
    async def get(self, property_id: str) -> Optional[Property]:
        pass

    @abstractmethod
    async def create(self, payload: PropertyCreate) -> Property:
        pass

    @abstractmethod
    async def update(self, property_id: str, payload: PropertyUpdate) -> Optional[Property]:
        """Apply the set fields of ``payload``. Returns None if not found."""
        pass

    @abstractmethod
    async def delete(self, property_id: str) -> bool:
        pass


class InMemoryPropertyRepository(PropertyRepository):
    def __init__(self, properties: Optional[list[Property]] = None) -> None:
        self._properties: dict[str, Property] = {p.id: p for p in properties or []}
        self._lock = asyncio.Lock()

    async def find_all(self) -> list[Property]:
        return list(self._properties.values())

    async def get(self, property_id: str) -> Optional[Property]:
        return self._properties.get(property_id)

    async def create(self, payload: PropertyCreate) -> Property:
        now = datetime.now(timezone.utc)
        prop = Property(
            **payload.model_dump(),
            id=uuid4().hex,
            listed_date=now.date(),
            created_at=now,
            updated_at=now,
        )
        async with self._lock:
            self._properties[prop.id] = prop
        return prop

    async def update(self, property_id: str, payload: PropertyUpdate) -> Optional[Property]:
        async with self._lock:
            current = self._properties.get(property_id)
            if current is None:
                return None
            changes = payload.model_dump(exclude_unset=True)
            merged = current.model_dump()
            merged.update(changes)
            merged["updated_at"] = datetime.now(timezone.utc)
            updated = Property.model_validate(merged)
            self._properties[property_id] = updated
            return updated

    async def delete(self, property_id: str) -> bool:
        async with self._lock:
            return self._properties.pop(property_id, None) is not None


def _listing(
    id: str,
    title: str,
    description: str,
    price: int,
    city: str,
    state: str,
    pincode: str,
    coordinates: Optional[tuple[float, float]],
    property_type: str,
    bedrooms: int,
    bathrooms: int,
    area: int,
    amenities: list[str],
    listed: date,
) -> Property:
    listed_at = datetime(listed.year, listed.month, listed.day, tzinfo=timezone.utc)
    return Property.model_validate(
        {
            "id": id,
            "title": title,
            "description": description,
            "price": price,
            "location": {
                "city": city,
                "state": state,
                "pincode": pincode,
                "coordinates": (
                    {"lat": coordinates[0], "lng": coordinates[1]} if coordinates else None
                ),
            },
            "property_type": property_type,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "area": area,
            "amenities": amenities,
            "images": [],
            "listed_date": listed,
            "created_at": listed_at,
            "updated_at": listed_at,
        }
    )


def sample_properties() -> list[Property]:
    """Seed listings for development and tests."""
    return [
        _listing(
            "1", "Luxury 3BHK Apartment in Bandra",
            "Spacious 3-bedroom apartment with modern amenities and sea view",
            15_000_000, "Mumbai", "Maharashtra", "400050", (19.0596, 72.8295),
            "apartment", 3, 2, 1200, ["Parking", "Gym", "Swimming Pool", "Security"],
            date(2024, 1, 15),
        ),
        _listing(
            "2", "Modern 2BHK House in Pune",
            "Beautiful house with garden and ample parking space",
            8_500_000, "Pune", "Maharashtra", "411001", (18.5204, 73.8567),
            "house", 2, 2, 1000, ["Parking", "Garden", "Security", "Power Backup"],
            date(2024, 1, 20),
        ),
        _listing(
            "3", "Spacious Villa in Goa",
            "Luxurious villa with private pool and beach access",
            25_000_000, "Goa", "Goa", "403001", (15.2993, 74.1240),
            "villa", 4, 3, 2500,
            ["Swimming Pool", "Garden", "Parking", "Security", "Beach Access"],
            date(2024, 1, 25),
        ),
        _listing(
            "4", "Commercial Space in Delhi",
            "Prime commercial property in business district",
            12_000_000, "Delhi", "Delhi", "110001", (28.7041, 77.1025),
            "office", 0, 2, 800, ["Parking", "Elevator", "Security", "Power Backup"],
            date(2024, 1, 30),
        ),
        _listing(
            "5", "Residential Plot in Bangalore",
            "Well-located plot for construction with all approvals",
            6_000_000, "Bangalore", "Karnataka", "560001", (12.9716, 77.5946),
            "land", 0, 0, 1500, ["Road Access", "Water Supply", "Electricity"],
            date(2024, 2, 1),
        ),
        _listing(
            "6", "Compact 1BHK Flat in Andheri",
            "Affordable starter home close to the metro, coordinates pending survey",
            5_500_000, "Mumbai", "Maharashtra", "400053", None,
            "apartment", 1, 1, 550, ["Security", "Elevator"],
            date(2024, 2, 5),
        ),
    ]
