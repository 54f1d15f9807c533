"""Places lookup services.

Given a coordinate, an amenity type and a radius, return the nearest points
of interest with travel distance and duration, sorted by distance and capped
at ``MAX_AMENITIES_PER_TYPE``.

- GooglePlacesService: Google Places Nearby Search + Distance Matrix (paid,
  needs ``GOOGLE_MAPS_API_KEY``)
- MockPlacesService: canned places around the location, used when no key is
  configured
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from propsearch.config import Settings
from propsearch.models import AmenityType, Coordinates, NearbyAmenity
from propsearch.utils.geo import haversine_distance

logger = logging.getLogger(__name__)

MAX_AMENITIES_PER_TYPE = 10

# Average urban driving speed used to estimate durations (~30 km/h)
MOCK_SPEED_MPS = 8.33


class PlacesLookupError(Exception):
    """The upstream places provider failed or returned an error status."""


def rank_amenities(amenities: list[NearbyAmenity]) -> list[NearbyAmenity]:
    """Sort by distance ascending and keep the closest few."""
    return sorted(amenities, key=lambda a: a.distance)[:MAX_AMENITIES_PER_TYPE]


class PlacesService(ABC):
    """Abstract places lookup."""

    @abstractmethod
    async def nearby_amenities(
        self,
        location: Coordinates,
        amenity_type: AmenityType,
        radius: int,
    ) -> list[NearbyAmenity]:
        """Find amenities of one type around ``location``.

        Args:
            location: Origin coordinates (the property).
            amenity_type: Category to search for.
            radius: Search radius in meters.

        Returns:
            Amenities sorted by distance, at most MAX_AMENITIES_PER_TYPE.

        Raises:
            PlacesLookupError: If the provider cannot be queried.
        """
        pass

    async def close(self) -> None:
        pass


# (name suffix, address, lat offset, lng offset, rating, ratings total)
_MOCK_LAYOUT = [
    ("Central", "Main Road", 0.001, 0.001, 4.2, 156),
    ("City", "Station Road", 0.004, -0.002, 4.5, 89),
    ("Lakeside", "Lake View Avenue", -0.006, 0.005, 3.9, 41),
    ("Metro", "Ring Road", 0.012, 0.010, 4.0, 203),
]

_MOCK_NAMES = {
    AmenityType.HOSPITAL: "Hospital",
    AmenityType.SCHOOL: "Public School",
    AmenityType.RESTAURANT: "Restaurant",
    AmenityType.SHOPPING_MALL: "Shopping Centre",
    AmenityType.BANK: "Bank",
    AmenityType.GAS_STATION: "Fuel Station",
    AmenityType.PHARMACY: "Pharmacy",
    AmenityType.GYM: "Fitness Club",
    AmenityType.PARK: "Park",
    AmenityType.BUS_STATION: "Bus Stand",
    AmenityType.TRAIN_STATION: "Railway Station",
    AmenityType.AIRPORT: "Airport",
}


class MockPlacesService(PlacesService):
    """Deterministic canned places offset around the requested location."""

    async def nearby_amenities(
        self,
        location: Coordinates,
        amenity_type: AmenityType,
        radius: int,
    ) -> list[NearbyAmenity]:
        amenities = []
        for index, (prefix, street, dlat, dlng, rating, total) in enumerate(_MOCK_LAYOUT):
            lat = max(-90.0, min(90.0, location.lat + dlat))
            lng = max(-180.0, min(180.0, location.lng + dlng))
            distance = round(haversine_distance(location.lat, location.lng, lat, lng))
            if distance > radius:
                continue
            amenities.append(
                NearbyAmenity(
                    type=amenity_type,
                    name=f"{prefix} {_MOCK_NAMES[amenity_type]}",
                    address=f"{street}, near property",
                    distance=distance,
                    duration=round(distance / MOCK_SPEED_MPS),
                    place_id=f"mock_{amenity_type.value}_{index + 1}",
                    rating=rating,
                    user_ratings_total=total,
                    coordinates=Coordinates(lat=lat, lng=lng),
                )
            )
        return rank_amenities(amenities)


class GooglePlacesService(PlacesService):
    """Google Maps Platform client.

    One Nearby Search request finds candidate places, then one Distance
    Matrix request gets driving distance and duration to all of them.
    """

    NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
    DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key cannot be empty")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _get_json(self, client: httpx.AsyncClient, url: str, params: dict) -> dict:
        try:
            response = await client.get(url, params={**params, "key": self._api_key})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PlacesLookupError(f"Request to {url} failed: {e}") from e

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            raise PlacesLookupError(
                f"Google Maps returned {status}: {data.get('error_message', '')}".strip()
            )
        return data

    async def nearby_amenities(
        self,
        location: Coordinates,
        amenity_type: AmenityType,
        radius: int,
    ) -> list[NearbyAmenity]:
        origin = f"{location.lat},{location.lng}"

        async with self._get_client() as client:
            places_data = await self._get_json(
                client,
                self.NEARBY_SEARCH_URL,
                {"location": origin, "radius": radius, "type": amenity_type.value},
            )
            places = [
                p for p in places_data.get("results", [])
                if isinstance(p, dict) and p.get("place_id") and _place_point(p)
            ]
            if not places:
                return []

            destinations = "|".join(
                f"{_place_point(p)['lat']},{_place_point(p)['lng']}" for p in places
            )
            matrix = await self._get_json(
                client,
                self.DISTANCE_MATRIX_URL,
                {
                    "origins": origin,
                    "destinations": destinations,
                    "units": "metric",
                    "mode": "driving",
                },
            )

        try:
            amenities = _build_amenities(amenity_type, places, matrix)
        except (KeyError, TypeError, AttributeError, IndexError, ValueError) as e:
            raise PlacesLookupError(f"Malformed Google Maps response: {e!r}") from e

        logger.info(
            f"[PLACES] {len(amenities)} {amenity_type.value} results within {radius}m of {origin}"
        )
        return rank_amenities(amenities)


def _place_point(place: dict) -> Optional[dict]:
    """The place's ``geometry.location`` if it has numeric lat/lng, else None."""
    geometry = place.get("geometry")
    point = geometry.get("location") if isinstance(geometry, dict) else None
    if not isinstance(point, dict):
        return None
    lat, lng = point.get("lat"), point.get("lng")
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return None
    return point


def _build_amenities(
    amenity_type: AmenityType, places: list[dict], matrix: dict
) -> list[NearbyAmenity]:
    """Pair places with their Distance Matrix elements.

    Places without an OK element (unreachable, or missing from the matrix)
    are dropped rather than ranked at distance 0.
    """
    rows = matrix.get("rows") or [{}]
    elements = rows[0].get("elements", [])

    amenities = []
    for index, place in enumerate(places):
        element = elements[index] if index < len(elements) else {}
        if element.get("status") != "OK":
            continue
        point = _place_point(place)
        amenities.append(
            NearbyAmenity(
                type=amenity_type,
                name=place.get("name") or "Unnamed place",
                address=place.get("vicinity") or place.get("formatted_address") or "",
                distance=element["distance"]["value"],
                duration=element["duration"]["value"],
                place_id=place["place_id"],
                rating=place.get("rating"),
                user_ratings_total=place.get("user_ratings_total"),
                coordinates=Coordinates(lat=point["lat"], lng=point["lng"]),
            )
        )
    return amenities


def create_places_service(settings: Settings) -> PlacesService:
    """Use Google Maps when a key is configured, otherwise canned data."""
    if settings.google_maps_api_key:
        logger.info("[PLACES] Using Google Maps Platform")
        return GooglePlacesService(settings.google_maps_api_key)

    logger.warning("[PLACES] Google Maps API key not configured - using mock data")
    return MockPlacesService()
