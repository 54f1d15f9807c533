"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from propsearch.config import Settings
from propsearch.main import create_app
from propsearch.services.places import MockPlacesService
from propsearch.services.properties import InMemoryPropertyRepository, sample_properties


@pytest.fixture
def client():
    app = create_app(
        Settings(redis_enabled=False, max_search_radius=10000),
        repository=InMemoryPropertyRepository(sample_properties()),
        places=MockPlacesService(),
    )
    with TestClient(app) as test_client:
        yield test_client


NEW_LISTING = {
    "title": "Sea-facing Studio in Juhu",
    "description": "Compact studio a short walk from the beach",
    "price": 7_200_000,
    "location": {
        "city": "Mumbai",
        "state": "Maharashtra",
        "pincode": "400049",
        "coordinates": {"lat": 19.0988, "lng": 72.8267},
    },
    "property_type": "apartment",
    "bedrooms": 1,
    "bathrooms": 1,
    "area": 450,
}


class TestHealth:
    def test_health_reports_cache(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["cache"] == {"remote_available": False, "local_entry_count": 0}


class TestSearchEndpoint:
    def test_search_all(self, client: TestClient) -> None:
        response = client.get("/api/properties/search")
        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["data"]["pagination"]["total_properties"] == 6

    def test_search_with_filters(self, client: TestClient) -> None:
        response = client.get(
            "/api/properties/search",
            params={"city": "pune", "property_type": "house", "sort_by": "price"},
        )
        ids = [p["id"] for p in response.json()["data"]["properties"]]
        assert ids == ["2"]

    def test_page_size(self, client: TestClient) -> None:
        response = client.get("/api/properties/search", params={"limit": 2, "page": 3})
        pagination = response.json()["data"]["pagination"]
        assert pagination["current_page"] == 3
        assert pagination["total_pages"] == 3
        assert pagination["has_next"] is False

    def test_inverted_price_range_rejected(self, client: TestClient) -> None:
        response = client.get(
            "/api/properties/search", params={"min_price": 100, "max_price": 10}
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    def test_invalid_property_type_rejected(self, client: TestClient) -> None:
        response = client.get("/api/properties/search", params={"property_type": "castle"})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestPropertyEndpoints:
    def test_get_property(self, client: TestClient) -> None:
        response = client.get("/api/properties/1")
        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Luxury 3BHK Apartment in Bandra"

    def test_get_missing_property(self, client: TestClient) -> None:
        response = client.get("/api/properties/nope")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_create_update_delete(self, client: TestClient) -> None:
        created = client.post("/api/properties", json=NEW_LISTING)
        assert created.status_code == 201
        property_id = created.json()["data"]["id"]

        updated = client.put(f"/api/properties/{property_id}", json={"price": 7_000_000})
        assert updated.status_code == 200
        assert updated.json()["data"]["price"] == 7_000_000

        deleted = client.delete(f"/api/properties/{property_id}")
        assert deleted.status_code == 200
        assert client.get(f"/api/properties/{property_id}").status_code == 404

    def test_create_invalid_payload(self, client: TestClient) -> None:
        response = client.post("/api/properties", json={**NEW_LISTING, "price": -1})
        assert response.status_code == 422

    def test_update_missing_property(self, client: TestClient) -> None:
        response = client.put("/api/properties/nope", json={"price": 1})
        assert response.status_code == 404

    def test_error_envelope_shape(self, client: TestClient) -> None:
        not_found = client.get("/api/properties/nope").json()
        invalid = client.post("/api/properties", json={}).json()

        for body in (not_found, invalid):
            assert set(body) == {"success", "error"}
            assert body["success"] is False
            assert set(body["error"]) == {"code", "message", "user_message"}
        assert invalid["error"]["code"] == "VALIDATION_ERROR"


class TestNearbyAmenitiesEndpoint:
    def test_selected_types(self, client: TestClient) -> None:
        response = client.get(
            "/api/properties/1/nearby-amenities",
            params={"types": "hospital, school", "radius": 3000},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert set(data["amenities"]) == {"hospital", "school"}
        assert data["search_radius"] == 3000
        assert data["property"]["id"] == "1"

    def test_all_types_by_default(self, client: TestClient) -> None:
        response = client.get("/api/properties/1/nearby-amenities")
        assert len(response.json()["data"]["amenities"]) == 12

    def test_results_are_cached(self, client: TestClient) -> None:
        client.get("/api/properties/1/nearby-amenities", params={"types": "bank"})
        stats = client.get("/api/cache/stats").json()["data"]
        assert stats["local_entry_count"] == 1

    def test_update_invalidates_cache(self, client: TestClient) -> None:
        client.get("/api/properties/1/nearby-amenities", params={"types": "bank,park"})
        client.put("/api/properties/1", json={"price": 14_500_000})

        stats = client.get("/api/cache/stats").json()["data"]
        assert stats["local_entry_count"] == 0

    def test_unknown_type(self, client: TestClient) -> None:
        response = client.get(
            "/api/properties/1/nearby-amenities", params={"types": "spaceport"}
        )
        assert response.status_code == 400
        assert "spaceport" in response.json()["error"]["message"]

    def test_radius_above_limit(self, client: TestClient) -> None:
        response = client.get(
            "/api/properties/1/nearby-amenities", params={"radius": 20000}
        )
        assert response.status_code == 400

    def test_missing_coordinates(self, client: TestClient) -> None:
        response = client.get("/api/properties/6/nearby-amenities")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MISSING_COORDINATES"

    def test_missing_property(self, client: TestClient) -> None:
        response = client.get("/api/properties/nope/nearby-amenities")
        assert response.status_code == 404


class TestCacheEndpoints:
    def test_clear(self, client: TestClient) -> None:
        client.get("/api/properties/2/nearby-amenities", params={"types": "gym"})

        response = client.delete("/api/cache")

        assert response.status_code == 200
        stats = client.get("/api/cache/stats").json()["data"]
        assert stats == {"remote_available": False, "local_entry_count": 0}
