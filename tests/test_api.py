"""Tests for the HTTP API."""

import httpx
import pytest
from fastapi.testclient import TestClient

from adilla.api.server import create_app
from adilla.config import AppConfig, DatabaseConfig, GeneratorConfig
from adilla.describe.generator import DescriptionGenerator


def _raw_listing(**overrides) -> dict:
    defaults = {
        "name": "Sunny Loft",
        "address": "42 River Road",
        "propertyType": "Apartment",
        "location": "Nashville",
        "price": 2400,
        "bedrooms": 2,
        "bathrooms": 1,
        "squareFootage": 1200,
        "amenities": "Pool, Gym",
        "uniqueFeatures": "Exposed brick",
        "description": "Bright loft close to the river walk.",
    }
    defaults.update(overrides)
    return defaults


@pytest.fixture
def cfg(tmp_path):
    return AppConfig(
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'api.db'}"),
        generator=GeneratorConfig(api_key="secret", base_url="https://llm.test/v1"),
    )


@pytest.fixture
def client(cfg):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": [{"message": {"content": "A lovely home."}}]})

    generator = DescriptionGenerator(cfg.generator, transport=httpx.MockTransport(handler))
    with TestClient(create_app(cfg, generator=generator)) as c:
        yield c


def test_empty_listings(client):
    resp = client.get("/api/listings")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 0
    assert data["listings"] == []
    assert data["spec"]["sortField"] == "dateAdded"


def test_add_listing_then_browse(client):
    resp = client.post("/api/listings", json=_raw_listing(name="Older", price=1500))
    assert resp.status_code == 201
    assert resp.json()["listing"]["imageUrl"] == "https://placehold.co/600x400.png"
    client.post("/api/listings", json=_raw_listing(name="Newer", price=3200, location="Austin"))

    data = client.get("/api/listings").json()
    assert [l["name"] for l in data["listings"]] == ["Newer", "Older"]
    assert data["locations"] == ["Austin", "Nashville"]

    data = client.get("/api/listings", params={"sortBy": "price_asc"}).json()
    assert [l["price"] for l in data["listings"]] == [1500, 3200]

    data = client.get("/api/listings", params={"location": "Austin", "priceMin": "abc"}).json()
    assert [l["name"] for l in data["listings"]] == ["Newer"]
    assert data["total"] == 2


def test_add_listing_validation_errors(client):
    resp = client.post("/api/listings", json=_raw_listing(name="x", amenities=""))
    assert resp.status_code == 422
    body = resp.json()
    assert set(body["errors"]) == {"name", "amenities"}
    assert client.get("/api/listings").json()["total"] == 0


def test_bookings_flow(client):
    listing = client.post("/api/listings", json=_raw_listing()).json()["listing"]
    resp = client.post(
        "/api/bookings",
        json={
            "propertyId": listing["id"],
            "propertyName": listing["name"],
            "userName": "Jo",
            "userPhone": "55512",
        },
    )
    assert resp.status_code == 201

    data = client.get("/api/bookings").json()
    assert data["count"] == 1
    assert data["bookings"][0]["userName"] == "Jo"
    assert isinstance(data["bookings"][0]["bookingDate"], str)


def test_booking_validation(client):
    resp = client.post("/api/bookings", json={"propertyId": "x", "propertyName": "X", "userName": "J", "userPhone": "1"})
    assert resp.status_code == 422
    assert set(resp.json()["errors"]) == {"userName", "userPhone"}


def test_generate_description(client):
    resp = client.post(
        "/api/descriptions",
        json={
            "propertyType": "House",
            "location": "Nashville",
            "bedrooms": 3,
            "bathrooms": 2,
            "squareFootage": 1800,
            "amenities": "Pool",
            "uniqueFeatures": "Porch",
        },
    )
    assert resp.status_code == 200
    assert resp.json()["description"] == "A lovely home."


def test_listing_feed_websocket(client):
    client.post("/api/listings", json=_raw_listing())
    with client.websocket_connect("/ws/listings") as ws:
        snapshot = ws.receive_json()
        assert len(snapshot) == 1
        assert snapshot[0]["name"] == "Sunny Loft"


def test_config_masks_secrets(client):
    data = client.get("/api/config").json()
    assert data["generator"]["api_key"] == "***"


def test_store_down_gives_empty_view(tmp_path):
    cfg = AppConfig(database=DatabaseConfig(url="sqlite:////nonexistent-dir/x/api.db"))
    with TestClient(create_app(cfg)) as c:
        assert c.get("/api/listings").json()["listings"] == []
        resp = c.post("/api/listings", json=_raw_listing())
        assert resp.status_code == 503
        assert resp.json()["message"] == "Database Error: Failed to add property."
