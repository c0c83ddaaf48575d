from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient

from socorro.api import create_app
from socorro.container import build_container
from socorro.settings import RateLimitSettings, Settings

ADMIN = {"x-user-id": "netrunnerX"}
CITIZEN = {"x-user-id": "citizen1"}


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app(build_container(Settings())))


def _create_disaster(client: TestClient, **overrides) -> dict:
    payload = {
        "title": "NYC Flood",
        "description": "Heavy flooding in Manhattan",
        "location_name": "Manhattan, NYC",
        "lat": 40.7831,
        "lng": -73.9712,
        "tags": ["flood", "urgent"],
    }
    payload.update(overrides)
    response = client.post("/api/disasters", json=payload, headers=ADMIN)
    assert response.status_code == 201
    return response.json()["data"]


def test_health_check(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "OK"
    assert response.json()["environment"] == "development"


def test_disaster_lifecycle(client: TestClient) -> None:
    created = _create_disaster(client)
    disaster_url = f"/api/disasters/{created['id']}"

    assert created["owner_id"] == "netrunnerX"
    assert created["tags"] == ["flood", "urgent"]
    assert created["coordinates"] == {"lat": 40.7831, "lng": -73.9712}

    listed = client.get("/api/disasters", params={"tag": "FLOOD"}, headers=CITIZEN).json()
    assert listed["success"] is True
    assert [item["id"] for item in listed["data"]["disasters"]] == [created["id"]]
    assert listed["data"]["pagination"]["total"] == 1

    updated = client.put(disaster_url, json={"title": "NYC Flood (updated)"}, headers=ADMIN)
    assert updated.status_code == 200
    assert updated.json()["data"]["title"] == "NYC Flood (updated)"
    assert [entry["action"] for entry in updated.json()["data"]["audit_trail"]] == [
        "create",
        "update",
    ]

    deleted = client.delete(disaster_url, headers=ADMIN)
    assert deleted.json()["message"] == "Disaster deleted successfully"
    assert client.get(disaster_url, headers=ADMIN).status_code == 404


def test_disaster_rules_surface_as_http_errors(client: TestClient) -> None:
    created = _create_disaster(client)

    not_owner = client.put(
        f"/api/disasters/{created['id']}",
        json={"title": "Hijacked"},
        headers={"x-user-id": "reliefAdmin"},
    )
    bad_tags = client.post(
        "/api/disasters", json={"title": "Odd event", "tags": ["meteor"]}, headers=ADMIN
    )
    half_location = client.post(
        "/api/disasters", json={"title": "Odd event", "lat": 10}, headers=ADMIN
    )

    assert not_owner.status_code == 403
    assert bad_tags.status_code == 400
    assert bad_tags.json()["message"] == "Invalid tags provided"
    assert half_location.status_code == 400
    assert half_location.json()["message"] == "Validation failed"


def test_authentication_and_permissions(client: TestClient) -> None:
    assert client.get("/api/disasters").status_code == 401
    assert client.get("/api/disasters", headers={"x-user-id": "ghost"}).status_code == 401
    assert client.delete(f"/api/disasters/{uuid.uuid4()}", headers=CITIZEN).status_code == 403


def test_malformed_and_unknown_ids(client: TestClient) -> None:
    malformed = client.get("/api/disasters/not-a-uuid", headers=ADMIN)
    unknown = client.get(f"/api/disasters/{uuid.uuid4()}", headers=ADMIN)

    assert malformed.status_code == 400
    assert malformed.json()["errors"][0]["field"] == "disaster_id"
    assert unknown.status_code == 404
    assert unknown.json()["message"] == "Disaster not found"


def test_resources_for_a_disaster(client: TestClient) -> None:
    disaster = _create_disaster(client)
    url = f"/api/disasters/{disaster['id']}/resources"

    created = client.post(
        url,
        json={"name": "Red Cross Shelter", "type": "shelter", "lat": 40.7359, "lng": -73.9911},
        headers=CITIZEN,
    )
    listed = client.get(url, params={"radius": 10}, headers=CITIZEN).json()["data"]
    types = client.get("/api/resources/types", headers=CITIZEN).json()["data"]

    assert created.status_code == 201
    assert created.json()["data"]["disaster_id"] == disaster["id"]
    assert [item["name"] for item in listed["resources"]] == ["Red Cross Shelter"]
    assert listed["geospatial_query"] is True
    assert types["types"] == [{"type": "shelter", "count": 1}]


def test_geocoding_endpoints_use_the_mock_provider(client: TestClient) -> None:
    geocoded = client.post(
        "/api/geocode", json={"location_name": "Manhattan, NYC"}, headers=CITIZEN
    ).json()["data"]
    reverse = client.get(
        "/api/geocode/reverse", params={"lat": 40.7831, "lng": -73.9712}, headers=CITIZEN
    )
    batch = client.post(
        "/api/geocode/batch", json={"locations": ["Brooklyn, NY", "Queens, NY"]}, headers=CITIZEN
    ).json()["data"]

    assert geocoded["primary_location"]["lat"] == 40.7831
    assert geocoded["primary_location"]["source"] == "mock"
    assert reverse.status_code == 200
    assert reverse.json()["data"]["coordinates"] == {"lat": 40.7831, "lng": -73.9712}
    assert batch["summary"]["successful"] == 2


def test_geocoding_rejects_invalid_input(client: TestClient) -> None:
    out_of_range = client.get(
        "/api/geocode/reverse", params={"lat": 91, "lng": 0}, headers=CITIZEN
    )
    empty = client.post("/api/geocode", json={}, headers=CITIZEN)

    assert out_of_range.status_code == 400
    assert out_of_range.json()["message"] == "Invalid coordinates provided"
    assert empty.status_code == 400


def test_enrichment_endpoints_answer_with_mock_data(client: TestClient) -> None:
    disaster = _create_disaster(client)

    social = client.get(f"/api/disasters/{disaster['id']}/social-media", headers=CITIZEN)
    updates = client.get(f"/api/disasters/{disaster['id']}/official-updates", headers=CITIZEN)

    assert social.status_code == 200
    assert social.json()["data"]["degraded"] is False
    assert updates.status_code == 200


def test_create_disaster_limit_returns_429() -> None:
    settings = Settings(rate_limits=RateLimitSettings(create_disaster_max=1))
    client = TestClient(create_app(build_container(settings)))
    payload = {"title": "First event"}

    first = client.post("/api/disasters", json=payload, headers=ADMIN)
    second = client.post("/api/disasters", json=payload, headers=ADMIN)

    assert first.status_code == 201
    assert second.status_code == 429
    assert second.json()["message"] == (
        "Too many disaster creation requests, please try again later."
    )
    assert int(second.headers["Retry-After"]) > 0


def test_image_verification_requires_permission_and_uses_mock_model(client: TestClient) -> None:
    disaster = _create_disaster(client)
    url = f"/api/disasters/{disaster['id']}/verify-image"
    payload = {"image_url": "https://example.com/flood.jpg"}

    denied = client.post(url, json=payload, headers=CITIZEN)
    verified = client.post(url, json=payload, headers=ADMIN)
    bad_url = client.post(url, json={"image_url": "ftp://example.com/x.jpg"}, headers=ADMIN)

    assert denied.status_code == 403
    assert verified.status_code == 200
    assert verified.json()["data"]["verification"]["is_authentic"] is True
    assert verified.json()["data"]["processing"]["ai_source"] == "mock"
    assert bad_url.status_code == 400
