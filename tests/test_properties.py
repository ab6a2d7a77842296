# Property API test suite: public browsing and search, admin CRUD, validation and error bodies.
from __future__ import annotations

from fastapi.testclient import TestClient

from app.errors import StorageError


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# Helper: log in as the seeded admin and return the token
def admin_token(client: TestClient, settings) -> str:
    r = client.post("/api/login", json={"email": settings.ADMIN_EMAIL, "password": settings.ADMIN_PASSWORD})
    assert r.status_code == 200, r.text
    return r.json()["token"]


def listing(**overrides) -> dict:
    body = {
        "title": "Harbor Loft",
        "description": "Open-plan loft by the harbor.",
        "price": 540000,
        "location": "Boston, MA",
        "propertyType": "apartment",
        "bedrooms": 1,
        "bathrooms": 1.5,
        "area": 870,
        "images": ["https://img.example.com/loft-1.jpg"],
        "features": ["Exposed Brick", "Harbor View"],
    }
    body.update(overrides)
    return body


def test_list_returns_seeded_catalog_in_camel_case(client: TestClient):
    r = client.get("/api/properties")
    assert r.status_code == 200
    items = r.json()
    assert len(items) == 6
    first = items[0]
    assert first["title"] == "Luxury Modern Villa"
    assert first["propertyType"] == "villa"
    assert first["price"] == "1250000"
    assert "createdAt" in first and "updatedAt" in first
    assert "_id" not in first


def test_search_by_price_range(client: TestClient):
    r = client.get("/api/properties", params={"minPrice": 500000, "maxPrice": 900000})
    assert r.status_code == 200
    titles = {p["title"] for p in r.json()}
    assert "Family Suburban Home" not in titles
    assert {"Oceanview Condo", "Modern Townhouse"} <= titles

    r2 = client.get("/api/properties", params={"minPrice": 500000, "maxPrice": 900000, "status": "available"})
    assert "Modern Townhouse" not in {p["title"] for p in r2.json()}


def test_search_by_location_type_and_bedrooms(client: TestClient):
    r = client.get("/api/properties", params={"location": "miami"})
    assert [p["title"] for p in r.json()] == ["Oceanview Condo"]

    r2 = client.get("/api/properties", params={"propertyType": "house", "bedrooms": 4})
    assert [p["title"] for p in r2.json()] == ["Country Estate"]


def test_search_rejects_unknown_enum_values(client: TestClient):
    r = client.get("/api/properties", params={"propertyType": "castle"})
    assert r.status_code == 400
    assert r.json()["message"] == "Validation failed"

    r2 = client.get("/api/properties", params={"minPrice": "cheap"})
    assert r2.status_code == 400


# The search form sends every field; unselected ones arrive empty
def test_blank_filters_are_ignored(client: TestClient):
    r = client.get(
        "/api/properties",
        params={"location": "", "minPrice": "", "maxPrice": "", "propertyType": "", "bedrooms": "", "status": ""},
    )
    assert r.status_code == 200, r.text
    assert len(r.json()) == 6

    r2 = client.get("/api/properties", params={"location": "", "propertyType": "condo", "minPrice": ""})
    assert [p["title"] for p in r2.json()] == ["Oceanview Condo"]


def test_get_property_and_404(client: TestClient):
    r = client.get("/api/properties/3")
    assert r.status_code == 200
    assert r.json()["title"] == "Family Suburban Home"

    r2 = client.get("/api/properties/999")
    assert r2.status_code == 404
    assert r2.json() == {"message": "Property not found"}


def test_admin_create_update_delete(client: TestClient, settings):
    token = admin_token(client, settings)

    r = client.post("/api/properties", headers=auth_headers(token), json=listing())
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["id"] == 7  # after the six seeded listings
    assert created["price"] == "540000"  # numbers stored as decimal strings
    assert created["status"] == "available"
    assert created["agentId"] == 1  # the admin who created it
    assert created["images"] == ["https://img.example.com/loft-1.jpg"]
    # The create response is the stored listing, exactly as a later read returns it
    assert client.get(f"/api/properties/{created['id']}").json() == created

    # Partial update: only the given fields change
    r2 = client.put(
        f"/api/properties/{created['id']}",
        headers=auth_headers(token),
        json={"status": "pending", "price": "529999.99"},
    )
    assert r2.status_code == 200, r2.text
    updated = r2.json()
    assert updated["status"] == "pending"
    assert updated["price"] == "529999.99"
    assert updated["title"] == "Harbor Loft"
    assert updated["id"] == created["id"]
    assert client.get(f"/api/properties/{created['id']}").json() == updated

    r3 = client.delete(f"/api/properties/{created['id']}", headers=auth_headers(token))
    assert r3.status_code == 200
    assert r3.json() == {"message": "Property deleted successfully"}

    r4 = client.delete(f"/api/properties/{created['id']}", headers=auth_headers(token))
    assert r4.status_code == 404
    assert client.get(f"/api/properties/{created['id']}").status_code == 404


def test_update_missing_property_404(client: TestClient, settings):
    token = admin_token(client, settings)
    r = client.put("/api/properties/999", headers=auth_headers(token), json={"title": "Ghost"})
    assert r.status_code == 404


def test_create_validation_errors(client: TestClient, settings):
    token = admin_token(client, settings)
    headers = auth_headers(token)

    # Missing required fields
    r = client.post("/api/properties", headers=headers, json={"title": "Incomplete"})
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Validation failed"
    assert body["errors"]

    # Unknown fields, bad price, quarter baths, negative area
    assert client.post("/api/properties", headers=headers, json=listing(color="blue")).status_code == 400
    assert client.post("/api/properties", headers=headers, json=listing(price="cheap")).status_code == 400
    assert client.post("/api/properties", headers=headers, json=listing(price="-5")).status_code == 400
    assert client.post("/api/properties", headers=headers, json=listing(bathrooms=1.25)).status_code == 400
    assert client.post("/api/properties", headers=headers, json=listing(area=-1)).status_code == 400

    # Updates cannot smuggle in an id
    r2 = client.put("/api/properties/1", headers=headers, json={"id": 99})
    assert r2.status_code == 400

    assert len(client.get("/api/properties").json()) == 6


def test_storage_failure_is_500_not_empty(client: TestClient, monkeypatch):
    storage = client.app.state.storage

    def boom(*args, **kwargs):
        raise StorageError("get_all_properties")

    monkeypatch.setattr(storage, "get_all_properties", boom)
    r = client.get("/api/properties")
    assert r.status_code == 500
    assert r.json() == {"message": "Storage unavailable"}
