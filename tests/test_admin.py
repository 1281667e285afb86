"""Tests for admin catalog, crew and customer management."""

from decimal import Decimal

import pytest

from app.scripts.seed_admin import create_or_update_admin


@pytest.mark.asyncio
async def test_admin_routes_reject_customers(client, customer):
    resp = await client.get("/api/v1/admin/customers", headers=customer["headers"])
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_create_package_with_custom_tiers(client, admin):
    resp = await client.post(
        "/api/v1/admin/packages",
        json={
            "name": "Estate Care",
            "description": "For large properties",
            "base_price": "120.00",
            "features": ["Mowing", "Edging"],
            "pricing_tiers": {"xlarge": "1.8"},
        },
        headers=admin["headers"],
    )
    assert resp.status_code == 201
    package = resp.json()
    assert Decimal(package["pricing_tiers"]["xlarge"]) == Decimal("1.8")
    assert Decimal(package["pricing_tiers"]["medium"]) == Decimal("1.2")

    resp = await client.post(
        "/api/v1/services/calculate-price",
        json={"service_package_id": package["id"], "lot_size": 20000},
    )
    assert Decimal(resp.json()["total_price"]) == Decimal("216.00")


@pytest.mark.asyncio
async def test_package_price_change_does_not_reprice_bookings(client, admin, customer, booking, catalog):
    package_id = str(catalog["packages"]["Basic Mow"].id)
    resp = await client.put(
        f"/api/v1/admin/packages/{package_id}", json={"base_price": "50.00"}, headers=admin["headers"]
    )
    assert resp.status_code == 200

    resp = await client.get(f"/api/v1/bookings/{booking['id']}", headers=customer["headers"])
    assert Decimal(resp.json()["total_price"]) == Decimal("72.00")


@pytest.mark.asyncio
async def test_referenced_package_is_deactivated_not_deleted(client, admin, booking, catalog):
    basic = str(catalog["packages"]["Basic Mow"].id)
    resp = await client.delete(f"/api/v1/admin/packages/{basic}", headers=admin["headers"])
    assert resp.status_code == 200
    assert "deactivated" in resp.json()["message"]

    public = (await client.get("/api/v1/services/packages")).json()
    assert basic not in [p["id"] for p in public]

    deluxe = str(catalog["packages"]["Deluxe Package"].id)
    resp = await client.delete(f"/api/v1/admin/packages/{deluxe}", headers=admin["headers"])
    assert "deleted" in resp.json()["message"]
    admin_list = (await client.get("/api/v1/admin/packages", headers=admin["headers"])).json()
    assert deluxe not in [p["id"] for p in admin_list]
    assert basic in [p["id"] for p in admin_list]


@pytest.mark.asyncio
async def test_add_on_crud(client, admin):
    resp = await client.post(
        "/api/v1/admin/add-ons",
        json={"name": "Mulching", "price": "55.00", "category": "seasonal"},
        headers=admin["headers"],
    )
    assert resp.status_code == 201
    add_on = resp.json()

    resp = await client.put(f"/api/v1/admin/add-ons/{add_on['id']}", json={"price": "60.00"}, headers=admin["headers"])
    assert Decimal(resp.json()["price"]) == Decimal("60.00")

    public = (await client.get("/api/v1/services/add-ons")).json()
    assert "Mulching" in [a["name"] for a in public]


@pytest.mark.asyncio
async def test_crew_crud(client, admin):
    resp = await client.post(
        "/api/v1/admin/crew", json={"first_name": "Jo", "last_name": "Park"}, headers=admin["headers"]
    )
    assert resp.status_code == 201
    crew = resp.json()
    assert crew["role"] == "technician"

    resp = await client.put(f"/api/v1/admin/crew/{crew['id']}", json={"role": "lead"}, headers=admin["headers"])
    assert resp.json()["role"] == "lead"

    resp = await client.get("/api/v1/admin/crew", headers=admin["headers"])
    assert [c["id"] for c in resp.json()] == [crew["id"]]


@pytest.mark.asyncio
async def test_customer_search_and_profile(client, admin, customer, other_customer, booking):
    resp = await client.get("/api/v1/admin/customers?search=casey", headers=admin["headers"])
    data = resp.json()
    assert data["total"] == 1
    assert data["customers"][0]["id"] == customer["id"]

    resp = await client.post(
        f"/api/v1/admin/customers/{customer['id']}/notes",
        json={"note": "Prefers morning visits"},
        headers=admin["headers"],
    )
    assert resp.status_code == 200
    profile = resp.json()
    assert profile["notes"][0]["note"] == "Prefers morning visits"
    assert profile["notes"][0]["added_by"] == "admin@example.com"
    assert len(profile["properties"]) == 1
    assert len(profile["recent_appointments"]) == 1
    assert profile["stats"]["total_appointments"] == 1


@pytest.mark.asyncio
async def test_archive_cancels_upcoming_appointments(client, admin, customer, booking):
    resp = await client.post(f"/api/v1/admin/customers/{customer['id']}/archive", headers=admin["headers"])
    assert resp.status_code == 200
    data = resp.json()
    assert data["customer"]["status"] == "archived"
    assert data["cancelled_appointments"] == 1

    resp = await client.get(f"/api/v1/bookings/{booking['id']}", headers=admin["headers"])
    assert resp.json()["status"] == "cancelled"
    assert resp.json()["cancellation_reason"] == "Customer archived"

    resp = await client.get("/api/v1/admin/customers?status=archived", headers=admin["headers"])
    assert resp.json()["total"] == 1


@pytest.mark.asyncio
async def test_admin_creates_customer(client, admin):
    resp = await client.post(
        "/api/v1/admin/customers",
        json={"email": "walkin@example.com", "password": "temp1234", "first_name": "Walk"},
        headers=admin["headers"],
    )
    assert resp.status_code == 201
    assert resp.json()["role"] == "customer"

    resp = await client.post(
        "/api/v1/admin/customers",
        json={"email": "walkin@example.com", "password": "temp1234"},
        headers=admin["headers"],
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_seed_script_promotes_existing_customer(db, customer):
    user = await create_or_update_admin(db, "customer@example.com", "ownerpass123")
    assert user.id == customer["user"].id
    assert user.role == "admin"

    created = await create_or_update_admin(db, "owner@example.com", "ownerpass123")
    assert created.role == "admin"
    assert created.id != customer["user"].id


@pytest.mark.asyncio
async def test_null_updates_to_required_columns_are_rejected(client, admin, customer, catalog):
    package_id = str(catalog["packages"]["Basic Mow"].id)
    resp = await client.put(f"/api/v1/admin/packages/{package_id}", json={"base_price": None}, headers=admin["headers"])
    assert resp.status_code == 400
    assert resp.json()["detail"] == "base_price cannot be null"

    resp = await client.put(
        f"/api/v1/admin/customers/{customer['id']}", json={"email": None}, headers=admin["headers"]
    )
    assert resp.status_code == 400

    resp = await client.put("/api/v1/customers/profile", json={"phone": None}, headers=customer["headers"])
    assert resp.status_code == 200
