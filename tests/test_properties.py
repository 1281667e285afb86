"""Tests for customer properties."""

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import Conflict
from app.models.property import Property
from app.services import properties as property_service

PROPERTY = {
    "address": "44 Birch Lane",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62704",
    "lot_size": 12000,
}


async def _create(client, headers, **overrides):
    resp = await client.post("/api/v1/properties/", json={**PROPERTY, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_first_property_becomes_primary(client, customer):
    first = await _create(client, customer["headers"])
    assert first["is_primary"] is True
    assert first["user_id"] == customer["id"]

    second = await _create(client, customer["headers"], address="9 Oak Court")
    assert second["is_primary"] is False


@pytest.mark.asyncio
async def test_only_one_primary_property(client, customer):
    first = await _create(client, customer["headers"])
    second = await _create(client, customer["headers"], address="9 Oak Court", is_primary=True)
    assert second["is_primary"] is True

    resp = await client.get("/api/v1/properties/", headers=customer["headers"])
    primaries = [p["id"] for p in resp.json() if p["is_primary"]]
    assert primaries == [second["id"]]

    resp = await client.put(f"/api/v1/properties/{first['id']}", json={"is_primary": True}, headers=customer["headers"])
    assert resp.status_code == 200
    resp = await client.get("/api/v1/properties/", headers=customer["headers"])
    primaries = [p["id"] for p in resp.json() if p["is_primary"]]
    assert primaries == [first["id"]]


@pytest.mark.asyncio
async def test_lot_size_must_be_positive(client, customer):
    resp = await client.post("/api/v1/properties/", json={**PROPERTY, "lot_size": 0}, headers=customer["headers"])
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_properties_are_private(client, customer, other_customer):
    prop = await _create(client, customer["headers"])

    resp = await client.get(f"/api/v1/properties/{prop['id']}", headers=other_customer["headers"])
    assert resp.status_code == 404
    resp = await client.get("/api/v1/properties/", headers=other_customer["headers"])
    assert resp.json() == []


@pytest.mark.asyncio
async def test_admin_creates_property_for_customer(client, admin, customer):
    prop = await _create(client, admin["headers"], user_id=customer["id"])
    assert prop["user_id"] == customer["id"]
    assert prop["is_primary"] is True


@pytest.mark.asyncio
async def test_delete_blocked_by_appointments(client, customer, lawn, booking):
    resp = await client.delete(f"/api/v1/properties/{lawn.id}", headers=customer["headers"])
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_delete_unbooked_property(client, customer):
    prop = await _create(client, customer["headers"])
    resp = await client.delete(f"/api/v1/properties/{prop['id']}", headers=customer["headers"])
    assert resp.status_code == 200
    resp = await client.get(f"/api/v1/properties/{prop['id']}", headers=customer["headers"])
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_null_for_required_field_is_rejected(client, customer):
    prop = await _create(client, customer["headers"])

    resp = await client.put(f"/api/v1/properties/{prop['id']}", json={"lot_size": None}, headers=customer["headers"])
    assert resp.status_code == 400
    assert resp.json()["detail"] == "lot_size cannot be null"

    resp = await client.get(f"/api/v1/properties/{prop['id']}", headers=customer["headers"])
    assert resp.json()["lot_size"] == 12000


@pytest.mark.asyncio
async def test_nullable_fields_can_be_cleared(client, customer):
    prop = await _create(client, customer["headers"], gate_code="1234")
    resp = await client.put(f"/api/v1/properties/{prop['id']}", json={"gate_code": None}, headers=customer["headers"])
    assert resp.status_code == 200
    assert resp.json()["gate_code"] is None


@pytest.mark.asyncio
async def test_database_allows_one_primary_per_owner(db, customer, lawn):
    db.add(
        Property(
            user_id=customer["user"].id,
            address="9 Oak Court",
            city="Springfield",
            state="IL",
            zip_code="62701",
            lot_size=4000,
            is_primary=True,
        )
    )
    with pytest.raises(IntegrityError):
        await db.commit()
    await db.rollback()


@pytest.mark.asyncio
async def test_racing_primary_insert_is_a_conflict(db, customer, lawn, monkeypatch):
    # A concurrent request committed its primary after this one cleared the old one
    async def cleared_before_other_commit(*args, **kwargs):
        return None

    monkeypatch.setattr(property_service, "_clear_primary", cleared_before_other_commit)
    with pytest.raises(Conflict):
        await property_service.create_property(
            db,
            customer["user"].id,
            {**PROPERTY, "is_primary": True},
        )
