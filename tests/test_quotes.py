"""Tests for quote requests."""

from datetime import timedelta
from decimal import Decimal

import pytest

QUOTE = {
    "first_name": "Pat",
    "last_name": "Meadows",
    "email": "pat@example.com",
    "phone": "555-0100",
    "address": "3 Willow Way",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62702",
    "lot_size": 20000,
    "service_type": "landscaping",
    "description": "New flower beds along the driveway",
}


@pytest.mark.asyncio
async def test_visitor_can_request_quote(client):
    resp = await client.post("/api/v1/quotes/", json=QUOTE)
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "pending"
    assert data["user_id"] is None


@pytest.mark.asyncio
async def test_quote_list_is_admin_only(client, customer, admin):
    await client.post("/api/v1/quotes/", json=QUOTE, headers=customer["headers"])

    resp = await client.get("/api/v1/quotes/", headers=customer["headers"])
    assert resp.status_code == 403

    resp = await client.get("/api/v1/quotes/?status=pending", headers=admin["headers"])
    assert len(resp.json()) == 1
    resp = await client.get("/api/v1/quotes/?status=quoted", headers=admin["headers"])
    assert resp.json() == []


@pytest.mark.asyncio
async def test_admin_response_and_customer_acceptance(client, customer, admin, email_service):
    quote = (await client.post("/api/v1/quotes/", json=QUOTE, headers=customer["headers"])).json()
    assert quote["user_id"] == customer["id"]

    resp = await client.put(
        f"/api/v1/quotes/{quote['id']}",
        json={"estimated_price": "450.00", "admin_notes": "Includes mulch"},
        headers=admin["headers"],
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "quoted"
    assert Decimal(data["estimated_price"]) == Decimal("450.00")
    assert data["expires_at"].startswith("2026-07-15")
    email_service.send_quote_response.assert_awaited_once()

    resp = await client.get("/api/v1/notifications/unread-count", headers=customer["headers"])
    assert resp.json()["count"] == 1

    resp = await client.post(
        f"/api/v1/quotes/{quote['id']}/decision", json={"accept": True}, headers=customer["headers"]
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "accepted"

    # Decided quotes are final
    resp = await client.post(
        f"/api/v1/quotes/{quote['id']}/decision", json={"accept": False}, headers=customer["headers"]
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_expired_quote_cannot_be_accepted(client, customer, admin, clock):
    quote = (await client.post("/api/v1/quotes/", json=QUOTE, headers=customer["headers"])).json()
    await client.put(f"/api/v1/quotes/{quote['id']}", json={"estimated_price": "300.00"}, headers=admin["headers"])

    clock.instant = clock.instant + timedelta(days=31)
    resp = await client.post(
        f"/api/v1/quotes/{quote['id']}/decision", json={"accept": True}, headers=customer["headers"]
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Quote has expired"

    resp = await client.get(f"/api/v1/quotes/{quote['id']}", headers=customer["headers"])
    assert resp.json()["status"] == "expired"


@pytest.mark.asyncio
async def test_unpriced_quote_cannot_be_accepted(client, customer):
    quote = (await client.post("/api/v1/quotes/", json=QUOTE, headers=customer["headers"])).json()
    resp = await client.post(
        f"/api/v1/quotes/{quote['id']}/decision", json={"accept": True}, headers=customer["headers"]
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_customers_only_see_their_quotes(client, customer, other_customer):
    quote = (await client.post("/api/v1/quotes/", json=QUOTE, headers=customer["headers"])).json()

    resp = await client.get(f"/api/v1/quotes/{quote['id']}", headers=other_customer["headers"])
    assert resp.status_code == 404
    resp = await client.get("/api/v1/quotes/mine", headers=customer["headers"])
    assert [q["id"] for q in resp.json()] == [quote["id"]]
