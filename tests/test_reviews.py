"""Tests for reviews and their moderation."""

import pytest


async def _complete(client, admin, booking):
    resp = await client.post(f"/api/v1/bookings/{booking['id']}/complete", json={}, headers=admin["headers"])
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_review_requires_completed_appointment(client, customer, booking):
    resp = await client.post(
        "/api/v1/reviews/",
        json={"appointment_id": booking["id"], "rating": 5, "comment": "Great"},
        headers=customer["headers"],
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_review_lifecycle(client, customer, admin, booking):
    await _complete(client, admin, booking)

    resp = await client.post(
        "/api/v1/reviews/",
        json={"appointment_id": booking["id"], "rating": 4, "title": "Tidy work"},
        headers=customer["headers"],
    )
    assert resp.status_code == 201
    review = resp.json()
    assert review["is_approved"] is False

    # Hidden from the public until approved
    assert (await client.get("/api/v1/reviews/")).json() == []
    resp = await client.get(f"/api/v1/reviews/{review['id']}")
    assert resp.status_code == 404
    resp = await client.get(f"/api/v1/reviews/{review['id']}", headers=customer["headers"])
    assert resp.status_code == 200

    resp = await client.put(
        f"/api/v1/reviews/{review['id']}",
        json={"is_approved": True, "admin_response": "Thanks!"},
        headers=admin["headers"],
    )
    assert resp.status_code == 200
    assert resp.json()["approved_at"].startswith("2026-06-15")

    public = (await client.get("/api/v1/reviews/")).json()
    assert [r["id"] for r in public] == [review["id"]]
    assert public[0]["admin_response"] == "Thanks!"


@pytest.mark.asyncio
async def test_duplicate_review_conflicts(client, customer, admin, booking):
    await _complete(client, admin, booking)
    payload = {"appointment_id": booking["id"], "rating": 5}

    assert (await client.post("/api/v1/reviews/", json=payload, headers=customer["headers"])).status_code == 201
    resp = await client.post("/api/v1/reviews/", json=payload, headers=customer["headers"])
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_rating_out_of_range(client, customer, admin, booking):
    await _complete(client, admin, booking)
    resp = await client.post(
        "/api/v1/reviews/", json={"appointment_id": booking["id"], "rating": 6}, headers=customer["headers"]
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_cannot_review_someone_elses_appointment(client, other_customer, admin, booking):
    await _complete(client, admin, booking)
    resp = await client.post(
        "/api/v1/reviews/", json={"appointment_id": booking["id"], "rating": 1}, headers=other_customer["headers"]
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_admin_sees_unapproved_and_deletes(client, customer, admin, booking):
    await _complete(client, admin, booking)
    review = (
        await client.post(
            "/api/v1/reviews/", json={"appointment_id": booking["id"], "rating": 3}, headers=customer["headers"]
        )
    ).json()

    resp = await client.get("/api/v1/reviews/?approved=false", headers=admin["headers"])
    assert [r["id"] for r in resp.json()] == [review["id"]]

    resp = await client.delete(f"/api/v1/reviews/{review['id']}", headers=customer["headers"])
    assert resp.status_code == 403
    resp = await client.delete(f"/api/v1/reviews/{review['id']}", headers=admin["headers"])
    assert resp.status_code == 200
