"""Tests for Stripe payments, webhooks, invoices and refunds."""

from decimal import Decimal
from unittest.mock import patch

import pytest
import stripe
from sqlalchemy import select

from app.core.exceptions import UpstreamFailure, ValidationError
from app.models.notification import Notification
from app.models.payment import Payment
from app.services.payment_processor import StripePaymentProcessor, charge_details


async def _create_intent(client, customer, booking):
    return await client.post(
        "/api/v1/payments/create-intent",
        json={"appointment_id": booking["id"]},
        headers=customer["headers"],
    )


@pytest.mark.asyncio
async def test_create_intent_opens_pending_payment(client, customer, booking, processor):
    resp = await _create_intent(client, customer, booking)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["client_secret"] == "pi_test_123_secret_abc"
    assert data["payment"]["status"] == "pending"
    assert Decimal(data["payment"]["amount"]) == Decimal("72.00")
    assert data["payment"]["stripe_payment_intent_id"] == "pi_test_123"

    processor.create_intent.assert_called_once()
    amount, currency, metadata = processor.create_intent.call_args.args
    assert amount == 7200
    assert currency == "usd"
    assert metadata["appointment_id"] == booking["id"]


@pytest.mark.asyncio
async def test_second_open_payment_conflicts(client, customer, booking):
    assert (await _create_intent(client, customer, booking)).status_code == 201

    resp = await _create_intent(client, customer, booking)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_cannot_pay_for_cancelled_appointment(client, customer, booking, processor):
    await client.post(f"/api/v1/bookings/{booking['id']}/cancel", headers=customer["headers"])

    resp = await _create_intent(client, customer, booking)
    assert resp.status_code == 400
    processor.create_intent.assert_not_called()


@pytest.mark.asyncio
async def test_cannot_pay_for_other_customers_appointment(client, other_customer, booking):
    resp = await _create_intent(client, other_customer, booking)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_processor_outage_leaves_no_payment(client, db, customer, booking, processor):
    processor.create_intent.side_effect = UpstreamFailure("Payment processor", "timed out")
    resp = await _create_intent(client, customer, booking)
    assert resp.status_code == 503

    result = await db.execute(select(Payment))
    assert result.scalars().all() == []

    processor.create_intent.side_effect = None
    resp = await _create_intent(client, customer, booking)
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_confirm_completes_payment(client, db, customer, booking, processor, email_service):
    payment = (await _create_intent(client, customer, booking)).json()["payment"]

    resp = await client.post(f"/api/v1/payments/{payment['id']}/confirm", headers=customer["headers"])
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "completed"
    assert data["last4"] == "4242"
    assert data["card_brand"] == "visa"
    assert data["paid_at"].startswith("2026-06-15")
    assert data["invoice_number"].startswith("INV-20260615-")

    processor.retrieve_intent.assert_called_once_with("pi_test_123")
    email_service.send_payment_receipt.assert_awaited_once()
    result = await db.execute(select(Notification).where(Notification.title == "Payment Received"))
    assert result.scalar_one_or_none() is not None

    # A completed payment still blocks a second one
    resp = await _create_intent(client, customer, booking)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_confirm_processing_stays_pending(client, customer, booking, processor):
    processor.retrieve_intent.return_value = {"status": "processing", "charge_details": {}}
    payment = (await _create_intent(client, customer, booking)).json()["payment"]

    resp = await client.post(f"/api/v1/payments/{payment['id']}/confirm", headers=customer["headers"])
    assert resp.json()["status"] == "pending"


@pytest.mark.asyncio
async def test_failed_payment_allows_retry(client, customer, booking, processor):
    processor.retrieve_intent.return_value = {"status": "requires_payment_method", "charge_details": {}}
    payment = (await _create_intent(client, customer, booking)).json()["payment"]

    resp = await client.post(f"/api/v1/payments/{payment['id']}/confirm", headers=customer["headers"])
    assert resp.json()["status"] == "failed"

    resp = await _create_intent(client, customer, booking)
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_invoice_only_for_completed_payments(client, customer, booking):
    payment = (await _create_intent(client, customer, booking)).json()["payment"]

    resp = await client.get(f"/api/v1/payments/{payment['id']}/invoice", headers=customer["headers"])
    assert resp.status_code == 400

    await client.post(f"/api/v1/payments/{payment['id']}/confirm", headers=customer["headers"])
    resp = await client.get(f"/api/v1/payments/{payment['id']}/invoice", headers=customer["headers"])
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_refund_requires_admin_and_completed_payment(client, customer, admin, booking, processor):
    payment = (await _create_intent(client, customer, booking)).json()["payment"]

    resp = await client.post(f"/api/v1/payments/{payment['id']}/refund", json={}, headers=customer["headers"])
    assert resp.status_code == 403

    resp = await client.post(f"/api/v1/payments/{payment['id']}/refund", json={}, headers=admin["headers"])
    assert resp.status_code == 400

    await client.post(f"/api/v1/payments/{payment['id']}/confirm", headers=customer["headers"])
    resp = await client.post(
        f"/api/v1/payments/{payment['id']}/refund",
        json={"amount": "30.00", "reason": "Missed the backyard"},
        headers=admin["headers"],
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "refunded"
    assert Decimal(data["refund_amount"]) == Decimal("30.00")
    processor.refund.assert_called_once_with("pi_test_123", 3000, "Missed the backyard")


@pytest.mark.asyncio
async def test_refund_cannot_exceed_amount_paid(client, customer, admin, booking):
    payment = (await _create_intent(client, customer, booking)).json()["payment"]
    await client.post(f"/api/v1/payments/{payment['id']}/confirm", headers=customer["headers"])

    resp = await client.post(
        f"/api/v1/payments/{payment['id']}/refund", json={"amount": "100.00"}, headers=admin["headers"]
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_list_payments_scoped_to_owner(client, customer, other_customer, admin, booking):
    await _create_intent(client, customer, booking)

    assert (await client.get("/api/v1/payments/", headers=customer["headers"])).json()["total"] == 1
    assert (await client.get("/api/v1/payments/", headers=other_customer["headers"])).json()["total"] == 0
    assert (await client.get("/api/v1/payments/", headers=admin["headers"])).json()["total"] == 1


@pytest.mark.asyncio
async def test_webhook_succeeded_completes_payment(client, customer, booking):
    payment = (await _create_intent(client, customer, booking)).json()["payment"]

    with patch("app.core.config.settings.STRIPE_WEBHOOK_SECRET", ""):
        resp = await client.post(
            "/api/v1/payments/webhook",
            json={
                "id": "evt_1",
                "object": "event",
                "type": "payment_intent.succeeded",
                "data": {
                    "object": {
                        "id": "pi_test_123",
                        "object": "payment_intent",
                        "status": "succeeded",
                        "latest_charge": {
                            "id": "ch_hook",
                            "payment_method_details": {"card": {"last4": "1881", "brand": "mastercard"}},
                        },
                    }
                },
            },
        )
    assert resp.status_code == 200

    resp = await client.get(f"/api/v1/payments/{payment['id']}", headers=customer["headers"])
    data = resp.json()
    assert data["status"] == "completed"
    assert data["last4"] == "1881"


@pytest.mark.asyncio
async def test_webhook_failed_marks_payment_failed(client, customer, booking):
    payment = (await _create_intent(client, customer, booking)).json()["payment"]

    with patch("app.core.config.settings.STRIPE_WEBHOOK_SECRET", ""):
        resp = await client.post(
            "/api/v1/payments/webhook",
            json={
                "id": "evt_2",
                "object": "event",
                "type": "payment_intent.payment_failed",
                "data": {"object": {"id": "pi_test_123", "object": "payment_intent"}},
            },
        )
    assert resp.status_code == 200

    resp = await client.get(f"/api/v1/payments/{payment['id']}", headers=customer["headers"])
    assert resp.json()["status"] == "failed"


@pytest.mark.asyncio
async def test_webhook_rejects_bad_signature(client):
    with patch("app.core.config.settings.STRIPE_WEBHOOK_SECRET", "whsec_test"):
        resp = await client.post(
            "/api/v1/payments/webhook",
            json={"type": "payment_intent.succeeded"},
            headers={"stripe-signature": "invalid_signature"},
        )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_webhook_ignores_unknown_events(client):
    with patch("app.core.config.settings.STRIPE_WEBHOOK_SECRET", ""):
        resp = await client.post(
            "/api/v1/payments/webhook",
            json={"id": "evt_3", "object": "event", "type": "customer.created", "data": {"object": {"id": "cus_1"}}},
        )
    assert resp.status_code == 200


def test_processor_maps_connection_errors_to_upstream_failure():
    processor = StripePaymentProcessor(api_key="sk_test_123")
    with patch("stripe.PaymentIntent.create", side_effect=stripe.APIConnectionError("network down")):
        with pytest.raises(UpstreamFailure):
            processor.create_intent(7200, "usd", {})


def test_processor_maps_card_errors_to_validation_error():
    processor = StripePaymentProcessor(api_key="sk_test_123")
    with patch("stripe.PaymentIntent.create", side_effect=stripe.CardError("Card declined", None, "card_declined")):
        with pytest.raises(ValidationError):
            processor.create_intent(7200, "usd", {})


def test_charge_details_handles_unexpanded_charge():
    assert charge_details({"latest_charge": "ch_123"}) == {"charge_id": "ch_123", "last4": None, "brand": None}
    assert charge_details({}) == {"charge_id": None, "last4": None, "brand": None}
