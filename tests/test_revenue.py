"""Tests for monthly recurring revenue and dashboard aggregates."""

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.models.appointment import Appointment, AppointmentStatus, Frequency
from app.models.payment import Payment, PaymentStatus
from app.services.revenue import calculate_mrr, monthly_contribution


def appt(frequency, total, status=AppointmentStatus.SCHEDULED):
    return SimpleNamespace(frequency=frequency, total_price=Decimal(total), status=status)


def test_weekly_and_monthly_mrr():
    """Weekly $40 (x4) plus monthly $60 (x1) is $220.00."""
    mrr = calculate_mrr([appt(Frequency.WEEKLY, "40.00"), appt(Frequency.MONTHLY, "60.00")])
    assert mrr == Decimal("220.00")


def test_one_time_and_inactive_appointments_excluded():
    mrr = calculate_mrr(
        [
            appt(Frequency.ONE_TIME, "500.00"),
            appt(Frequency.BI_WEEKLY, "50.00"),
            appt(Frequency.WEEKLY, "40.00", AppointmentStatus.CANCELLED),
            appt(Frequency.WEEKLY, "40.00", AppointmentStatus.PAUSED),
            appt(Frequency.MONTHLY, "30.00", AppointmentStatus.COMPLETED),
        ]
    )
    assert mrr == Decimal("130.00")


def test_rounding_happens_once():
    # Rounding each 66.665 line first would give 200.01
    appointments = [appt(Frequency.BI_WEEKLY, "33.3325") for _ in range(3)]
    assert monthly_contribution(Frequency.BI_WEEKLY, Decimal("33.3325")) == Decimal("66.6650")
    assert calculate_mrr(appointments) == Decimal("200.00")


def test_empty_book_is_zero():
    assert calculate_mrr([]) == Decimal("0.00")


@pytest.mark.asyncio
async def test_dashboard_revenue(client, db, admin, customer, lawn, catalog):
    package = catalog["packages"]["Basic Mow"]
    for frequency, total in ((Frequency.WEEKLY, "40.00"), (Frequency.MONTHLY, "60.00"), (Frequency.ONE_TIME, "99.00")):
        db.add(
            Appointment(
                user_id=customer["user"].id,
                property_id=lawn.id,
                service_package_id=package.id,
                scheduled_date=date(2026, 6, 15),
                status=AppointmentStatus.SCHEDULED,
                frequency=frequency,
                package_price=Decimal(total),
                total_price=Decimal(total),
            )
        )
    db.add(
        Payment(
            user_id=customer["user"].id,
            amount=Decimal("40.00"),
            status=PaymentStatus.COMPLETED,
            paid_at=datetime(2026, 6, 15, 9, 0),
        )
    )
    db.add(
        Payment(
            user_id=customer["user"].id,
            amount=Decimal("25.00"),
            status=PaymentStatus.COMPLETED,
            paid_at=datetime(2026, 5, 2, 9, 0),
        )
    )
    await db.commit()

    resp = await client.get("/api/v1/dashboard/revenue", headers=admin["headers"])
    assert resp.status_code == 200
    data = resp.json()
    assert Decimal(data["mrr"]) == Decimal("220.00")
    assert Decimal(data["today_revenue"]) == Decimal("40.00")
    assert Decimal(data["total_revenue"]) == Decimal("65.00")

    resp = await client.get("/api/v1/dashboard/stats", headers=admin["headers"])
    stats = resp.json()
    assert stats["total_customers"] == 1
    assert stats["today_appointments"] == 3
    assert Decimal(stats["month_revenue"]) == Decimal("40.00")

    resp = await client.get("/api/v1/dashboard/today", headers=admin["headers"])
    today = resp.json()
    assert today["day"] == "2026-06-15"
    assert len(today["appointments"]) == 3

    resp = await client.get("/api/v1/dashboard/customers", headers=admin["headers"])
    metrics = resp.json()
    assert metrics["recurring_customers"] == 1
    assert Decimal(metrics["average_lifetime_value"]) == Decimal("65.00")


@pytest.mark.asyncio
async def test_dashboard_is_admin_only(client, customer):
    resp = await client.get("/api/v1/dashboard/stats", headers=customer["headers"])
    assert resp.status_code == 403
