"""Recurring revenue and dashboard aggregates."""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment, AppointmentStatus, Frequency
from app.models.payment import Payment, PaymentStatus
from app.models.user import ROLE_CUSTOMER, User
from app.services.pricing import to_money

logger = logging.getLogger(__name__)

# Visits per month for each recurring frequency
MONTHLY_MULTIPLIERS = {
    Frequency.WEEKLY: 4,
    Frequency.BI_WEEKLY: 2,
    Frequency.MONTHLY: 1,
}

MRR_STATUSES = (
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.RESCHEDULED,
    AppointmentStatus.IN_PROGRESS,
    AppointmentStatus.COMPLETED,
)


def monthly_contribution(frequency: Frequency, total_price) -> Decimal:
    """Unrounded monthly value of one appointment; zero for one-time work."""
    return Decimal(total_price) * MONTHLY_MULTIPLIERS.get(frequency, 0)


def calculate_mrr(appointments: Iterable) -> Decimal:
    """Sum monthly contributions of qualifying appointments, rounding once."""
    total = Decimal("0")
    for appointment in appointments:
        if appointment.status not in MRR_STATUSES:
            continue
        total += monthly_contribution(appointment.frequency, appointment.total_price)
    return to_money(total)


async def recurring_revenue(db: AsyncSession) -> Decimal:
    result = await db.execute(
        select(Appointment.frequency, Appointment.total_price, Appointment.status).where(
            Appointment.frequency != Frequency.ONE_TIME,
            Appointment.status.in_(MRR_STATUSES),
        )
    )
    return calculate_mrr(result.all())


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def _month_start(day: date) -> date:
    return day.replace(day=1)


async def _revenue_since(db: AsyncSession, since: datetime | None = None, until: datetime | None = None) -> Decimal:
    query = select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.status == PaymentStatus.COMPLETED)
    if since is not None:
        query = query.where(Payment.paid_at >= since)
    if until is not None:
        query = query.where(Payment.paid_at < until)
    result = await db.execute(query)
    return to_money(result.scalar_one())


async def overview_stats(db: AsyncSession, today: date) -> dict:
    """Headline numbers for the admin dashboard."""
    month_start = _month_start(today)
    day_start, day_end = _day_bounds(today)

    total_customers = (
        await db.execute(select(func.count(User.id)).where(User.role == ROLE_CUSTOMER))
    ).scalar_one()
    today_appointments = (
        await db.execute(select(func.count(Appointment.id)).where(Appointment.scheduled_date == today))
    ).scalar_one()
    month_appointments = (
        await db.execute(
            select(func.count(Appointment.id)).where(
                Appointment.scheduled_date >= month_start, Appointment.scheduled_date <= today
            )
        )
    ).scalar_one()
    pending_payments = (
        await db.execute(select(func.count(Payment.id)).where(Payment.status == PaymentStatus.PENDING))
    ).scalar_one()

    return {
        "total_customers": total_customers,
        "today_appointments": today_appointments,
        "month_appointments": month_appointments,
        "total_revenue": await _revenue_since(db),
        "month_revenue": await _revenue_since(db, datetime.combine(month_start, time.min)),
        "today_revenue": await _revenue_since(db, day_start, day_end),
        "pending_payments": pending_payments,
    }


async def revenue_summary(db: AsyncSession, today: date) -> dict:
    day_start, day_end = _day_bounds(today)
    return {
        "mrr": await recurring_revenue(db),
        "today_revenue": await _revenue_since(db, day_start, day_end),
        "total_revenue": await _revenue_since(db),
    }


async def customer_metrics(db: AsyncSession, today: date) -> dict:
    month_start = datetime.combine(_month_start(today), time.min)

    total_customers = (
        await db.execute(select(func.count(User.id)).where(User.role == ROLE_CUSTOMER))
    ).scalar_one()
    new_this_month = (
        await db.execute(
            select(func.count(User.id)).where(User.role == ROLE_CUSTOMER, User.created_at >= month_start)
        )
    ).scalar_one()
    recurring_customers = (
        await db.execute(
            select(func.count(func.distinct(Appointment.user_id))).where(
                Appointment.frequency != Frequency.ONE_TIME,
                Appointment.status.in_(MRR_STATUSES),
            )
        )
    ).scalar_one()
    total_revenue = await _revenue_since(db)
    average_lifetime_value = to_money(total_revenue / total_customers) if total_customers else Decimal("0.00")

    return {
        "total_customers": total_customers,
        "new_this_month": new_this_month,
        "recurring_customers": recurring_customers,
        "average_lifetime_value": average_lifetime_value,
    }


async def customer_stats(db: AsyncSession, user_id) -> dict:
    """Per-customer totals for the admin customer profile."""
    total_appointments = (
        await db.execute(select(func.count(Appointment.id)).where(Appointment.user_id == user_id))
    ).scalar_one()
    completed_appointments = (
        await db.execute(
            select(func.count(Appointment.id)).where(
                Appointment.user_id == user_id, Appointment.status == AppointmentStatus.COMPLETED
            )
        )
    ).scalar_one()
    result = await db.execute(
        select(func.coalesce(func.sum(Payment.amount), 0), func.count(Payment.id)).where(
            Payment.user_id == user_id, Payment.status == PaymentStatus.COMPLETED
        )
    )
    total_spent, paid_count = result.one()
    total_spent = to_money(total_spent)
    average_order_value = to_money(total_spent / paid_count) if paid_count else Decimal("0.00")

    return {
        "total_appointments": total_appointments,
        "completed_appointments": completed_appointments,
        "total_spent": total_spent,
        "average_order_value": average_order_value,
    }
