"""Appointment lifecycle: booking, status transitions and their side effects.

Status graph::

    scheduled / rescheduled --> in-progress --> completed
            |      ^                 |
            v      |                 v
          paused --+-----------> cancelled

``rescheduled`` is the label left behind by a reschedule and behaves exactly
like ``scheduled``. ``completed`` and ``cancelled`` are terminal.

Every operation checks its guards before touching any field, so a rejected
call leaves the appointment unchanged.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.database import reject_nulls
from app.core.exceptions import (
    AlreadyCancelled,
    AlreadyCompleted,
    CannotCancelCompleted,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from app.models.appointment import Appointment, AppointmentService, AppointmentStatus, Frequency
from app.models.crew_member import CrewMember
from app.models.property import Property
from app.models.user import User
from app.services import pricing
from app.services.email_service import EmailService
from app.services.notification_service import notify_booking_confirmed

logger = logging.getLogger(__name__)

SCHEDULED_STATES = frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.RESCHEDULED})
TERMINAL_STATES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})
RESCHEDULABLE_STATES = SCHEDULED_STATES | {AppointmentStatus.IN_PROGRESS}

DEFAULT_SCHEDULED_TIME = "09:00 AM"
DEFAULT_CANCELLATION_REASON = "No reason provided"

# Targets reachable through a plain status change; completed/cancelled go
# through complete()/cancel() so their metadata is always recorded.
ALLOWED_TRANSITIONS = {
    AppointmentStatus.SCHEDULED: {
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.PAUSED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    },
    AppointmentStatus.RESCHEDULED: {
        AppointmentStatus.SCHEDULED,
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.PAUSED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    },
    AppointmentStatus.IN_PROGRESS: {
        AppointmentStatus.SCHEDULED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    },
    AppointmentStatus.PAUSED: {
        AppointmentStatus.SCHEDULED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    },
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.CANCELLED: set(),
}


# =============================================================================
# Guards
# =============================================================================

def ensure_not_terminal(status: AppointmentStatus, action: str):
    """Reject any mutation of a completed or cancelled appointment."""
    if status == AppointmentStatus.COMPLETED:
        raise AlreadyCompleted(action)
    if status == AppointmentStatus.CANCELLED:
        raise AlreadyCancelled(action)


def ensure_can_reschedule(status: AppointmentStatus):
    ensure_not_terminal(status, "reschedule")
    if status not in RESCHEDULABLE_STATES:
        raise InvalidTransition(
            f"Cannot reschedule {status.value} appointment",
            current_status=status.value,
            target_status=AppointmentStatus.RESCHEDULED.value,
        )


def ensure_can_complete(status: AppointmentStatus):
    ensure_not_terminal(status, "complete")


def ensure_can_cancel(status: AppointmentStatus):
    if status == AppointmentStatus.COMPLETED:
        raise CannotCancelCompleted()
    if status == AppointmentStatus.CANCELLED:
        raise AlreadyCancelled()


def ensure_transition(current: AppointmentStatus, target: AppointmentStatus):
    if current == target:
        return
    ensure_not_terminal(current, "update")
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(
            f"Cannot change status from {current.value} to {target.value}",
            current_status=current.value,
            target_status=target.value,
        )


# =============================================================================
# Transitions on a loaded appointment
# =============================================================================

def reschedule(appointment: Appointment, scheduled_date: date, scheduled_time: Optional[str] = None):
    ensure_can_reschedule(appointment.status)
    appointment.scheduled_date = scheduled_date
    if scheduled_time:
        appointment.scheduled_time = scheduled_time
    appointment.status = AppointmentStatus.RESCHEDULED
    logger.info("Appointment %s rescheduled to %s %s", appointment.id, scheduled_date, appointment.scheduled_time)


def complete(
    appointment: Appointment,
    clock: Clock,
    completion_notes: Optional[str] = None,
    actual_duration: Optional[int] = None,
    weather_condition: Optional[str] = None,
):
    ensure_can_complete(appointment.status)
    if actual_duration is not None and actual_duration < 0:
        raise ValidationError("Actual duration cannot be negative")
    appointment.status = AppointmentStatus.COMPLETED
    appointment.completed_at = clock.now()
    appointment.completion_notes = completion_notes
    appointment.actual_duration = actual_duration
    appointment.weather_condition = weather_condition
    logger.info("Appointment %s completed", appointment.id)


def cancel(appointment: Appointment, clock: Clock, reason: Optional[str] = None):
    ensure_can_cancel(appointment.status)
    appointment.status = AppointmentStatus.CANCELLED
    appointment.cancelled_at = clock.now()
    appointment.cancellation_reason = reason or DEFAULT_CANCELLATION_REASON
    logger.info("Appointment %s cancelled: %s", appointment.id, appointment.cancellation_reason)


def start(appointment: Appointment):
    ensure_transition(appointment.status, AppointmentStatus.IN_PROGRESS)
    appointment.status = AppointmentStatus.IN_PROGRESS


def attach_add_ons(appointment: Appointment, add_ons: list[pricing.PricedAddOn]) -> Decimal:
    """Snapshot add-ons onto the appointment and raise its total.

    Existing snapshots are never repriced. Returns the amount added.
    """
    ensure_not_terminal(appointment.status, "modify")
    added = Decimal("0")
    for add_on in add_ons:
        appointment.add_ons.append(
            AppointmentService(
                service_id=add_on.service_id,
                price=pricing.to_money(add_on.unit_price),
                quantity=add_on.quantity,
            )
        )
        added += add_on.unit_price * add_on.quantity
    added = pricing.to_money(added)
    appointment.total_price = pricing.to_money(Decimal(appointment.total_price) + added)
    return added


def recompute_total(appointment: Appointment) -> Decimal:
    """Total implied by the stored snapshots: package price plus add-on lines."""
    total = Decimal(appointment.package_price)
    for line in appointment.add_ons:
        total += Decimal(line.price) * line.quantity
    return pricing.to_money(total)


# =============================================================================
# Persistence-level operations
# =============================================================================

async def get_appointment_for(db: AsyncSession, appointment_id: UUID, user: User, for_update: bool = False) -> Appointment:
    """Load an appointment the user may see. Other customers' bookings read as missing."""
    query = select(Appointment).where(Appointment.id == appointment_id)
    if not user.is_admin:
        query = query.where(Appointment.user_id == user.id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    appointment = result.scalar_one_or_none()
    if not appointment:
        raise NotFound("Booking not found")
    return appointment


async def create_booking(
    db: AsyncSession,
    user: User,
    property_id: UUID,
    service_package_id: UUID,
    scheduled_date: date,
    clock: Clock,
    email_service: Optional[EmailService] = None,
    scheduled_time: Optional[str] = None,
    frequency: Frequency = Frequency.ONE_TIME,
    add_ons: Optional[list[pricing.AddOnSelection]] = None,
    special_instructions: Optional[str] = None,
) -> tuple[Appointment, list[str]]:
    """Price and persist a new booking, then send a best-effort confirmation.

    Returns the appointment and any warnings about dropped add-ons.
    """
    query = select(Property).where(Property.id == property_id)
    if not user.is_admin:
        query = query.where(Property.user_id == user.id)
    result = await db.execute(query)
    property = result.scalar_one_or_none()
    if not property:
        raise NotFound("Property not found or does not belong to you")

    breakdown = await pricing.quote_booking_price(db, service_package_id, property.lot_size, add_ons)

    appointment = Appointment(
        user_id=property.user_id,
        property_id=property.id,
        service_package_id=service_package_id,
        scheduled_date=scheduled_date,
        scheduled_time=scheduled_time or DEFAULT_SCHEDULED_TIME,
        frequency=frequency,
        status=AppointmentStatus.SCHEDULED,
        package_price=breakdown.package_price,
        total_price=breakdown.package_price,
        special_instructions=special_instructions,
        add_ons=[],
    )
    attach_add_ons(appointment, breakdown.add_ons)
    db.add(appointment)
    await db.commit()

    appointment = await reload(db, appointment.id)
    logger.info(
        "Booking %s created for user %s: %s on %s, total %s",
        appointment.id,
        appointment.user_id,
        appointment.service_package.name,
        appointment.scheduled_date,
        appointment.total_price,
    )

    await _send_confirmation(db, appointment, email_service)
    return appointment, breakdown.warnings


async def _send_confirmation(db: AsyncSession, appointment: Appointment, email_service: Optional[EmailService]):
    """Confirmation is best-effort; the booking is already committed."""
    try:
        result = await db.execute(select(User).where(User.id == appointment.user_id))
        customer = result.scalar_one()
        if email_service is not None:
            await email_service.send_booking_confirmation(
                appointment, customer, appointment.property, appointment.service_package
            )
        await notify_booking_confirmed(db, appointment, appointment.service_package.name)
    except Exception as e:
        logger.error("Failed to send booking confirmation for %s: %s", appointment.id, e)


async def reload(db: AsyncSession, appointment_id: UUID) -> Appointment:
    result = await db.execute(
        select(Appointment).where(Appointment.id == appointment_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def add_add_ons(
    db: AsyncSession, appointment: Appointment, selections: list[pricing.AddOnSelection]
) -> tuple[Appointment, list[str]]:
    ensure_not_terminal(appointment.status, "modify")
    priced, warnings = await pricing.resolve_add_ons(db, selections)
    added = attach_add_ons(appointment, priced)
    await db.commit()
    logger.info("Added %d add-on(s) worth %s to appointment %s", len(priced), added, appointment.id)
    return await reload(db, appointment.id), warnings


async def _ensure_crew_member(db: AsyncSession, crew_member_id: UUID):
    result = await db.execute(select(CrewMember).where(CrewMember.id == crew_member_id))
    crew_member = result.scalar_one_or_none()
    if not crew_member:
        raise NotFound("Crew member not found")
    if not crew_member.is_active:
        raise ValidationError("Crew member is not active")


async def assign_crew(db: AsyncSession, appointment: Appointment, crew_member_id: Optional[UUID]) -> Appointment:
    ensure_not_terminal(appointment.status, "assign crew to")
    if crew_member_id is not None:
        await _ensure_crew_member(db, crew_member_id)
    appointment.crew_member_id = crew_member_id
    await db.commit()
    logger.info("Crew %s assigned to appointment %s", crew_member_id, appointment.id)
    return await reload(db, appointment.id)


async def update_appointment(
    db: AsyncSession,
    appointment: Appointment,
    user: User,
    changes: dict,
    clock: Clock,
) -> Appointment:
    """Apply a partial update.

    ``changes`` holds only the fields the caller sent. Customers may touch
    the schedule and their instructions; status, crew and notes are admin
    only. Schedule changes count as a reschedule.
    """
    admin_fields = {"status", "crew_member_id", "notes", "completion_notes", "actual_duration",
                    "weather_condition", "cancellation_reason", "weather_delay"}
    if not user.is_admin:
        forbidden = admin_fields & set(changes)
        if forbidden:
            raise PermissionDenied(f"Only administrators can change: {', '.join(sorted(forbidden))}")
    reject_nulls(Appointment, changes)

    target = changes.get("status")
    if target is not None:
        target = AppointmentStatus(target)

    # Guards first; nothing is mutated until every check has passed.
    ensure_not_terminal(appointment.status, "update")
    schedule_change = "scheduled_date" in changes or "scheduled_time" in changes
    if schedule_change:
        ensure_can_reschedule(appointment.status)
    if target is not None:
        ensure_transition(appointment.status, target)
    if changes.get("crew_member_id") is not None:
        await _ensure_crew_member(db, changes["crew_member_id"])

    if schedule_change:
        reschedule(
            appointment,
            changes.get("scheduled_date") or appointment.scheduled_date,
            changes.get("scheduled_time"),
        )
    for field in ("special_instructions", "notes", "crew_member_id", "weather_delay"):
        if field in changes:
            setattr(appointment, field, changes[field])

    if target is not None and target != appointment.status:
        if target == AppointmentStatus.COMPLETED:
            complete(
                appointment,
                clock,
                changes.get("completion_notes"),
                changes.get("actual_duration"),
                changes.get("weather_condition"),
            )
        elif target == AppointmentStatus.CANCELLED:
            cancel(appointment, clock, changes.get("cancellation_reason"))
        else:
            appointment.status = target
            logger.info("Appointment %s status set to %s", appointment.id, target.value)

    await db.commit()
    return await reload(db, appointment.id)


async def pause_service(db: AsyncSession, user_id: UUID) -> int:
    """Pause every upcoming appointment of a customer. Safe to repeat."""
    result = await db.execute(
        update(Appointment)
        .where(
            Appointment.user_id == user_id,
            or_(
                Appointment.status == AppointmentStatus.SCHEDULED,
                Appointment.status == AppointmentStatus.RESCHEDULED,
            ),
        )
        .values(status=AppointmentStatus.PAUSED)
        .execution_options(synchronize_session="evaluate")
    )
    await db.commit()
    logger.info("Paused %d appointment(s) for user %s", result.rowcount, user_id)
    return result.rowcount


async def resume_service(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        update(Appointment)
        .where(Appointment.user_id == user_id, Appointment.status == AppointmentStatus.PAUSED)
        .values(status=AppointmentStatus.SCHEDULED)
        .execution_options(synchronize_session="evaluate")
    )
    await db.commit()
    logger.info("Resumed %d appointment(s) for user %s", result.rowcount, user_id)
    return result.rowcount


async def cancel_upcoming_for_customer(db: AsyncSession, user_id: UUID, clock: Clock, reason: str) -> int:
    """Cancel a customer's scheduled appointments one by one through cancel()."""
    result = await db.execute(
        select(Appointment).where(Appointment.user_id == user_id, Appointment.status.in_(list(SCHEDULED_STATES)))
    )
    appointments = result.scalars().all()
    for appointment in appointments:
        cancel(appointment, clock, reason)
    return len(appointments)
