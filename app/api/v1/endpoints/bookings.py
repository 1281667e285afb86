"""Booking endpoints.

Customers act on their own bookings; admins on any. Status rules live in
app.services.appointment_lifecycle.
"""

import logging
from datetime import date
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_db
from app.core.deps import get_current_user, require_admin
from app.models.appointment import Appointment, AppointmentStatus
from app.models.user import User
from app.schemas.appointment import (
    AddOnsRequest,
    AppointmentList,
    AppointmentOut,
    AssignCrewRequest,
    BookingCreate,
    BookingResponse,
    BookingUpdate,
    CancelRequest,
    CompleteRequest,
    RescheduleRequest,
)
from app.services import appointment_lifecycle as lifecycle
from app.services.email_service import EmailService, get_email_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: BookingCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    email_service: EmailService = Depends(get_email_service),
):
    appointment, warnings = await lifecycle.create_booking(
        db,
        current_user,
        property_id=data.property_id,
        service_package_id=data.service_package_id,
        scheduled_date=data.scheduled_date,
        clock=clock,
        email_service=email_service,
        scheduled_time=data.scheduled_time,
        frequency=data.frequency,
        add_ons=data.selections(),
        special_instructions=data.special_instructions,
    )
    return BookingResponse(booking=AppointmentOut.from_model(appointment), warnings=warnings)


@router.get("/", response_model=AppointmentList)
async def list_bookings(
    status: Optional[AppointmentStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    filters = []
    if not current_user.is_admin:
        filters.append(Appointment.user_id == current_user.id)
    if status:
        filters.append(Appointment.status == status)
    if start_date:
        filters.append(Appointment.scheduled_date >= start_date)
    if end_date:
        filters.append(Appointment.scheduled_date <= end_date)

    total = (await db.execute(select(func.count(Appointment.id)).where(*filters))).scalar_one()
    result = await db.execute(
        select(Appointment)
        .where(*filters)
        .order_by(Appointment.scheduled_date.desc())
        .offset(offset)
        .limit(limit)
    )
    return AppointmentList(
        appointments=[AppointmentOut.from_model(a) for a in result.scalars().all()],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{appointment_id}", response_model=AppointmentOut)
async def get_booking(
    appointment_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    appointment = await lifecycle.get_appointment_for(db, appointment_id, current_user)
    return AppointmentOut.from_model(appointment)


@router.put("/{appointment_id}", response_model=AppointmentOut)
async def update_booking(
    appointment_id: UUID,
    data: BookingUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    appointment = await lifecycle.get_appointment_for(db, appointment_id, current_user)
    appointment = await lifecycle.update_appointment(
        db, appointment, current_user, data.model_dump(exclude_unset=True), clock
    )
    return AppointmentOut.from_model(appointment)


@router.post("/{appointment_id}/cancel", response_model=AppointmentOut)
async def cancel_booking(
    appointment_id: UUID,
    data: Optional[CancelRequest] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    appointment = await lifecycle.get_appointment_for(db, appointment_id, current_user)
    lifecycle.cancel(appointment, clock, data.cancellation_reason if data else None)
    await db.commit()
    return AppointmentOut.from_model(await lifecycle.reload(db, appointment.id))


@router.patch("/{appointment_id}/reschedule", response_model=AppointmentOut)
async def reschedule_booking(
    appointment_id: UUID,
    data: RescheduleRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Move a booking on the admin calendar."""
    appointment = await lifecycle.get_appointment_for(db, appointment_id, current_user)
    lifecycle.reschedule(appointment, data.scheduled_date, data.scheduled_time)
    await db.commit()
    return AppointmentOut.from_model(await lifecycle.reload(db, appointment.id))


@router.post("/{appointment_id}/start", response_model=AppointmentOut)
async def start_booking(
    appointment_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    appointment = await lifecycle.get_appointment_for(db, appointment_id, current_user)
    lifecycle.start(appointment)
    await db.commit()
    return AppointmentOut.from_model(await lifecycle.reload(db, appointment.id))


@router.post("/{appointment_id}/complete", response_model=AppointmentOut)
async def complete_booking(
    appointment_id: UUID,
    data: CompleteRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    appointment = await lifecycle.get_appointment_for(db, appointment_id, current_user)
    lifecycle.complete(appointment, clock, data.completion_notes, data.actual_duration, data.weather_condition)
    await db.commit()
    return AppointmentOut.from_model(await lifecycle.reload(db, appointment.id))


@router.patch("/{appointment_id}/assign-crew", response_model=AppointmentOut)
async def assign_crew(
    appointment_id: UUID,
    data: AssignCrewRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    appointment = await lifecycle.get_appointment_for(db, appointment_id, current_user)
    appointment = await lifecycle.assign_crew(db, appointment, data.crew_member_id)
    return AppointmentOut.from_model(appointment)


@router.post("/{appointment_id}/add-ons", response_model=BookingResponse)
async def add_add_ons(
    appointment_id: UUID,
    data: AddOnsRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    appointment = await lifecycle.get_appointment_for(db, appointment_id, current_user)
    appointment, warnings = await lifecycle.add_add_ons(db, appointment, data.add_ons)
    return BookingResponse(booking=AppointmentOut.from_model(appointment), warnings=warnings)
