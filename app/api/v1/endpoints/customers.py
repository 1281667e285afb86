"""Customer self-service: profile, own bookings and payments, pause/resume."""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import apply_changes, get_db
from app.core.deps import get_current_user
from app.models.appointment import Appointment
from app.models.payment import Payment
from app.models.user import User
from app.schemas.appointment import AppointmentOut, ServiceStateChange
from app.schemas.auth import MessageResponse, PasswordChange, ProfileUpdate, UserOut
from app.schemas.payment import PaymentOut
from app.services import appointment_lifecycle as lifecycle
from app.services.auth import hash_password, verify_password

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/profile", response_model=UserOut)
async def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserOut)
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    apply_changes(current_user, data.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(current_user)
    logger.info("Profile updated for user %s", current_user.id)
    return current_user


@router.put("/password", response_model=MessageResponse)
async def change_password(
    data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not verify_password(data.current_password, current_user.hashed_password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    current_user.hashed_password = hash_password(data.new_password)
    await db.commit()
    logger.info("Password changed for user %s", current_user.id)
    return MessageResponse(message="Password updated successfully")


@router.get("/appointments", response_model=list[AppointmentOut])
async def my_appointments(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Appointment)
        .where(Appointment.user_id == current_user.id)
        .order_by(Appointment.scheduled_date.desc())
    )
    return [AppointmentOut.from_model(a) for a in result.scalars().all()]


@router.get("/payments", response_model=list[PaymentOut])
async def my_payments(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Payment).where(Payment.user_id == current_user.id).order_by(Payment.created_at.desc())
    )
    return result.scalars().all()


@router.post("/pause-service", response_model=ServiceStateChange)
async def pause_service(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Pause all upcoming appointments. Calling it again changes nothing."""
    updated = await lifecycle.pause_service(db, current_user.id)
    return ServiceStateChange(updated=updated, message=f"Paused {updated} appointment(s)")


@router.post("/resume-service", response_model=ServiceStateChange)
async def resume_service(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await lifecycle.resume_service(db, current_user.id)
    return ServiceStateChange(updated=updated, message=f"Resumed {updated} appointment(s)")
