"""Customer reviews and their moderation."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.exceptions import Conflict, NotFound, ValidationError
from app.models.appointment import Appointment, AppointmentStatus
from app.models.review import Review
from app.models.user import User

logger = logging.getLogger(__name__)


async def create_review(
    db: AsyncSession,
    user: User,
    appointment_id: UUID,
    rating: int,
    title: Optional[str] = None,
    comment: Optional[str] = None,
) -> Review:
    """Review one of the user's own completed appointments, once."""
    if not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5")

    result = await db.execute(
        select(Appointment).where(
            Appointment.id == appointment_id,
            Appointment.user_id == user.id,
            Appointment.status == AppointmentStatus.COMPLETED,
        )
    )
    if not result.scalar_one_or_none():
        raise NotFound("Appointment not found or not eligible for review")

    existing = await db.execute(select(Review.id).where(Review.appointment_id == appointment_id))
    if existing.first() is not None:
        raise Conflict("Review already exists for this appointment")

    review = Review(
        user_id=user.id,
        appointment_id=appointment_id,
        rating=rating,
        title=title,
        comment=comment,
        is_approved=False,
    )
    db.add(review)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Review already exists for this appointment")
    await db.refresh(review)
    logger.info("Review %s created for appointment %s (pending approval)", review.id, appointment_id)
    return review


async def get_review(db: AsyncSession, review_id: UUID) -> Review:
    result = await db.execute(select(Review).where(Review.id == review_id))
    review = result.scalar_one_or_none()
    if not review:
        raise NotFound("Review not found")
    return review


async def moderate(db: AsyncSession, review: Review, admin: User, clock: Clock, changes: dict) -> Review:
    """Apply admin moderation: approval, featuring and a public response."""
    if "is_approved" in changes:
        approved = bool(changes["is_approved"])
        review.is_approved = approved
        review.approved_at = clock.now() if approved else None
        review.approved_by = admin.id if approved else None
    if "is_featured" in changes:
        review.is_featured = bool(changes["is_featured"])
    if "admin_response" in changes:
        review.admin_response = changes["admin_response"]
    await db.commit()
    await db.refresh(review)
    logger.info("Review %s moderated by %s", review.id, admin.email)
    return review
