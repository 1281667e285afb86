"""Review endpoints. Listing is public; only approved reviews are shown to visitors."""

import logging
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_db
from app.core.deps import get_current_user, get_current_user_optional, require_admin
from app.core.exceptions import NotFound
from app.models.review import Review
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.review import ReviewCreate, ReviewModerate, ReviewOut
from app.services import reviews as review_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=list[ReviewOut])
async def list_reviews(
    approved: Optional[bool] = None,
    featured: Optional[bool] = None,
    limit: int = Query(50, ge=1, le=200),
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    query = select(Review).order_by(Review.created_at.desc()).limit(limit)
    if current_user is None or not current_user.is_admin:
        query = query.where(Review.is_approved.is_(True))
    elif approved is not None:
        query = query.where(Review.is_approved.is_(approved))
    if featured is not None:
        query = query.where(Review.is_featured.is_(featured))
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{review_id}", response_model=ReviewOut)
async def get_review(
    review_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    review = await review_service.get_review(db, review_id)
    visible = review.is_approved or (
        current_user is not None and (current_user.is_admin or current_user.id == review.user_id)
    )
    if not visible:
        raise NotFound("Review not found")
    return review


@router.post("/", response_model=ReviewOut, status_code=201)
async def create_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Review a completed appointment. Reviews stay hidden until approved."""
    return await review_service.create_review(
        db, current_user, data.appointment_id, data.rating, data.title, data.comment
    )


@router.put("/{review_id}", response_model=ReviewOut)
async def moderate_review(
    review_id: UUID,
    data: ReviewModerate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    review = await review_service.get_review(db, review_id)
    return await review_service.moderate(db, review, current_user, clock, data.model_dump(exclude_unset=True))


@router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    review = await review_service.get_review(db, review_id)
    await db.delete(review)
    await db.commit()
    logger.info("Review %s deleted by %s", review_id, current_user.email)
    return MessageResponse(message="Review deleted successfully")
