"""Quote request endpoints."""

import logging
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_db
from app.core.deps import get_current_user, get_current_user_optional, require_admin
from app.models.quote import Quote, QuoteStatus
from app.models.user import User
from app.schemas.quote import QuoteCreate, QuoteDecision, QuoteOut, QuoteRespond
from app.services import quotes as quote_service
from app.services.email_service import EmailService, get_email_service
from app.services.notification_service import notify_quote_responded

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=QuoteOut, status_code=201)
async def submit_quote(
    data: QuoteCreate,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    """Submit a quote request. Visitors without an account are welcome."""
    quote = Quote(
        user_id=current_user.id if current_user else None,
        status=QuoteStatus.PENDING,
        **data.model_dump(),
    )
    db.add(quote)
    await db.commit()
    await db.refresh(quote)
    logger.info("Quote %s submitted for %s", quote.id, quote.service_type)
    return quote


@router.get("/", response_model=list[QuoteOut])
async def list_quotes(
    status: Optional[QuoteStatus] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    query = select(Quote).order_by(Quote.created_at.desc()).offset(offset).limit(limit)
    if status:
        query = query.where(Quote.status == status)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/mine", response_model=list[QuoteOut])
async def my_quotes(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Quote).where(Quote.user_id == current_user.id).order_by(Quote.created_at.desc())
    )
    return result.scalars().all()


@router.get("/{quote_id}", response_model=QuoteOut)
async def get_quote(
    quote_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await quote_service.get_quote(db, quote_id, current_user)


@router.put("/{quote_id}", response_model=QuoteOut)
async def respond_to_quote(
    quote_id: UUID,
    data: QuoteRespond,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    email_service: EmailService = Depends(get_email_service),
):
    quote = await quote_service.get_quote(db, quote_id, current_user)
    quote_service.respond(quote, current_user, clock, data.estimated_price, data.admin_notes, data.status)
    await db.commit()
    await db.refresh(quote)

    if quote.status == QuoteStatus.QUOTED:
        try:
            await notify_quote_responded(db, quote)
            await email_service.send_quote_response(quote)
        except Exception as e:
            logger.error("Failed to deliver quote response for %s: %s", quote.id, e)
    return quote


@router.post("/{quote_id}/decision", response_model=QuoteOut)
async def decide_quote(
    quote_id: UUID,
    data: QuoteDecision,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Accept or decline a quoted price before it expires."""
    quote = await quote_service.get_quote(db, quote_id, current_user)
    return await quote_service.decide(db, quote, data.accept, clock)
