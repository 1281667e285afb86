"""Quote requests: submission, admin response and customer decision."""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.exceptions import InvalidTransition, NotFound, ValidationError
from app.models.quote import Quote, QuoteStatus
from app.models.user import User
from app.services.pricing import to_money

logger = logging.getLogger(__name__)

QUOTE_VALIDITY = timedelta(days=30)

ADMIN_SETTABLE = {QuoteStatus.PENDING, QuoteStatus.REVIEWED, QuoteStatus.QUOTED, QuoteStatus.DECLINED}
DECIDED = {QuoteStatus.ACCEPTED, QuoteStatus.DECLINED, QuoteStatus.EXPIRED}


async def get_quote(db: AsyncSession, quote_id: UUID, user: Optional[User] = None) -> Quote:
    query = select(Quote).where(Quote.id == quote_id)
    if user is not None and not user.is_admin:
        query = query.where(Quote.user_id == user.id)
    result = await db.execute(query)
    quote = result.scalar_one_or_none()
    if not quote:
        raise NotFound("Quote not found")
    return quote


def respond(
    quote: Quote,
    admin: User,
    clock: Clock,
    estimated_price: Optional[Decimal] = None,
    admin_notes: Optional[str] = None,
    status: Optional[QuoteStatus] = None,
):
    """Record the admin's answer. A price makes the quote ``quoted`` for 30 days."""
    if quote.status in DECIDED:
        raise InvalidTransition(
            f"Cannot respond to {quote.status.value} quote",
            current_status=quote.status.value,
            target_status=status.value if status else None,
        )
    if status is not None and status not in ADMIN_SETTABLE:
        raise ValidationError(f"Administrators cannot set quote status to {status.value}")
    if estimated_price is not None and estimated_price < 0:
        raise ValidationError("Estimated price cannot be negative")

    if admin_notes is not None:
        quote.admin_notes = admin_notes
    if estimated_price is not None:
        now = clock.now()
        quote.estimated_price = to_money(estimated_price)
        quote.quoted_at = now
        quote.expires_at = now + QUOTE_VALIDITY
        quote.responded_by_id = admin.id
        quote.status = status or QuoteStatus.QUOTED
    elif status is not None:
        if status == QuoteStatus.QUOTED and quote.estimated_price is None:
            raise ValidationError("A quoted status requires an estimated price")
        quote.status = status
        quote.responded_by_id = admin.id
    logger.info("Quote %s answered by %s: status=%s", quote.id, admin.email, quote.status.value)


def expire_if_due(quote: Quote, clock: Clock) -> bool:
    if quote.status == QuoteStatus.QUOTED and quote.expires_at and quote.expires_at <= clock.now():
        quote.status = QuoteStatus.EXPIRED
        return True
    return False


async def decide(db: AsyncSession, quote: Quote, accept: bool, clock: Clock) -> Quote:
    """Customer accepts or declines a live quote."""
    if expire_if_due(quote, clock):
        await db.commit()
        logger.info("Quote %s expired before the customer responded", quote.id)
        raise InvalidTransition("Quote has expired", current_status=QuoteStatus.EXPIRED.value)

    target = QuoteStatus.ACCEPTED if accept else QuoteStatus.DECLINED
    if quote.status != QuoteStatus.QUOTED:
        raise InvalidTransition(
            f"Cannot {'accept' if accept else 'decline'} {quote.status.value} quote",
            current_status=quote.status.value,
            target_status=target.value,
        )
    quote.status = target
    await db.commit()
    await db.refresh(quote)
    logger.info("Quote %s %s by customer", quote.id, target.value)
    return quote
