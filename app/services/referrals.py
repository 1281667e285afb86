"""Referral program.

Every customer gets a code of the form ``GREEN`` plus the first eight
characters of their id. A new customer who registers with that code opens a
pending referral; the referral completes when the new customer's first
payment succeeds, which earns the referrer the configured discount. Pending
referrals that outlive ``REFERRAL_VALID_DAYS`` expire instead.
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.config import settings
from app.models.referral import Referral, ReferralStatus
from app.models.user import User
from app.services.pricing import to_money

logger = logging.getLogger(__name__)

CODE_PREFIX = "GREEN"


def referral_code_for(user_id: UUID) -> str:
    return f"{CODE_PREFIX}{str(user_id)[:8].upper()}"


def share_url_for(code: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/register?ref={code}"


async def ensure_referral_code(db: AsyncSession, user: User) -> str:
    """Return the user's code, assigning it on first use."""
    if not user.referral_code:
        user.referral_code = referral_code_for(user.id)
        await db.commit()
        await db.refresh(user)
    return user.referral_code


async def record_signup(db: AsyncSession, new_user: User, code: Optional[str], clock: Clock) -> Optional[Referral]:
    """Open a pending referral for a customer who registered with a code.

    Unknown codes and self-referrals are ignored so registration never fails
    on them.
    """
    if not code:
        return None
    code = code.strip().upper()
    result = await db.execute(select(User).where(User.referral_code == code))
    referrer = result.scalar_one_or_none()
    if not referrer or referrer.id == new_user.id:
        logger.warning("Ignoring referral code %s for new user %s", code, new_user.id)
        return None

    referral = Referral(
        referrer_id=referrer.id,
        referred_user_id=new_user.id,
        referral_code=code,
        status=ReferralStatus.PENDING,
        discount_amount=to_money(settings.REFERRAL_DISCOUNT),
        expires_at=clock.now() + timedelta(days=settings.REFERRAL_VALID_DAYS),
    )
    db.add(referral)
    await db.commit()
    await db.refresh(referral)
    logger.info("Referral %s opened: %s referred %s", referral.id, referrer.id, new_user.id)
    return referral


async def complete_for_customer(db: AsyncSession, user_id: UUID, clock: Clock) -> Optional[Referral]:
    """Settle the pending referral of a customer whose payment just succeeded.

    Adds to the caller's transaction; the caller commits.
    """
    result = await db.execute(
        select(Referral).where(
            Referral.referred_user_id == user_id,
            Referral.status == ReferralStatus.PENDING,
        )
    )
    referral = result.scalar_one_or_none()
    if not referral:
        return None

    now = clock.now()
    if referral.expires_at is not None and referral.expires_at <= now:
        referral.status = ReferralStatus.EXPIRED
        logger.info("Referral %s expired before the first payment", referral.id)
    else:
        referral.status = ReferralStatus.COMPLETED
        referral.used_at = now
        logger.info("Referral %s completed; %s earned by %s", referral.id, referral.discount_amount, referral.referrer_id)
    return referral


async def referral_stats(db: AsyncSession, user: User) -> dict:
    result = await db.execute(
        select(Referral).where(Referral.referrer_id == user.id).order_by(Referral.created_at.desc())
    )
    referrals = result.scalars().all()

    earned = sum(
        (Decimal(r.discount_amount) for r in referrals if r.status == ReferralStatus.COMPLETED), Decimal("0")
    )
    pending = sum(
        (Decimal(r.discount_amount) for r in referrals if r.status == ReferralStatus.PENDING), Decimal("0")
    )
    return {
        "total_referrals": len(referrals),
        "completed_referrals": sum(1 for r in referrals if r.status == ReferralStatus.COMPLETED),
        "total_earned": to_money(earned),
        "pending_rewards": to_money(pending),
        "referrals": [
            {
                "id": r.id,
                "name": r.referred_user.full_name if r.referred_user else "Former customer",
                "date": r.created_at,
                "status": r.status,
                "reward": to_money(r.discount_amount),
            }
            for r in referrals
        ],
    }
