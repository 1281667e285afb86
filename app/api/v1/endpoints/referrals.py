"""Referral code and stats for the signed-in customer."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.user import User
from app.schemas.referral import ReferralCode, ReferralStats
from app.services import referrals as referral_service

router = APIRouter()


@router.get("/code", response_model=ReferralCode)
async def get_referral_code(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    code = await referral_service.ensure_referral_code(db, current_user)
    return ReferralCode(code=code, share_url=referral_service.share_url_for(code))


@router.get("/stats", response_model=ReferralStats)
async def get_referral_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ReferralStats(**await referral_service.referral_stats(db, current_user))
