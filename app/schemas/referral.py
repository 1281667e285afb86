"""Pydantic schemas for the referral program."""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel
from uuid import UUID

from app.models.referral import ReferralStatus


class ReferralCode(BaseModel):
    code: str
    share_url: str


class ReferralEntry(BaseModel):
    id: UUID
    name: str
    date: datetime | None = None
    status: ReferralStatus
    reward: Decimal


class ReferralStats(BaseModel):
    total_referrals: int
    completed_referrals: int
    total_earned: Decimal
    pending_rewards: Decimal
    referrals: list[ReferralEntry]
