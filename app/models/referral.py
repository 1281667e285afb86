"""Customer referrals and the signup discount they earn."""

from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from decimal import Decimal
from app.core.database import Base


class ReferralStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"


class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Referral(Base):
    __tablename__ = "referrals"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    referrer_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # A customer can be referred once
    referred_user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    # The code the referred customer signed up with
    referral_code = Column(String, nullable=False, index=True)

    status = Column(
        SQLEnum(ReferralStatus, name="referralstatus", values_callable=lambda e: [m.value for m in e]),
        default=ReferralStatus.PENDING,
        nullable=False,
    )
    discount_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("10.00"))
    discount_type = Column(
        SQLEnum(DiscountType, name="discounttype", values_callable=lambda e: [m.value for m in e]),
        default=DiscountType.FIXED,
        nullable=False,
    )
    used_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    referrer = relationship("User", foreign_keys=[referrer_id])
    referred_user = relationship("User", foreign_keys=[referred_user_id], lazy="selectin")
