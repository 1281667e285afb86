"""Quote requests captured from the public site."""

from sqlalchemy import Column, String, DateTime, Integer, Date, Numeric, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.types import JSON
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.core.database import Base


class QuoteStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    QUOTED = "quoted"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Null for visitors who are not logged in
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)

    # Contact information
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=False)

    # Property information
    address = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    zip_code = Column(String, nullable=False)
    lot_size = Column(Integer, nullable=True)

    # Service details
    service_type = Column(String, nullable=False)  # "lawn-mowing", "landscaping", ...
    description = Column(Text, nullable=True)
    preferred_date = Column(Date, nullable=True)
    photos = Column(JSON, nullable=True, default=list)

    status = Column(
        SQLEnum(QuoteStatus, name="quotestatus", values_callable=lambda e: [m.value for m in e]),
        default=QuoteStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Admin response
    estimated_price = Column(Numeric(10, 2), nullable=True)
    admin_notes = Column(Text, nullable=True)
    quoted_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    responded_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", foreign_keys=[user_id])
