"""Add-on services that can be attached to a booking."""

from sqlalchemy import Column, String, DateTime, Integer, Boolean, Numeric, Text, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
import uuid
from datetime import datetime
import enum
from app.core.database import Base


class ServiceCategory(str, enum.Enum):
    ADDON = "addon"
    SEASONAL = "seasonal"
    ONE_TIME = "one-time"


class Service(Base):
    __tablename__ = "services"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(
        SQLEnum(ServiceCategory, name="servicecategory", values_callable=lambda e: [m.value for m in e]),
        default=ServiceCategory.ADDON,
        nullable=False,
    )
    is_active = Column(Boolean, default=True, nullable=False)
    icon = Column(String, nullable=True)
    sort_order = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
