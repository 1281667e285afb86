"""Service package catalog (mowing plans etc.)."""

from sqlalchemy import Column, String, DateTime, Integer, Boolean, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.types import JSON
import uuid
from datetime import datetime
from app.core.database import Base


class ServicePackage(Base):
    __tablename__ = "service_packages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    base_price = Column(Numeric(10, 2), nullable=False)
    features = Column(JSON, nullable=False, default=list)
    # {"small": "1.0", "medium": "1.2", "large": "1.5", "xlarge": "2.0"}; keys optional
    pricing_tiers = Column(JSON, nullable=True, default=dict)
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def tiers(self):
        from app.services.pricing import PricingTiers

        return PricingTiers.from_json(self.pricing_tiers)
