"""Customer property (the lawn being serviced)."""

from sqlalchemy import Column, String, DateTime, Integer, Boolean, Numeric, Text, ForeignKey, Index, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from app.core.database import Base


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        # At most one primary property per owner
        Index(
            "uq_properties_one_primary_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_primary"),
            sqlite_where=text("is_primary"),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    address = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    zip_code = Column(String, nullable=False)
    latitude = Column(Numeric(10, 8), nullable=True)
    longitude = Column(Numeric(11, 8), nullable=True)

    # Square feet; drives the package size tier
    lot_size = Column(Integer, nullable=False)
    special_instructions = Column(Text, nullable=True)
    gate_code = Column(String, nullable=True)
    has_backyard = Column(Boolean, default=False)
    has_dogs = Column(Boolean, default=False)
    is_primary = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="properties")
    appointments = relationship("Appointment", back_populates="property")
