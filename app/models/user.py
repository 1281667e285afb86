"""User model for customers and administrators."""

from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.types import JSON
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from app.core.database import Base

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    # "GREEN" + first 8 characters of the id; shared to refer new customers
    referral_code = Column(String, unique=True, index=True, nullable=True)
    role = Column(String, nullable=False, default=ROLE_CUSTOMER, index=True)
    # active | archived (archived customers keep their history)
    status = Column(String, nullable=False, default="active")
    is_active = Column(Boolean, default=True)
    # Admin communication notes: [{"id", "note", "added_by", "added_at"}]
    notes = Column(JSON, nullable=True)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    properties = relationship("Property", back_populates="owner")
    appointments = relationship("Appointment", back_populates="owner")
    payments = relationship("Payment", back_populates="owner")
    notifications = relationship("Notification", back_populates="user")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part) or self.email

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
