"""Appointment model for the booking system."""

from sqlalchemy import (
    Column, String, DateTime, Integer, Date, Boolean, Numeric, ForeignKey, Text, Enum as SQLEnum,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.core.database import Base


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"
    PAUSED = "paused"


class Frequency(str, enum.Enum):
    ONE_TIME = "one-time"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    property_id = Column(UUID(as_uuid=True), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    service_package_id = Column(
        UUID(as_uuid=True), ForeignKey("service_packages.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    crew_member_id = Column(UUID(as_uuid=True), ForeignKey("crew_members.id", ondelete="SET NULL"), nullable=True)

    scheduled_date = Column(Date, nullable=False, index=True)
    scheduled_time = Column(String, nullable=True, default="09:00 AM")  # "09:00 AM"
    status = Column(
        SQLEnum(AppointmentStatus, name="appointmentstatus", values_callable=_enum_values),
        default=AppointmentStatus.SCHEDULED,
        nullable=False,
        index=True,
    )
    frequency = Column(
        SQLEnum(Frequency, name="appointmentfrequency", values_callable=_enum_values),
        default=Frequency.ONE_TIME,
        nullable=False,
    )

    # Price snapshots taken at booking time; never recomputed from the catalog
    package_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)

    special_instructions = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    completed_at = Column(DateTime, nullable=True)
    completion_notes = Column(Text, nullable=True)
    actual_duration = Column(Integer, nullable=True)  # minutes
    weather_condition = Column(String, nullable=True)
    weather_delay = Column(Boolean, default=False)

    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="appointments")
    property = relationship("Property", back_populates="appointments", lazy="selectin")
    service_package = relationship("ServicePackage", lazy="selectin")
    crew_member = relationship("CrewMember", back_populates="appointments", lazy="selectin")
    add_ons = relationship(
        "AppointmentService", back_populates="appointment", cascade="all, delete-orphan", lazy="selectin"
    )
    payments = relationship("Payment", back_populates="appointment")
    review = relationship("Review", back_populates="appointment", uselist=False)


class AppointmentService(Base):
    """Add-on attached to an appointment, with the price copied at attach time."""

    __tablename__ = "appointment_services"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    appointment_id = Column(
        UUID(as_uuid=True), ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id", ondelete="RESTRICT"), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=datetime.utcnow)

    appointment = relationship("Appointment", back_populates="add_ons")
    service = relationship("Service", lazy="selectin")
