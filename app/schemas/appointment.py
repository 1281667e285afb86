"""Pydantic schemas for bookings and appointments."""

from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from uuid import UUID

from app.models.appointment import AppointmentStatus, Frequency
from app.schemas.catalog import CrewMemberOut
from app.schemas.property import PropertyOut
from app.services.pricing import AddOnSelection


class BookingCreate(BaseModel):
    """Request schema for creating a booking."""
    property_id: UUID
    service_package_id: UUID
    scheduled_date: date
    scheduled_time: str | None = None
    frequency: Frequency = Frequency.ONE_TIME
    add_ons: list[AddOnSelection] = []
    # Plain id list accepted for older clients; each id counts once
    add_on_service_ids: list[UUID] = []
    special_instructions: str | None = None

    def selections(self) -> list[AddOnSelection]:
        return list(self.add_ons) + [AddOnSelection(service_id=sid) for sid in self.add_on_service_ids]


class BookingUpdate(BaseModel):
    """Partial update. Only fields the client sends are applied."""
    scheduled_date: date | None = None
    scheduled_time: str | None = None
    special_instructions: str | None = None
    notes: str | None = None
    crew_member_id: UUID | None = None
    status: AppointmentStatus | None = None
    weather_delay: bool | None = None
    completion_notes: str | None = None
    actual_duration: int | None = Field(default=None, ge=0)
    weather_condition: str | None = None
    cancellation_reason: str | None = None


class RescheduleRequest(BaseModel):
    scheduled_date: date
    scheduled_time: str


class CompleteRequest(BaseModel):
    completion_notes: str | None = None
    actual_duration: int | None = Field(default=None, ge=0)
    weather_condition: str | None = None


class CancelRequest(BaseModel):
    cancellation_reason: str | None = None


class AssignCrewRequest(BaseModel):
    crew_member_id: UUID | None = None


class AddOnsRequest(BaseModel):
    add_ons: list[AddOnSelection]


class AppointmentAddOnOut(BaseModel):
    id: UUID
    service_id: UUID
    name: str | None = None
    price: Decimal
    quantity: int

    class Config:
        from_attributes = True


class PackageSummary(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True


class AppointmentOut(BaseModel):
    """Response schema for an appointment."""
    id: UUID
    user_id: UUID
    property_id: UUID
    service_package_id: UUID
    crew_member_id: UUID | None = None
    scheduled_date: date
    scheduled_time: str | None = None
    status: AppointmentStatus
    frequency: Frequency
    package_price: Decimal
    total_price: Decimal
    special_instructions: str | None = None
    notes: str | None = None
    completed_at: datetime | None = None
    completion_notes: str | None = None
    actual_duration: int | None = None
    weather_condition: str | None = None
    weather_delay: bool | None = False
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    property: PropertyOut | None = None
    service_package: PackageSummary | None = None
    crew_member: CrewMemberOut | None = None
    add_ons: list[AppointmentAddOnOut] = []

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, appointment) -> "AppointmentOut":
        out = cls.model_validate(appointment)
        for line, model_line in zip(out.add_ons, appointment.add_ons):
            line.name = model_line.service.name if model_line.service else None
        return out


class BookingResponse(BaseModel):
    booking: AppointmentOut
    warnings: list[str] = []


class AppointmentList(BaseModel):
    appointments: list[AppointmentOut]
    total: int
    limit: int
    offset: int


class ServiceStateChange(BaseModel):
    """Result of pausing or resuming a customer's service."""
    updated: int
    message: str
