"""Pydantic schemas for quote requests."""

from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, EmailStr, Field
from uuid import UUID

from app.models.quote import QuoteStatus


class QuoteCreate(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    address: str
    city: str
    state: str
    zip_code: str
    lot_size: int | None = Field(default=None, gt=0)
    service_type: str
    description: str | None = None
    preferred_date: date | None = None
    photos: list[str] = []


class QuoteRespond(BaseModel):
    estimated_price: Decimal | None = Field(default=None, ge=0)
    admin_notes: str | None = None
    status: QuoteStatus | None = None


class QuoteDecision(BaseModel):
    accept: bool


class QuoteOut(BaseModel):
    id: UUID
    user_id: UUID | None = None
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    zip_code: str
    lot_size: int | None = None
    service_type: str
    description: str | None = None
    preferred_date: date | None = None
    photos: list[str] | None = None
    status: QuoteStatus
    estimated_price: Decimal | None = None
    admin_notes: str | None = None
    quoted_at: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
