"""Pydantic schemas for payments."""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from uuid import UUID

from app.models.payment import PaymentMethod, PaymentStatus


class PaymentIntentCreate(BaseModel):
    appointment_id: UUID
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD


class PaymentOut(BaseModel):
    id: UUID
    user_id: UUID
    appointment_id: UUID | None = None
    amount: Decimal
    status: PaymentStatus
    payment_method: PaymentMethod
    stripe_payment_intent_id: str | None = None
    last4: str | None = None
    card_brand: str | None = None
    invoice_number: str | None = None
    paid_at: datetime | None = None
    refunded_at: datetime | None = None
    refund_amount: Decimal | None = None
    refund_reason: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class PaymentIntentResponse(BaseModel):
    payment: PaymentOut
    client_secret: str
    publishable_key: str | None = None


class RefundRequest(BaseModel):
    amount: Decimal | None = Field(default=None, gt=0)
    reason: str | None = None


class PaymentList(BaseModel):
    payments: list[PaymentOut]
    total: int
