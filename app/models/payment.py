"""Payment records backed by Stripe payment intents."""

from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey, Text, Index, Enum as SQLEnum, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.core.database import Base


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    CASH = "cash"
    CHECK = "check"
    BANK_TRANSFER = "bank_transfer"


# Statuses that block a second payment for the same appointment
OPEN_PAYMENT_STATUSES = (PaymentStatus.PENDING, PaymentStatus.COMPLETED)

_OPEN_PAYMENT_PREDICATE = "status IN ('pending', 'completed') AND appointment_id IS NOT NULL"


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        Index(
            "uq_payments_open_per_appointment",
            "appointment_id",
            unique=True,
            postgresql_where=text(_OPEN_PAYMENT_PREDICATE),
            sqlite_where=text(_OPEN_PAYMENT_PREDICATE),
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    appointment_id = Column(
        UUID(as_uuid=True), ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True, index=True
    )
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(
        SQLEnum(PaymentStatus, name="paymentstatus", values_callable=lambda e: [m.value for m in e]),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True,
    )
    payment_method = Column(
        SQLEnum(PaymentMethod, name="paymentmethod", values_callable=lambda e: [m.value for m in e]),
        default=PaymentMethod.CREDIT_CARD,
        nullable=False,
    )

    # Stripe references
    stripe_payment_intent_id = Column(String, nullable=True, index=True)
    stripe_charge_id = Column(String, nullable=True)
    last4 = Column(String, nullable=True)
    card_brand = Column(String, nullable=True)

    invoice_number = Column(String, nullable=True, unique=True)
    paid_at = Column(DateTime, nullable=True)
    refunded_at = Column(DateTime, nullable=True)
    refund_amount = Column(Numeric(10, 2), nullable=True)
    refund_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="payments")
    appointment = relationship("Appointment", back_populates="payments")
