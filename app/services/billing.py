"""Stripe-backed payments for appointments."""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock
from app.core.config import settings
from app.core.exceptions import Conflict, InvalidTransition, NotFound, ValidationError
from app.models.appointment import AppointmentStatus
from app.models.payment import OPEN_PAYMENT_STATUSES, Payment, PaymentMethod, PaymentStatus
from app.models.user import User
from app.services.appointment_lifecycle import get_appointment_for
from app.services.email_service import EmailService
from app.services.notification_service import notify_payment_received
from app.services.referrals import complete_for_customer
from app.services.payment_processor import StripePaymentProcessor, charge_details
from app.services.pricing import to_money

logger = logging.getLogger(__name__)


def to_minor_units(amount) -> int:
    return int(to_money(amount) * 100)


def invoice_number_for(payment: Payment, clock: Clock) -> str:
    return f"INV-{clock.today().strftime('%Y%m%d')}-{str(payment.id)[:8].upper()}"


async def get_payment_for(db: AsyncSession, payment_id: UUID, user: User) -> Payment:
    query = select(Payment).where(Payment.id == payment_id)
    if not user.is_admin:
        query = query.where(Payment.user_id == user.id)
    result = await db.execute(query)
    payment = result.scalar_one_or_none()
    if not payment:
        raise NotFound("Payment not found")
    return payment


async def create_payment_intent(
    db: AsyncSession,
    user: User,
    appointment_id: UUID,
    processor: StripePaymentProcessor,
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD,
) -> tuple[Payment, str]:
    """Open a pending payment for an appointment and return its client secret.

    The appointment row is locked while we check for an open payment; the
    partial unique index on payments catches anything that slips past.
    """
    appointment = await get_appointment_for(db, appointment_id, user, for_update=True)
    if appointment.status == AppointmentStatus.CANCELLED:
        raise InvalidTransition(
            "Cannot pay for cancelled appointment",
            current_status=appointment.status.value,
        )

    result = await db.execute(
        select(Payment.id).where(
            Payment.appointment_id == appointment.id,
            Payment.status.in_(OPEN_PAYMENT_STATUSES),
        )
    )
    if result.first() is not None:
        raise Conflict("Payment already exists for this appointment")

    amount = to_money(appointment.total_price)
    if amount <= 0:
        raise ValidationError("Appointment total must be positive to collect payment")

    payment = Payment(
        user_id=appointment.user_id,
        appointment_id=appointment.id,
        amount=amount,
        status=PaymentStatus.PENDING,
        payment_method=payment_method,
    )
    db.add(payment)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Payment already exists for this appointment")

    try:
        intent = processor.create_intent(
            to_minor_units(amount),
            settings.CURRENCY,
            {
                "payment_id": str(payment.id),
                "appointment_id": str(appointment.id),
                "user_id": str(appointment.user_id),
            },
        )
    except Exception:
        await db.rollback()
        raise

    payment.stripe_payment_intent_id = intent["intent_id"]
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Payment already exists for this appointment")
    await db.refresh(payment)

    logger.info("Payment %s pending for appointment %s (%s)", payment.id, appointment.id, amount)
    return payment, intent["client_secret"]


def mark_completed(payment: Payment, charge: dict, clock: Clock):
    payment.status = PaymentStatus.COMPLETED
    payment.paid_at = clock.now()
    payment.stripe_charge_id = charge.get("charge_id") or payment.stripe_charge_id
    payment.last4 = charge.get("last4") or payment.last4
    payment.card_brand = charge.get("brand") or payment.card_brand
    if not payment.invoice_number:
        payment.invoice_number = invoice_number_for(payment, clock)


def apply_intent_status(payment: Payment, intent_status: str, charge: dict, clock: Clock) -> bool:
    """Map a Stripe intent status onto the payment. Returns True on a fresh success."""
    if payment.status in (PaymentStatus.COMPLETED, PaymentStatus.REFUNDED):
        return False
    if intent_status == "succeeded":
        mark_completed(payment, charge, clock)
        return True
    if intent_status == "processing":
        return False
    payment.status = PaymentStatus.FAILED
    return False


async def _after_success(db: AsyncSession, payment: Payment, email_service: Optional[EmailService]):
    try:
        await notify_payment_received(db, payment)
        if email_service is not None:
            result = await db.execute(select(User).where(User.id == payment.user_id))
            customer = result.scalar_one()
            await email_service.send_payment_receipt(customer, payment)
    except Exception as e:
        logger.error("Failed to send payment receipt for %s: %s", payment.id, e)


async def confirm_payment(
    db: AsyncSession,
    user: User,
    payment_id: UUID,
    processor: StripePaymentProcessor,
    clock: Clock,
    email_service: Optional[EmailService] = None,
) -> Payment:
    payment = await get_payment_for(db, payment_id, user)
    if not payment.stripe_payment_intent_id:
        raise ValidationError("Payment has no processor intent to confirm")

    intent = processor.retrieve_intent(payment.stripe_payment_intent_id)
    succeeded = apply_intent_status(payment, intent["status"], intent["charge_details"], clock)
    if succeeded:
        await complete_for_customer(db, payment.user_id, clock)
    await db.commit()
    await db.refresh(payment)
    logger.info("Payment %s confirmed with intent status %s", payment.id, intent["status"])

    if succeeded:
        await _after_success(db, payment, email_service)
    return payment


async def _payment_by_intent(db: AsyncSession, intent_id: str) -> Optional[Payment]:
    result = await db.execute(select(Payment).where(Payment.stripe_payment_intent_id == intent_id))
    return result.scalar_one_or_none()


async def handle_intent_succeeded(
    db: AsyncSession, intent, clock: Clock, email_service: Optional[EmailService] = None
) -> Optional[Payment]:
    payment = await _payment_by_intent(db, intent["id"])
    if not payment:
        logger.warning("Webhook for unknown payment intent %s", intent["id"])
        return None
    succeeded = apply_intent_status(payment, "succeeded", charge_details(intent), clock)
    if succeeded:
        await complete_for_customer(db, payment.user_id, clock)
    await db.commit()
    logger.info("Payment %s marked completed via webhook", payment.id)
    if succeeded:
        await _after_success(db, payment, email_service)
    return payment


async def handle_intent_failed(db: AsyncSession, intent, clock: Clock) -> Optional[Payment]:
    payment = await _payment_by_intent(db, intent["id"])
    if not payment:
        logger.warning("Webhook for unknown payment intent %s", intent["id"])
        return None
    apply_intent_status(payment, "requires_payment_method", {}, clock)
    await db.commit()
    logger.info("Payment %s marked failed via webhook", payment.id)
    return payment


async def refund_payment(
    db: AsyncSession,
    payment_id: UUID,
    processor: StripePaymentProcessor,
    clock: Clock,
    admin: User,
    amount: Optional[Decimal] = None,
    reason: Optional[str] = None,
) -> Payment:
    payment = await get_payment_for(db, payment_id, admin)
    if payment.status != PaymentStatus.COMPLETED:
        raise InvalidTransition(
            f"Cannot refund {payment.status.value} payment",
            current_status=payment.status.value,
            target_status=PaymentStatus.REFUNDED.value,
        )

    refund_amount = to_money(amount) if amount is not None else to_money(payment.amount)
    if refund_amount <= 0 or refund_amount > to_money(payment.amount):
        raise ValidationError("Refund amount must be positive and no more than the amount paid")

    if payment.stripe_payment_intent_id:
        processor.refund(payment.stripe_payment_intent_id, to_minor_units(refund_amount), reason)

    payment.status = PaymentStatus.REFUNDED
    payment.refunded_at = clock.now()
    payment.refund_amount = refund_amount
    payment.refund_reason = reason
    await db.commit()
    await db.refresh(payment)
    logger.info("Payment %s refunded %s by %s", payment.id, refund_amount, admin.email)
    return payment
