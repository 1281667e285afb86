"""Notification service for creating in-app notifications."""

import logging
from uuid import UUID
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


async def create_notification(
    db: AsyncSession,
    user_id: UUID,
    title: str,
    message: str,
    notification_type: NotificationType,
    commit: bool = True,
) -> Notification:
    """Create a notification for a user.

    Pass ``commit=False`` to add it to a transaction the caller commits.
    """
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=notification_type,
        is_read=False,
    )
    db.add(notification)
    if commit:
        await db.commit()
        await db.refresh(notification)

    logger.info(
        "Created notification for user %s: %s (%s)",
        user_id,
        title,
        notification_type.value,
    )
    return notification


async def count_unread(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
    )
    return result.scalar_one()


async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
    """Flag every unread notification as read. Returns how many changed."""
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    await db.commit()
    logger.info("Marked %d notifications as read for user %s", result.rowcount, user_id)
    return result.rowcount


async def notify_booking_confirmed(db: AsyncSession, appointment, package_name: str):
    await create_notification(
        db=db,
        user_id=appointment.user_id,
        title="Booking Confirmed",
        message=(
            f"Your {package_name} service is scheduled for "
            f"{appointment.scheduled_date.isoformat()} at {appointment.scheduled_time or '9:00 AM'}."
        ),
        notification_type=NotificationType.BOOKING,
    )


async def notify_payment_received(db: AsyncSession, payment):
    await create_notification(
        db=db,
        user_id=payment.user_id,
        title="Payment Received",
        message=f"We received your payment of ${payment.amount}. Invoice {payment.invoice_number}.",
        notification_type=NotificationType.PAYMENT,
    )


async def notify_quote_responded(db: AsyncSession, quote):
    if not quote.user_id:
        return
    await create_notification(
        db=db,
        user_id=quote.user_id,
        title="Your Quote Is Ready",
        message=f"We responded to your {quote.service_type} quote request.",
        notification_type=NotificationType.QUOTE,
    )
