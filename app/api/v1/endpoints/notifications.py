"""In-app notifications for customers and admins."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.exceptions import NotFound
from app.models.user import User
from app.models.notification import Notification
from app.schemas.notification import NotificationOut, NotificationList, NotificationUnreadCount
from app.schemas.auth import MessageResponse
from app.services import notification_service

router = APIRouter()


@router.get("/", response_model=NotificationList)
async def list_notifications(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    unread_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Newest first, paginated."""
    filters = [Notification.user_id == current_user.id]
    if unread_only:
        filters.append(Notification.is_read.is_(False))

    total = (await db.execute(select(func.count(Notification.id)).where(*filters))).scalar_one()
    page_rows = await db.execute(
        select(Notification)
        .where(*filters)
        .order_by(Notification.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return NotificationList(
        notifications=[NotificationOut.model_validate(n) for n in page_rows.scalars().all()],
        total=total,
        unread=await notification_service.count_unread(db, current_user.id),
        page=page,
        page_size=page_size,
    )


@router.get("/unread-count", response_model=NotificationUnreadCount)
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return NotificationUnreadCount(count=await notification_service.count_unread(db, current_user.id))


@router.put("/mark-all-read", response_model=MessageResponse)
async def mark_all_notifications_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    changed = await notification_service.mark_all_read(db, current_user.id)
    return MessageResponse(message=f"Marked {changed} notifications as read")


@router.put("/{notification_id}/read", response_model=MessageResponse)
async def mark_notification_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    # Another user's notification looks the same as a missing one
    notification = (
        await db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == current_user.id,
            )
        )
    ).scalar_one_or_none()
    if not notification:
        raise NotFound("Notification not found")

    notification.is_read = True
    await db.commit()
    return MessageResponse(message="Notification marked as read")
