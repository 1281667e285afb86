"""Schemas for the in-app notification feed (booking, payment and quote updates)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.notification import NotificationType


class NotificationOut(BaseModel):
    id: UUID
    user_id: UUID
    type: NotificationType
    title: str
    message: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationList(BaseModel):
    """One page of a user's feed, newest first.

    ``total`` counts every notification matching the filter; ``unread`` counts
    the user's unread notifications regardless of the filter.
    """
    notifications: list[NotificationOut]
    total: int
    unread: int = 0
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)


class NotificationUnreadCount(BaseModel):
    count: int
