"""Pydantic schemas for reviews."""

from datetime import datetime
from pydantic import BaseModel, Field
from uuid import UUID


class ReviewCreate(BaseModel):
    appointment_id: UUID
    rating: int = Field(ge=1, le=5)
    title: str | None = None
    comment: str | None = None


class ReviewModerate(BaseModel):
    is_approved: bool | None = None
    is_featured: bool | None = None
    admin_response: str | None = None


class ReviewOut(BaseModel):
    id: UUID
    user_id: UUID
    appointment_id: UUID | None = None
    rating: int
    title: str | None = None
    comment: str | None = None
    is_approved: bool
    is_featured: bool
    approved_at: datetime | None = None
    admin_response: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
