"""Pydantic schemas for customer properties."""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from uuid import UUID


class PropertyBase(BaseModel):
    address: str
    city: str
    state: str
    zip_code: str
    lot_size: int = Field(gt=0)
    latitude: Decimal | None = None
    longitude: Decimal | None = None
    special_instructions: str | None = None
    gate_code: str | None = None
    has_backyard: bool = False
    has_dogs: bool = False


class PropertyCreate(PropertyBase):
    is_primary: bool = False
    # Admins may create a property on behalf of a customer
    user_id: UUID | None = None


class PropertyUpdate(BaseModel):
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    lot_size: int | None = Field(default=None, gt=0)
    latitude: Decimal | None = None
    longitude: Decimal | None = None
    special_instructions: str | None = None
    gate_code: str | None = None
    has_backyard: bool | None = None
    has_dogs: bool | None = None
    is_primary: bool | None = None


class PropertyOut(PropertyBase):
    id: UUID
    user_id: UUID
    is_primary: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True
