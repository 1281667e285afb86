"""Pydantic schemas for authentication and account endpoints."""

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from uuid import UUID


class UserRegister(BaseModel):
    """Request schema for customer registration."""
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    referral_code: str | None = None


class UserLogin(BaseModel):
    """Request schema for user login."""
    email: EmailStr
    password: str


class UserOut(BaseModel):
    """Response schema for user info."""
    id: UUID
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    role: str
    status: str
    is_active: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    """Response schema for login and registration, carrying the JWT."""
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class ProfileUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class MessageResponse(BaseModel):
    """Generic success message response."""
    message: str
