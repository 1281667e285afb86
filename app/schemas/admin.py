"""Pydantic schemas for admin customer management and the dashboard."""

from datetime import date
from decimal import Decimal
from pydantic import BaseModel, EmailStr, Field

from app.schemas.appointment import AppointmentOut
from app.schemas.auth import UserOut
from app.schemas.property import PropertyOut


class CustomerCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


class CustomerUpdate(BaseModel):
    email: EmailStr | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    is_active: bool | None = None
    status: str | None = None


class CustomerNote(BaseModel):
    note: str = Field(min_length=1)


class CustomerList(BaseModel):
    customers: list[UserOut]
    total: int


class CustomerStats(BaseModel):
    total_appointments: int
    completed_appointments: int
    total_spent: Decimal
    average_order_value: Decimal


class CustomerProfile(BaseModel):
    customer: UserOut
    notes: list[dict] = []
    properties: list[PropertyOut]
    recent_appointments: list[AppointmentOut]
    stats: CustomerStats


class ArchiveResult(BaseModel):
    customer: UserOut
    cancelled_appointments: int


class OverviewStats(BaseModel):
    total_customers: int
    today_appointments: int
    month_appointments: int
    total_revenue: Decimal
    month_revenue: Decimal
    today_revenue: Decimal
    pending_payments: int


class RevenueStats(BaseModel):
    mrr: Decimal
    today_revenue: Decimal
    total_revenue: Decimal


class CustomerMetrics(BaseModel):
    total_customers: int
    new_this_month: int
    recurring_customers: int
    average_lifetime_value: Decimal


class TodaySchedule(BaseModel):
    day: date
    appointments: list[AppointmentOut]
