"""Admin dashboard endpoints."""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_db
from app.core.deps import require_admin
from app.models.appointment import Appointment
from app.models.user import User
from app.schemas.admin import CustomerMetrics, OverviewStats, RevenueStats, TodaySchedule
from app.schemas.appointment import AppointmentOut
from app.services import revenue

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/stats", response_model=OverviewStats)
async def get_overview_stats(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return OverviewStats(**await revenue.overview_stats(db, clock.today()))


@router.get("/revenue", response_model=RevenueStats)
async def get_revenue(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """MRR is recomputed from the live appointment book on every call."""
    return RevenueStats(**await revenue.revenue_summary(db, clock.today()))


@router.get("/today", response_model=TodaySchedule)
async def get_today_appointments(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    today = clock.today()
    result = await db.execute(
        select(Appointment)
        .where(Appointment.scheduled_date == today)
        .order_by(Appointment.scheduled_time)
    )
    return TodaySchedule(day=today, appointments=[AppointmentOut.from_model(a) for a in result.scalars().all()])


@router.get("/customers", response_model=CustomerMetrics)
async def get_customer_metrics(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    return CustomerMetrics(**await revenue.customer_metrics(db, clock.today()))
