"""Admin endpoints: catalog management, crew and customers.

All routes require the admin role.
"""

import logging
import uuid
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import apply_changes, get_db, reject_nulls
from app.core.deps import require_admin
from app.core.exceptions import Conflict, NotFound
from app.models.appointment import Appointment, AppointmentService
from app.models.crew_member import CrewMember
from app.models.property import Property
from app.models.service import Service
from app.models.service_package import ServicePackage
from app.models.user import ROLE_CUSTOMER, User
from app.schemas.admin import (
    ArchiveResult,
    CustomerCreate,
    CustomerList,
    CustomerNote,
    CustomerProfile,
    CustomerStats,
    CustomerUpdate,
)
from app.schemas.appointment import AppointmentOut
from app.schemas.auth import MessageResponse, UserOut
from app.schemas.catalog import (
    AddOnCreate,
    AddOnOut,
    AddOnUpdate,
    CrewMemberCreate,
    CrewMemberOut,
    CrewMemberUpdate,
    ServicePackageCreate,
    ServicePackageOut,
    ServicePackageUpdate,
)
from app.schemas.property import PropertyOut
from app.services import appointment_lifecycle as lifecycle
from app.services.auth import create_user, get_user_by_email
from app.services.revenue import customer_stats

router = APIRouter()
logger = logging.getLogger(__name__)


# ============================================================================
# SERVICE PACKAGES
# ============================================================================

async def _get_package(db: AsyncSession, package_id: UUID) -> ServicePackage:
    result = await db.execute(select(ServicePackage).where(ServicePackage.id == package_id))
    package = result.scalar_one_or_none()
    if not package:
        raise NotFound("Service package not found")
    return package


@router.get("/packages", response_model=list[ServicePackageOut])
async def list_all_packages(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """All packages, including inactive ones."""
    result = await db.execute(select(ServicePackage).order_by(ServicePackage.sort_order, ServicePackage.name))
    return result.scalars().all()


@router.post("/packages", response_model=ServicePackageOut, status_code=201)
async def create_package(
    data: ServicePackageCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    payload = data.model_dump(exclude={"pricing_tiers"})
    package = ServicePackage(pricing_tiers=data.pricing_tiers.to_json(), **payload)
    db.add(package)
    await db.commit()
    await db.refresh(package)
    logger.info("Package %s created by %s", package.name, current_user.email)
    return package


@router.put("/packages/{package_id}", response_model=ServicePackageOut)
async def update_package(
    package_id: UUID,
    data: ServicePackageUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Update a package. Existing bookings keep the price they were booked at."""
    package = await _get_package(db, package_id)
    changes = data.model_dump(exclude_unset=True)
    if "pricing_tiers" in changes:
        changes["pricing_tiers"] = data.pricing_tiers.to_json() if data.pricing_tiers else None
    apply_changes(package, changes)
    await db.commit()
    await db.refresh(package)
    logger.info("Package %s updated by %s", package.id, current_user.email)
    return package


@router.delete("/packages/{package_id}", response_model=MessageResponse)
async def delete_package(
    package_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a package, or deactivate it if any booking references it."""
    package = await _get_package(db, package_id)
    in_use = (
        await db.execute(select(func.count(Appointment.id)).where(Appointment.service_package_id == package.id))
    ).scalar_one()
    if in_use:
        package.is_active = False
        await db.commit()
        logger.info("Package %s deactivated (referenced by %d bookings)", package.id, in_use)
        return MessageResponse(message="Service package is in use and has been deactivated")
    await db.delete(package)
    await db.commit()
    return MessageResponse(message="Service package deleted successfully")


# ============================================================================
# ADD-ON SERVICES
# ============================================================================

async def _get_add_on(db: AsyncSession, service_id: UUID) -> Service:
    result = await db.execute(select(Service).where(Service.id == service_id))
    service = result.scalar_one_or_none()
    if not service:
        raise NotFound("Service not found")
    return service


@router.get("/add-ons", response_model=list[AddOnOut])
async def list_all_add_ons(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Service).order_by(Service.sort_order, Service.name))
    return result.scalars().all()


@router.post("/add-ons", response_model=AddOnOut, status_code=201)
async def create_add_on(
    data: AddOnCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = Service(**data.model_dump())
    db.add(service)
    await db.commit()
    await db.refresh(service)
    return service


@router.put("/add-ons/{service_id}", response_model=AddOnOut)
async def update_add_on(
    service_id: UUID,
    data: AddOnUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = await _get_add_on(db, service_id)
    apply_changes(service, data.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(service)
    return service


@router.delete("/add-ons/{service_id}", response_model=MessageResponse)
async def delete_add_on(
    service_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    service = await _get_add_on(db, service_id)
    in_use = (
        await db.execute(select(func.count(AppointmentService.id)).where(AppointmentService.service_id == service.id))
    ).scalar_one()
    if in_use:
        service.is_active = False
        await db.commit()
        logger.info("Add-on %s deactivated (referenced by %d bookings)", service.id, in_use)
        return MessageResponse(message="Service is in use and has been deactivated")
    await db.delete(service)
    await db.commit()
    return MessageResponse(message="Service deleted successfully")


# ============================================================================
# CREW MEMBERS
# ============================================================================

async def _get_crew_member(db: AsyncSession, crew_member_id: UUID) -> CrewMember:
    result = await db.execute(select(CrewMember).where(CrewMember.id == crew_member_id))
    crew_member = result.scalar_one_or_none()
    if not crew_member:
        raise NotFound("Crew member not found")
    return crew_member


@router.get("/crew", response_model=list[CrewMemberOut])
async def list_crew(
    active_only: bool = False,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    query = select(CrewMember).order_by(CrewMember.last_name, CrewMember.first_name)
    if active_only:
        query = query.where(CrewMember.is_active.is_(True))
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/crew", response_model=CrewMemberOut, status_code=201)
async def create_crew_member(
    data: CrewMemberCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    crew_member = CrewMember(**data.model_dump())
    db.add(crew_member)
    await db.commit()
    await db.refresh(crew_member)
    return crew_member


@router.put("/crew/{crew_member_id}", response_model=CrewMemberOut)
async def update_crew_member(
    crew_member_id: UUID,
    data: CrewMemberUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    crew_member = await _get_crew_member(db, crew_member_id)
    apply_changes(crew_member, data.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(crew_member)
    return crew_member


@router.delete("/crew/{crew_member_id}", response_model=MessageResponse)
async def delete_crew_member(
    crew_member_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Crew on past jobs are deactivated so job history keeps its assignee."""
    crew_member = await _get_crew_member(db, crew_member_id)
    assigned = (
        await db.execute(select(func.count(Appointment.id)).where(Appointment.crew_member_id == crew_member.id))
    ).scalar_one()
    if assigned:
        crew_member.is_active = False
        await db.commit()
        return MessageResponse(message="Crew member has assignments and has been deactivated")
    await db.delete(crew_member)
    await db.commit()
    return MessageResponse(message="Crew member deleted successfully")


# ============================================================================
# CUSTOMERS
# ============================================================================

async def _get_customer(db: AsyncSession, customer_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == customer_id, User.role == ROLE_CUSTOMER))
    customer = result.scalar_one_or_none()
    if not customer:
        raise NotFound("Customer not found")
    return customer


@router.get("/customers", response_model=CustomerList)
async def list_customers(
    search: Optional[str] = None,
    status: Optional[str] = Query(None, pattern="^(active|archived)$"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    filters = [User.role == ROLE_CUSTOMER]
    if status:
        filters.append(User.status == status)
    if search:
        pattern = f"%{search.lower()}%"
        filters.append(
            or_(
                func.lower(User.email).like(pattern),
                func.lower(User.first_name).like(pattern),
                func.lower(User.last_name).like(pattern),
                User.phone.like(f"%{search}%"),
            )
        )

    total = (await db.execute(select(func.count(User.id)).where(*filters))).scalar_one()
    result = await db.execute(
        select(User).where(*filters).order_by(User.created_at.desc()).offset(offset).limit(limit)
    )
    return CustomerList(customers=[UserOut.model_validate(u) for u in result.scalars().all()], total=total)


@router.post("/customers", response_model=UserOut, status_code=201)
async def create_customer(
    data: CustomerCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await create_user(
        db,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
    )


@router.put("/customers/{customer_id}", response_model=UserOut)
async def update_customer(
    customer_id: UUID,
    data: CustomerUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    customer = await _get_customer(db, customer_id)
    changes = data.model_dump(exclude_unset=True)
    reject_nulls(User, changes)
    if "email" in changes and changes["email"].lower() != customer.email:
        existing = await get_user_by_email(db, changes["email"])
        if existing and existing.id != customer.id:
            raise Conflict("Email already registered")
        changes["email"] = changes["email"].lower()
    apply_changes(customer, changes)
    await db.commit()
    await db.refresh(customer)
    return customer


@router.post("/customers/{customer_id}/archive", response_model=ArchiveResult)
async def archive_customer(
    customer_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Archive a customer and cancel their upcoming appointments."""
    customer = await _get_customer(db, customer_id)
    cancelled = await lifecycle.cancel_upcoming_for_customer(db, customer.id, clock, "Customer archived")
    customer.status = "archived"
    await db.commit()
    await db.refresh(customer)
    logger.info("Customer %s archived by %s; %d appointment(s) cancelled", customer.id, current_user.email, cancelled)
    return ArchiveResult(customer=UserOut.model_validate(customer), cancelled_appointments=cancelled)


@router.get("/customers/{customer_id}", response_model=CustomerProfile)
async def get_customer_profile(
    customer_id: UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    customer = await _get_customer(db, customer_id)
    properties = (await db.execute(select(Property).where(Property.user_id == customer.id))).scalars().all()
    appointments = (
        await db.execute(
            select(Appointment)
            .where(Appointment.user_id == customer.id)
            .order_by(Appointment.scheduled_date.desc())
            .limit(10)
        )
    ).scalars().all()
    stats = await customer_stats(db, customer.id)

    return CustomerProfile(
        customer=UserOut.model_validate(customer),
        notes=customer.notes or [],
        properties=[PropertyOut.model_validate(p) for p in properties],
        recent_appointments=[AppointmentOut.from_model(a) for a in appointments],
        stats=CustomerStats(**stats),
    )


@router.post("/customers/{customer_id}/notes", response_model=CustomerProfile)
async def add_customer_note(
    customer_id: UUID,
    data: CustomerNote,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    customer = await _get_customer(db, customer_id)
    # Reassign so the JSON column is flagged dirty
    customer.notes = list(customer.notes or []) + [
        {
            "id": str(uuid.uuid4()),
            "note": data.note,
            "added_by": current_user.email,
            "added_at": clock.now().isoformat(),
        }
    ]
    await db.commit()
    return await get_customer_profile(customer_id, current_user, db)
