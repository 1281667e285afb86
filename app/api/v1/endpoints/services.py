"""Public catalog: packages, add-ons and price calculation."""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, get_clock
from app.core.database import get_db
from app.core.exceptions import InvalidLotSize
from app.models.service import Service, ServiceCategory
from app.models.service_package import ServicePackage
from app.schemas.catalog import (
    AddOnOut,
    PackageEstimate,
    PriceRequest,
    PriceResponse,
    PricedAddOnOut,
    QuickQuoteRequest,
    QuickQuoteResponse,
    ServicePackageOut,
)
from app.services import pricing

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_QUICK_QUOTE_PACKAGE = "Premium Care"


@router.get("/packages", response_model=list[ServicePackageOut])
async def list_packages(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(ServicePackage)
        .where(ServicePackage.is_active.is_(True))
        .order_by(ServicePackage.sort_order, ServicePackage.name)
    )
    return result.scalars().all()


@router.get("/add-ons", response_model=list[AddOnOut])
async def list_add_ons(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Service)
        .where(
            Service.is_active.is_(True),
            Service.category.in_([ServiceCategory.ADDON, ServiceCategory.SEASONAL]),
        )
        .order_by(Service.sort_order, Service.name)
    )
    return result.scalars().all()


@router.post("/calculate-price", response_model=PriceResponse)
async def calculate_price(request: PriceRequest, db: AsyncSession = Depends(get_db)):
    """Price a package for a lot size, with optional add-ons."""
    breakdown = await pricing.quote_booking_price(db, request.service_package_id, request.lot_size, request.add_ons)
    package = await pricing.get_active_package(db, request.service_package_id)
    return PriceResponse(
        service_package_id=package.id,
        package_name=package.name,
        base_price=package.base_price,
        lot_size=request.lot_size,
        size_category=breakdown.size_category,
        multiplier=breakdown.multiplier,
        package_price=breakdown.package_price,
        add_ons=[
            PricedAddOnOut(
                service_id=a.service_id,
                name=a.name,
                unit_price=a.unit_price,
                quantity=a.quantity,
                line_total=a.line_total,
            )
            for a in breakdown.add_ons
        ],
        add_ons_total=breakdown.add_ons_total,
        total_price=breakdown.total_price,
        warnings=breakdown.warnings,
    )


@router.post("/quick-quote", response_model=QuickQuoteResponse)
async def quick_quote(
    request: QuickQuoteRequest,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Estimate every active package for a lot size.

    The highlighted package is the one named in the request, else
    "Premium Care", else the first active package.
    """
    if request.lot_size <= 0:
        raise InvalidLotSize(request.lot_size)

    result = await db.execute(
        select(ServicePackage)
        .where(ServicePackage.is_active.is_(True))
        .order_by(ServicePackage.sort_order, ServicePackage.name)
    )
    packages = result.scalars().all()

    estimates = [
        PackageEstimate(
            id=package.id,
            name=package.name,
            base_price=package.base_price,
            estimated_price=pricing.calculate_price(package.base_price, request.lot_size, package.tiers).total_price,
        )
        for package in packages
    ]

    wanted = request.package_name or DEFAULT_QUICK_QUOTE_PACKAGE
    selected = next((e for e in estimates if e.name.lower() == wanted.lower()), None)
    if selected is None:
        selected = next((e for e in estimates if e.name == DEFAULT_QUICK_QUOTE_PACKAGE), None)
    if selected is None and estimates:
        selected = estimates[0]

    return QuickQuoteResponse(
        lot_size=request.lot_size,
        size_category=pricing.size_category(request.lot_size),
        selected_package=selected,
        all_packages=estimates,
        generated_at=clock.now(),
    )
