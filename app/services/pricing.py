"""Pricing engine for service packages.

A package's price scales with the lot size of the property it is booked for.
Lot sizes fall into four half-open tiers, each with a multiplier that a
package may override. Add-ons are priced per unit and added on top.

All money is ``Decimal`` rounded half-up to cents.
"""

import enum
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidLotSize, PackageNotFound, ValidationError
from app.models.service import Service
from app.models.service_package import ServicePackage

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

MEDIUM_LOT_MIN = 5000
LARGE_LOT_MIN = 10000
XLARGE_LOT_MIN = 15000


def to_money(value) -> Decimal:
    """Round any numeric value to cents, half-up."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class SizeCategory(str, enum.Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XLARGE = "xlarge"


def size_category(lot_size: int) -> SizeCategory:
    """Map a lot size in square feet to its tier. Lower bounds are inclusive."""
    if lot_size < MEDIUM_LOT_MIN:
        return SizeCategory.SMALL
    if lot_size < LARGE_LOT_MIN:
        return SizeCategory.MEDIUM
    if lot_size < XLARGE_LOT_MIN:
        return SizeCategory.LARGE
    return SizeCategory.XLARGE


class PricingTiers(BaseModel):
    """Per-tier multipliers. Missing keys fall back to the standard ladder."""

    small: Decimal = Field(default=Decimal("1.0"), ge=0)
    medium: Decimal = Field(default=Decimal("1.2"), ge=0)
    large: Decimal = Field(default=Decimal("1.5"), ge=0)
    xlarge: Decimal = Field(default=Decimal("2.0"), ge=0)

    @classmethod
    def from_json(cls, raw: Optional[dict]) -> "PricingTiers":
        """Build tiers from the JSON column, ignoring null entries."""
        if not raw:
            return cls()
        values = {key: Decimal(str(value)) for key, value in raw.items() if value is not None and key in cls.model_fields}
        return cls(**values)

    def to_json(self) -> dict:
        return {key: str(value) for key, value in self.model_dump().items()}

    def multiplier_for(self, category: SizeCategory) -> Decimal:
        return getattr(self, category.value)


class AddOnSelection(BaseModel):
    service_id: UUID
    quantity: int = Field(default=1, ge=1)


class PricedAddOn(BaseModel):
    """A resolved add-on: catalog price at the time of pricing."""

    service_id: UUID
    name: str = ""
    unit_price: Decimal
    quantity: int = 1

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


class PriceBreakdown(BaseModel):
    size_category: SizeCategory
    multiplier: Decimal
    package_price: Decimal
    add_ons_total: Decimal
    total_price: Decimal
    add_ons: list[PricedAddOn] = []
    warnings: list[str] = []


def calculate_price(
    base_price,
    lot_size: int,
    pricing_tiers: Optional[PricingTiers] = None,
    add_ons: Optional[list[PricedAddOn]] = None,
) -> PriceBreakdown:
    """Price a package for a lot, plus any already-resolved add-ons.

    Raises InvalidLotSize for non-positive lots and ValidationError for
    negative money.
    """
    if lot_size is None or lot_size <= 0:
        raise InvalidLotSize(lot_size)

    base = Decimal(str(base_price))
    if base < 0:
        raise ValidationError("Base price cannot be negative")

    tiers = pricing_tiers or PricingTiers()
    category = size_category(lot_size)
    multiplier = tiers.multiplier_for(category)
    package_price = to_money(base * multiplier)

    add_ons = add_ons or []
    add_ons_total = Decimal("0")
    for add_on in add_ons:
        if add_on.unit_price < 0:
            raise ValidationError(f"Add-on {add_on.service_id} has a negative price")
        add_ons_total += add_on.unit_price * add_on.quantity
    add_ons_total = to_money(add_ons_total)

    return PriceBreakdown(
        size_category=category,
        multiplier=multiplier,
        package_price=package_price,
        add_ons_total=add_ons_total,
        total_price=to_money(package_price + add_ons_total),
        add_ons=add_ons,
    )


def merge_selections(selections: list[AddOnSelection]) -> dict[UUID, int]:
    """Collapse repeated service ids into one quantity each, keeping order."""
    merged: dict[UUID, int] = {}
    for selection in selections:
        merged[selection.service_id] = merged.get(selection.service_id, 0) + selection.quantity
    return merged


async def resolve_add_ons(
    db: AsyncSession, selections: Optional[list[AddOnSelection]]
) -> tuple[list[PricedAddOn], list[str]]:
    """Look up catalog prices for the selected add-ons.

    Unknown or inactive ids are dropped, and each one produces a warning.
    """
    if not selections:
        return [], []

    quantities = merge_selections(selections)
    result = await db.execute(
        select(Service).where(Service.id.in_(list(quantities)), Service.is_active.is_(True))
    )
    services = {service.id: service for service in result.scalars().all()}

    priced: list[PricedAddOn] = []
    warnings: list[str] = []
    for service_id, quantity in quantities.items():
        service = services.get(service_id)
        if service is None:
            logger.warning("Dropping unknown or inactive add-on %s", service_id)
            warnings.append(f"Add-on {service_id} is unavailable and was not included")
            continue
        priced.append(
            PricedAddOn(
                service_id=service.id,
                name=service.name,
                unit_price=Decimal(service.price),
                quantity=quantity,
            )
        )
    return priced, warnings


async def get_active_package(db: AsyncSession, package_id: UUID) -> ServicePackage:
    result = await db.execute(
        select(ServicePackage).where(ServicePackage.id == package_id, ServicePackage.is_active.is_(True))
    )
    package = result.scalar_one_or_none()
    if not package:
        raise PackageNotFound(package_id)
    return package


async def quote_booking_price(
    db: AsyncSession,
    package_id: UUID,
    lot_size: int,
    selections: Optional[list[AddOnSelection]] = None,
) -> PriceBreakdown:
    """Price a booking against the current catalog."""
    if lot_size is None or lot_size <= 0:
        raise InvalidLotSize(lot_size)

    package = await get_active_package(db, package_id)
    add_ons, warnings = await resolve_add_ons(db, selections)

    breakdown = calculate_price(package.base_price, lot_size, package.tiers, add_ons)
    breakdown.warnings.extend(warnings)
    return breakdown
