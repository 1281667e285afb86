"""Pydantic schemas for packages, add-ons, crew and price quotes."""

from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from uuid import UUID

from app.models.service import ServiceCategory
from app.services.pricing import AddOnSelection, PricingTiers, SizeCategory


class ServicePackageOut(BaseModel):
    id: UUID
    name: str
    description: str
    base_price: Decimal
    features: list[str] = []
    pricing_tiers: PricingTiers = Field(validation_alias="tiers")
    is_active: bool
    sort_order: int | None = 0

    class Config:
        from_attributes = True


class ServicePackageCreate(BaseModel):
    name: str
    description: str = ""
    base_price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    features: list[str] = []
    pricing_tiers: PricingTiers = PricingTiers()
    is_active: bool = True
    sort_order: int = 0


class ServicePackageUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    base_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    features: list[str] | None = None
    pricing_tiers: PricingTiers | None = None
    is_active: bool | None = None
    sort_order: int | None = None


class AddOnOut(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    price: Decimal
    category: ServiceCategory
    is_active: bool
    icon: str | None = None
    sort_order: int | None = 0

    class Config:
        from_attributes = True


class AddOnCreate(BaseModel):
    name: str
    description: str | None = None
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: ServiceCategory = ServiceCategory.ADDON
    is_active: bool = True
    icon: str | None = None
    sort_order: int = 0


class AddOnUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: ServiceCategory | None = None
    is_active: bool | None = None
    icon: str | None = None
    sort_order: int | None = None


class CrewMemberOut(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    phone: str | None = None
    email: str | None = None
    role: str
    is_active: bool
    hire_date: date | None = None
    photo_url: str | None = None

    class Config:
        from_attributes = True


class CrewMemberCreate(BaseModel):
    first_name: str
    last_name: str
    phone: str | None = None
    email: str | None = None
    role: str = "technician"
    is_active: bool = True
    hire_date: date | None = None
    photo_url: str | None = None


class CrewMemberUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    email: str | None = None
    role: str | None = None
    is_active: bool | None = None
    hire_date: date | None = None
    photo_url: str | None = None


class PriceRequest(BaseModel):
    """Request schema for POST /services/calculate-price."""
    service_package_id: UUID
    lot_size: int
    add_ons: list[AddOnSelection] = []


class PricedAddOnOut(BaseModel):
    service_id: UUID
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class PriceResponse(BaseModel):
    service_package_id: UUID
    package_name: str
    base_price: Decimal
    lot_size: int
    size_category: SizeCategory
    multiplier: Decimal
    package_price: Decimal
    add_ons: list[PricedAddOnOut]
    add_ons_total: Decimal
    total_price: Decimal
    warnings: list[str] = []


class QuickQuoteRequest(BaseModel):
    lot_size: int
    package_name: str | None = None


class PackageEstimate(BaseModel):
    id: UUID
    name: str
    base_price: Decimal
    estimated_price: Decimal


class QuickQuoteResponse(BaseModel):
    lot_size: int
    size_category: SizeCategory
    selected_package: PackageEstimate | None = None
    all_packages: list[PackageEstimate]
    generated_at: datetime
