"""Seed the service catalog and the admin account on app startup."""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import async_session
from app.models.service import Service, ServiceCategory
from app.models.service_package import ServicePackage
from app.models.user import ROLE_ADMIN, User
from app.services.auth import get_user_by_email, hash_password

logger = logging.getLogger(__name__)

STANDARD_TIERS = {"small": "1.0", "medium": "1.2", "large": "1.5", "xlarge": "2.0"}

PACKAGES = [
    {
        "name": "Basic Mow",
        "description": "Perfect for maintaining your lawn's neat appearance",
        "base_price": Decimal("35.00"),
        "features": [
            "Lawn mowing",
            "Edging along sidewalks & driveways",
            "Blowing debris from hard surfaces",
        ],
        "sort_order": 1,
    },
    {
        "name": "Premium Care",
        "description": "Complete lawn care for a pristine yard",
        "base_price": Decimal("60.00"),
        "features": [
            "Everything in Basic Mow",
            "Hedge & shrub trimming",
            "Weed control treatment",
            "Line trimming around obstacles",
        ],
        "sort_order": 2,
    },
    {
        "name": "Deluxe Package",
        "description": "Ultimate lawn perfection with seasonal care",
        "base_price": Decimal("95.00"),
        "features": [
            "Everything in Premium Care",
            "Fertilization treatment",
            "Seasonal cleanup services",
            "Mulching & bed maintenance",
            "Priority scheduling",
        ],
        "sort_order": 3,
    },
]

ADD_ONS = [
    ("Lawn Aeration", "50.00", "Improve soil health and grass growth", ServiceCategory.ADDON, "wind"),
    ("Fertilization", "40.00", "Nutrient-rich treatment for lush green lawns", ServiceCategory.ADDON, "sparkles"),
    ("Weed Control", "30.00", "Targeted weed elimination", ServiceCategory.ADDON, "shield-check"),
    ("Leaf Removal", "45.00", "Complete fall cleanup service", ServiceCategory.SEASONAL, "leaf"),
    ("Hedge Trimming", "35.00", "Professional shrub shaping", ServiceCategory.ADDON, "scissors"),
    ("Spring Cleanup", "75.00", "Comprehensive yard preparation", ServiceCategory.SEASONAL, "sun"),
]


async def seed_catalog(db: AsyncSession) -> int:
    """Insert any missing packages and add-ons by name. Returns rows created."""
    created = 0
    existing_packages = set((await db.execute(select(ServicePackage.name))).scalars().all())
    for package in PACKAGES:
        if package["name"] in existing_packages:
            continue
        db.add(ServicePackage(pricing_tiers=dict(STANDARD_TIERS), is_active=True, **package))
        created += 1

    existing_services = set((await db.execute(select(Service.name))).scalars().all())
    for sort_order, (name, price, description, category, icon) in enumerate(ADD_ONS, start=1):
        if name in existing_services:
            continue
        db.add(
            Service(
                name=name,
                price=Decimal(price),
                description=description,
                category=category,
                icon=icon,
                sort_order=sort_order,
                is_active=True,
            )
        )
        created += 1

    await db.commit()
    return created


async def seed_admin(db: AsyncSession) -> bool:
    """Create the configured admin account if it doesn't exist."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin seed")
        return False
    if await get_user_by_email(db, settings.ADMIN_EMAIL):
        logger.info("Admin account already exists: %s", settings.ADMIN_EMAIL)
        return False

    db.add(
        User(
            email=settings.ADMIN_EMAIL.lower(),
            hashed_password=hash_password(settings.ADMIN_PASSWORD),
            first_name="Admin",
            last_name="User",
            role=ROLE_ADMIN,
            is_active=True,
        )
    )
    await db.commit()
    logger.info("✅ Admin account created: %s", settings.ADMIN_EMAIL)
    return True


async def seed_defaults():
    """Startup seeding. Failures are logged so the API still comes up."""
    async with async_session() as db:
        try:
            created = await seed_catalog(db)
            if created:
                logger.info("✅ Seeded %d catalog entries", created)
            await seed_admin(db)
        except Exception as e:
            logger.error("Failed to seed defaults: %s", e)
            await db.rollback()
