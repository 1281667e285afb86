"""Property records and the one-primary-per-owner rule."""

import logging
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import apply_changes
from app.core.exceptions import Conflict, NotFound
from app.models.appointment import Appointment
from app.models.property import Property
from app.models.user import User

logger = logging.getLogger(__name__)


async def get_property_for(db: AsyncSession, property_id: UUID, user: User) -> Property:
    query = select(Property).where(Property.id == property_id)
    if not user.is_admin:
        query = query.where(Property.user_id == user.id)
    result = await db.execute(query)
    property = result.scalar_one_or_none()
    if not property:
        raise NotFound("Property not found")
    return property


async def _clear_primary(db: AsyncSession, owner_id: UUID, keep_id: UUID | None = None):
    stmt = update(Property).where(Property.user_id == owner_id, Property.is_primary.is_(True))
    if keep_id is not None:
        stmt = stmt.where(Property.id != keep_id)
    await db.execute(stmt.values(is_primary=False).execution_options(synchronize_session="fetch"))


async def _lock_owner(db: AsyncSession, owner_id: UUID):
    """Serialize primary swaps for one owner on the owner's user row."""
    await db.execute(select(User.id).where(User.id == owner_id).with_for_update())


async def _commit_primary_swap(db: AsyncSession):
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Another primary property was saved at the same time. Please retry.")


async def create_property(db: AsyncSession, owner_id: UUID, data: dict) -> Property:
    """Add a property. The owner's first property always becomes primary."""
    await _lock_owner(db, owner_id)
    existing = (
        await db.execute(select(func.count(Property.id)).where(Property.user_id == owner_id))
    ).scalar_one()
    make_primary = bool(data.pop("is_primary", False)) or existing == 0

    if make_primary:
        await _clear_primary(db, owner_id)
    property = Property(user_id=owner_id, is_primary=make_primary, **data)
    db.add(property)
    await _commit_primary_swap(db)
    await db.refresh(property)
    logger.info("Property %s created for user %s (primary=%s)", property.id, owner_id, make_primary)
    return property


async def update_property(db: AsyncSession, property: Property, changes: dict) -> Property:
    make_primary = changes.pop("is_primary", None)
    apply_changes(property, changes)
    if make_primary:
        await _lock_owner(db, property.user_id)
        await _clear_primary(db, property.user_id, keep_id=property.id)
        property.is_primary = True
    await _commit_primary_swap(db)
    await db.refresh(property)
    return property


async def delete_property(db: AsyncSession, property: Property):
    """Delete a property that has never been booked."""
    booked = (
        await db.execute(select(func.count(Appointment.id)).where(Appointment.property_id == property.id))
    ).scalar_one()
    if booked:
        raise Conflict("Cannot delete property with existing appointments. Please cancel appointments first.")
    await db.delete(property)
    await db.commit()
    logger.info("Property %s deleted", property.id)
