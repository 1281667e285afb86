"""Property endpoints. Customers see their own; admins see all."""

import logging
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.exceptions import NotFound
from app.models.property import Property
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.property import PropertyCreate, PropertyOut, PropertyUpdate
from app.services import properties as property_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=PropertyOut, status_code=201)
async def create_property(
    data: PropertyCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    payload = data.model_dump(exclude={"user_id"})
    owner_id = current_user.id
    if current_user.is_admin and data.user_id:
        result = await db.execute(select(User.id).where(User.id == data.user_id))
        if result.first() is None:
            raise NotFound("Customer not found")
        owner_id = data.user_id
    return await property_service.create_property(db, owner_id, payload)


@router.get("/", response_model=list[PropertyOut])
async def list_properties(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = select(Property).order_by(Property.is_primary.desc(), Property.created_at.desc())
    if not current_user.is_admin:
        query = query.where(Property.user_id == current_user.id)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{property_id}", response_model=PropertyOut)
async def get_property(
    property_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await property_service.get_property_for(db, property_id, current_user)


@router.put("/{property_id}", response_model=PropertyOut)
async def update_property(
    property_id: UUID,
    data: PropertyUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    property = await property_service.get_property_for(db, property_id, current_user)
    return await property_service.update_property(db, property, data.model_dump(exclude_unset=True))


@router.delete("/{property_id}", response_model=MessageResponse)
async def delete_property(
    property_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    property = await property_service.get_property_for(db, property_id, current_user)
    await property_service.delete_property(db, property)
    return MessageResponse(message="Property deleted successfully")
