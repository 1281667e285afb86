"""Async database engine and session management."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings
from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""
    pass


_is_sqlite = "sqlite" in settings.DATABASE_URL

_engine_kwargs = {"echo": False}
if _is_sqlite:
    _engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
else:
    _engine_kwargs["pool_size"] = 5
    _engine_kwargs["max_overflow"] = 10
    _engine_kwargs["pool_pre_ping"] = True

engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """FastAPI dependency: yield an async database session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """Create all tables (for local SQLite dev). Use Alembic for production migrations."""
    # Ensure models are registered with Base.metadata
    from app.models.user import User  # noqa: F401
    from app.models.property import Property  # noqa: F401
    from app.models.service_package import ServicePackage  # noqa: F401
    from app.models.service import Service  # noqa: F401
    from app.models.crew_member import CrewMember  # noqa: F401
    from app.models.appointment import Appointment, AppointmentService  # noqa: F401
    from app.models.payment import Payment  # noqa: F401
    from app.models.review import Review  # noqa: F401
    from app.models.quote import Quote  # noqa: F401
    from app.models.notification import Notification  # noqa: F401
    from app.models.referral import Referral  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured for %s", engine.url.render_as_string(hide_password=True))


def reject_nulls(model, changes: dict):
    """Raise ValidationError if a partial update nulls a NOT NULL column."""
    columns = model.__table__.columns
    for field, value in changes.items():
        if value is None and field in columns and not columns[field].nullable:
            raise ValidationError(f"{field} cannot be null")


def apply_changes(instance, changes: dict):
    """Copy a partial update onto a model row after checking it for nulls."""
    reject_nulls(type(instance), changes)
    for field, value in changes.items():
        setattr(instance, field, value)
