"""Shared test fixtures for the lawn care API tests.

Uses an in-memory SQLite async engine so tests run without PostgreSQL.
Stripe and SendGrid are replaced with mocks; the clock is pinned.
"""

from datetime import date, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.clock import FixedClock, get_clock
from app.core.database import Base, get_db
from app.main import app

# Import all models to ensure they're registered with Base.metadata
from app.models.appointment import Appointment, AppointmentService  # noqa: F401
from app.models.crew_member import CrewMember  # noqa: F401
from app.models.notification import Notification  # noqa: F401
from app.models.payment import Payment  # noqa: F401
from app.models.property import Property
from app.models.quote import Quote  # noqa: F401
from app.models.referral import Referral  # noqa: F401
from app.models.review import Review  # noqa: F401
from app.models.service import Service
from app.models.service_package import ServicePackage
from app.models.user import ROLE_ADMIN, User  # noqa: F401
from app.core.seed import seed_catalog
from app.services.auth import create_token_for, create_user
from app.services.email_service import EmailService, get_email_service
from app.services.payment_processor import StripePaymentProcessor, get_payment_processor


# Use aiosqlite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)
TestSession = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# Monday, mid-season
FIXED_NOW = datetime(2026, 6, 15, 10, 0, 0)
TODAY = FIXED_NOW.date()


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


async def override_get_db():
    async with TestSession() as session:
        yield session


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def clock():
    return FixedClock(FIXED_NOW)


@pytest.fixture
def email_service():
    """SendGrid stand-in; every send reports success."""
    service = AsyncMock(spec=EmailService)
    service.send_booking_confirmation.return_value = True
    service.send_payment_receipt.return_value = True
    service.send_quote_response.return_value = True
    return service


@pytest.fixture
def processor():
    """Stripe stand-in returning a fixed intent."""
    mock = MagicMock(spec=StripePaymentProcessor)
    mock.create_intent.return_value = {"intent_id": "pi_test_123", "client_secret": "pi_test_123_secret_abc"}
    mock.retrieve_intent.return_value = {
        "status": "succeeded",
        "charge_details": {"charge_id": "ch_test_123", "last4": "4242", "brand": "visa"},
    }
    mock.refund.return_value = {"refund_id": "re_test_123", "status": "succeeded"}
    return mock


@pytest.fixture(autouse=True)
def service_overrides(clock, email_service, processor):
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_payment_processor] = lambda: processor
    yield
    app.dependency_overrides.pop(get_clock, None)
    app.dependency_overrides.pop(get_email_service, None)
    app.dependency_overrides.pop(get_payment_processor, None)


@pytest_asyncio.fixture
async def client():
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db():
    """Direct DB session for test setup/assertions."""
    async with TestSession() as session:
        yield session


def _auth(user: User) -> dict:
    return {
        "user": user,
        "id": str(user.id),
        "email": user.email,
        "headers": {"Authorization": f"Bearer {create_token_for(user)}"},
    }


@pytest_asyncio.fixture
async def customer(db):
    """A customer account with an auth header."""
    user = await create_user(db, "customer@example.com", "testpass123", first_name="Casey", last_name="Green")
    return _auth(user)


@pytest_asyncio.fixture
async def other_customer(db):
    user = await create_user(db, "neighbor@example.com", "testpass123", first_name="Nora", last_name="Hill")
    return _auth(user)


@pytest_asyncio.fixture
async def admin(db):
    user = await create_user(db, "admin@example.com", "adminpass123", first_name="Admin", role=ROLE_ADMIN)
    return _auth(user)


@pytest_asyncio.fixture
async def catalog(db):
    """Standard packages and add-ons keyed by name."""
    await seed_catalog(db)
    packages = (await db.execute(select(ServicePackage))).scalars().all()
    add_ons = (await db.execute(select(Service))).scalars().all()
    return {
        "packages": {p.name: p for p in packages},
        "add_ons": {s.name: s for s in add_ons},
    }


@pytest_asyncio.fixture
async def lawn(db, customer):
    """The customer's 7,500 sq ft primary property (medium tier)."""
    prop = Property(
        user_id=customer["user"].id,
        address="12 Elm Street",
        city="Springfield",
        state="IL",
        zip_code="62701",
        lot_size=7500,
        is_primary=True,
    )
    db.add(prop)
    await db.commit()
    await db.refresh(prop)
    return prop


@pytest_asyncio.fixture
async def booking(client, customer, lawn, catalog):
    """A one-time Basic Mow booking with Weed Control: 35 x 1.2 + 30 = 72.00."""
    resp = await client.post(
        "/api/v1/bookings/",
        json={
            "property_id": str(lawn.id),
            "service_package_id": str(catalog["packages"]["Basic Mow"].id),
            "scheduled_date": date(2026, 6, 20).isoformat(),
            "add_ons": [{"service_id": str(catalog["add_ons"]["Weed Control"].id)}],
        },
        headers=customer["headers"],
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["booking"]
