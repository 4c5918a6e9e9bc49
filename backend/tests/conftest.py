"""
Pytest fixtures for test database, client, clock and admin session.

Uses an in-memory SQLite database (aiosqlite) shared through a StaticPool;
tables are created and dropped per test for isolation.
"""

import os

# Must be set before the settings are first loaded
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["REDIS_ENABLED"] = "false"
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("BOOKING_FROM_EMAIL", None)
os.environ.pop("ADMIN_BOOTSTRAP_EMAIL", None)
os.environ.pop("ADMIN_BOOTSTRAP_PASSWORD", None)

from datetime import date, time
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from venue_booking.main import app
from venue_booking.core import clock
from venue_booking.core.security import ADMIN_SESSION_COOKIE, AdminIdentity, create_session_token, hash_password
from venue_booking.db.base import Base
from venue_booking.db.session import get_db
from venue_booking.models import AdminUser, Booking, Venue

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# "Today" for every test, so calendar and past-date rules are deterministic
TODAY = date(2025, 11, 28)

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(autouse=True)
def pinned_today(monkeypatch) -> date:
    monkeypatch.setattr(clock, "today", lambda: TODAY)
    return TODAY


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def venues(db_session: AsyncSession) -> dict[str, Venue]:
    """The three seeded catalog venues, keyed by short name."""
    rows = {
        "auditorium": Venue(
            name="City Hall Auditorium",
            address="Main Street 1",
            capacity=200,
            description="Large hall suitable for conferences, concerts and public events.",
        ),
        "conference": Venue(
            name="Conference Room A",
            address="Business Center, 2nd Floor",
            capacity=40,
            description="Perfect for meetings, workshops and small presentations.",
        ),
        "community": Venue(
            name="Community Hall",
            address="Park Avenue 10",
            capacity=120,
            description="Flexible space for community events, fairs and parties.",
        ),
    }
    db_session.add_all(rows.values())
    await db_session.commit()
    return rows


@pytest_asyncio.fixture
async def community_hall(venues) -> Venue:
    return venues["community"]


async def add_booking(
    db: AsyncSession,
    venue: Venue,
    event_date: date,
    status: str = "pending",
    start: time = time(10, 0),
    end: time = time(12, 0),
    name: str = "Jordan Smith",
) -> Booking:
    booking = Booking(
        venue_id=venue.id,
        requester_name=name,
        requester_email="jordan@example.com",
        event_date=event_date,
        start_time=start,
        end_time=end,
        status=status,
    )
    db.add(booking)
    await db.commit()
    await db.refresh(booking)
    return booking


@pytest_asyncio.fixture
async def booked_community_hall(db_session: AsyncSession, community_hall: Venue) -> Booking:
    """Community Hall with a pending booking on 2025-11-29."""
    return await add_booking(db_session, community_hall, date(2025, 11, 29))


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> AdminUser:
    admin = AdminUser(email="admin@example.com", hashed_password=hash_password("correct-horse-42"))
    db_session.add(admin)
    await db_session.commit()
    await db_session.refresh(admin)
    return admin


@pytest.fixture
def admin_identity(admin_user: AdminUser) -> AdminIdentity:
    return AdminIdentity(admin_id=admin_user.id, email=admin_user.email)


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient, admin_identity: AdminIdentity) -> AsyncClient:
    """Client carrying a valid admin session cookie."""
    client.cookies.set(ADMIN_SESSION_COOKIE, create_session_token(admin_identity))
    return client


@pytest.fixture
def sent_emails(monkeypatch) -> list:
    """Capture confirmation emails instead of calling the provider."""
    from venue_booking.services import email_service

    sent = []

    async def fake_send(payload, client=None):
        sent.append(payload)
        return True

    monkeypatch.setattr(email_service, "send_booking_confirmation", fake_send)
    return sent
