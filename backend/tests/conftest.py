"""Shared test configuration and fixtures.

Every test gets a fresh in-memory SQLite database (through aiosqlite) with
the full schema, so ledger commits and rollbacks behave exactly as they do in
production without needing a PostgreSQL server. The clock is frozen at
2024-05-01 09:00 UTC.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from villa_ledger.api.deps import get_clock
from villa_ledger.auth.jwt import create_token_pair
from villa_ledger.auth.passwords import hash_password
from villa_ledger.clock import FixedClock
from villa_ledger.database import Base, get_db
from villa_ledger.main import app
from villa_ledger.models.user import AdminUser
from villa_ledger.models.villa import Villa
from villa_ledger.services.availability import AvailabilityIndex
from villa_ledger.services.ledger import BookingLedger
from villa_ledger.services.occupancy import OccupancyAggregator
from villa_ledger.services.repository import LedgerRepository

TODAY = datetime(2024, 5, 1, 9, 0)

# ---------------------------------------------------------------------------
# Per-test database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """An in-memory database shared by every connection of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session on the test database; the ledger commits through it."""
    session = AsyncSession(bind=test_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


# ---------------------------------------------------------------------------
# Service objects wired to the test session
# ---------------------------------------------------------------------------


@pytest.fixture
def repository(db_session: AsyncSession) -> LedgerRepository:
    return LedgerRepository(db_session)


@pytest.fixture
def index(repository: LedgerRepository, clock: FixedClock) -> AvailabilityIndex:
    return AvailabilityIndex(repository, clock)


@pytest.fixture
def ledger(repository: LedgerRepository, index: AvailabilityIndex, clock: FixedClock) -> BookingLedger:
    return BookingLedger(repository, index, clock)


@pytest.fixture
def aggregator(repository: LedgerRepository, clock: FixedClock) -> OccupancyAggregator:
    return OccupancyAggregator(repository, clock)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, clock: FixedClock) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test DB session and frozen clock."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Villas
# ---------------------------------------------------------------------------

VillaFactory = Callable[..., Awaitable[Villa]]


@pytest_asyncio.fixture
async def make_villa(db_session: AsyncSession) -> VillaFactory:
    """Return a coroutine that inserts a villa with sensible defaults."""

    async def _make(**overrides) -> Villa:
        fields = {
            "name": "Villa Sawah",
            "location": "Ubud, Bali",
            "price_per_night": Decimal("100.00"),
            "capacity": 4,
            "minimum_stay": 1,
            "cleaning_fee": Decimal("0.00"),
            "service_fee": Decimal("0.00"),
            "is_available": True,
        }
        fields.update(overrides)
        villa = Villa(**fields)
        db_session.add(villa)
        await db_session.commit()
        await db_session.refresh(villa)
        return villa

    return _make


@pytest_asyncio.fixture
async def villa(make_villa: VillaFactory) -> Villa:
    return await make_villa()


# ---------------------------------------------------------------------------
# Back-office accounts
# ---------------------------------------------------------------------------


async def _make_user(db_session: AsyncSession, email: str, role: str, is_active: bool = True) -> AdminUser:
    user = AdminUser(
        email=email,
        hashed_password=hash_password("testpass123", rounds=4),
        name=email.split("@")[0].title(),
        is_active=is_active,
        role=role,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def staff_user(db_session: AsyncSession) -> AdminUser:
    return await _make_user(db_session, "staff@stayinubud.com", "staff")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> AdminUser:
    return await _make_user(db_session, "admin@stayinubud.com", "admin")


@pytest_asyncio.fixture
async def inactive_user(db_session: AsyncSession) -> AdminUser:
    return await _make_user(db_session, "former@stayinubud.com", "staff", is_active=False)


def _headers(user: AdminUser) -> dict[str, str]:
    tokens = create_token_pair(str(user.id), user.role)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def auth_headers(staff_user: AdminUser) -> dict[str, str]:
    """Authorization headers for a staff (non-admin) account."""
    return _headers(staff_user)


@pytest.fixture
def admin_headers(admin_user: AdminUser) -> dict[str, str]:
    return _headers(admin_user)
