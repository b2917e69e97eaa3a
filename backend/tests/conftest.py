"""Pytest configuration and fixtures for backend tests."""

import itertools
import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

# Settings are read at import time; keep tests off production defaults
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("TIMEZONE", "Asia/Manila")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from openspace.core.auth import create_access_token
from openspace.db.base import Base
from openspace.db.session import get_db
from openspace.main import app

# Import all models to ensure they're registered with Base.metadata
from openspace.models import Booking, Earning, Room, User  # noqa: F401

# Test database URL (using in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

_unique = itertools.count(1)


@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[Any, None]:
    """Create test database engine.

    StaticPool keeps a single connection so the in-memory database
    survives across sessions.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection: Any, _connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine: Any) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with the database dependency overridden."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)  # type: ignore[arg-type]
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def create_test_user(test_session: AsyncSession) -> Any:
    """Factory fixture to create users."""

    async def _create_user(**kwargs: Any) -> User:
        n = next(_unique)
        user_data: dict[str, Any] = {
            "email": f"user{n}@example.com",
            "first_name": "Test",
            "last_name": f"User{n}",
            "role": "user",
            "is_active": True,
        }
        user_data.update(kwargs)
        user = User(**user_data)
        test_session.add(user)
        await test_session.commit()
        await test_session.refresh(user)
        return user

    return _create_user


@pytest_asyncio.fixture
async def admin_user(create_test_user: Any) -> User:
    return await create_test_user(first_name="Ada", last_name="Admin", role="admin")


@pytest.fixture
def auth_headers() -> Any:
    """Build bearer headers for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture
def admin_headers(admin_user: User, auth_headers: Any) -> dict[str, str]:
    return auth_headers(admin_user)


@pytest_asyncio.fixture
async def create_test_booking(test_session: AsyncSession, create_test_user: Any) -> Any:
    """Factory fixture to create a booking (and its room) for a host."""

    async def _create_booking(host: User | None = None, guest: User | None = None, **kwargs: Any) -> Booking:
        host = host or await create_test_user(role="host")
        guest = guest or await create_test_user(role="user")

        room = Room(host_id=host.id, title=f"Room of {host.first_name}", price_per_night=Decimal("2500.00"))
        test_session.add(room)
        await test_session.flush()

        check_out = datetime.now(UTC) - timedelta(days=2)
        booking_data: dict[str, Any] = {
            "room_id": room.id,
            "user_id": guest.id,
            "host_id": host.id,
            "check_in": check_out - timedelta(days=2),
            "check_out": check_out,
            "total_price": Decimal("5000.00"),
            "payment_method": "card",
            "payment_status": "paid",
            "booking_status": "completed",
        }
        booking_data.update(kwargs)
        booking = Booking(**booking_data)
        test_session.add(booking)
        await test_session.commit()
        await test_session.refresh(booking)
        return booking

    return _create_booking


@pytest_asyncio.fixture
async def create_test_earning(test_session: AsyncSession, create_test_booking: Any) -> Any:
    """Factory fixture to create an earning; a booking is created for it."""

    async def _create_earning(
        host: User | None = None,
        platform_fee: Decimal | str | int = Decimal("100.00"),
        **kwargs: Any,
    ) -> Earning:
        fee = Decimal(str(platform_fee))
        amount = Decimal(str(kwargs.pop("amount", fee * 10)))
        booking = await create_test_booking(host=host, total_price=amount)

        earning_data: dict[str, Any] = {
            "host_id": booking.host_id,
            "booking_id": booking.id,
            "amount": amount,
            "platform_fee": fee,
            "host_payout": amount - fee,
            "status": "available",
            "payment_method": "card",
            "available_date": booking.check_out + timedelta(days=1),
        }
        earning_data.update(kwargs)
        earning = Earning(**earning_data)
        test_session.add(earning)
        await test_session.commit()
        await test_session.refresh(earning)
        return earning

    return _create_earning
