"""Tests for demo earnings seeding."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from openspace.models import Booking, Earning, User
from openspace.services.seed_earnings import SEED_EMAIL_DOMAIN, seed_earnings

NOW = datetime(2026, 3, 15, 4, 0, tzinfo=UTC)


class TestSeedEarnings:
    @pytest.mark.asyncio
    async def test_seeds_hosts_bookings_and_earnings(self, test_session: AsyncSession) -> None:
        result = await seed_earnings(test_session, bookings_per_host=3, months=2, now=NOW)

        assert result["seeded"] is True
        assert result["users_created"] == 11
        assert result["bookings_created"] == 15

        bookings = await test_session.scalar(select(func.count(Booking.id)))
        earnings = await test_session.scalar(select(func.count(Earning.id)))
        assert bookings == 15
        assert earnings == 15

        fees = await test_session.scalar(select(func.sum(Earning.platform_fee)))
        assert Decimal(str(fees)) == result["total_fees"]

    @pytest.mark.asyncio
    async def test_earnings_settle_within_window(self, test_session: AsyncSession) -> None:
        await seed_earnings(test_session, bookings_per_host=2, months=1, now=NOW)

        latest = await test_session.scalar(select(func.max(Earning.created_at)))
        assert latest is not None
        assert latest.replace(tzinfo=UTC) <= NOW

    @pytest.mark.asyncio
    async def test_fee_is_ten_percent_of_amount(self, test_session: AsyncSession) -> None:
        await seed_earnings(test_session, bookings_per_host=2, now=NOW)

        earnings = (await test_session.execute(select(Earning))).scalars().all()
        for earning in earnings:
            assert earning.platform_fee == (earning.amount * Decimal("0.10")).quantize(Decimal("0.01"))
            assert earning.platform_fee + earning.host_payout == earning.amount

    @pytest.mark.asyncio
    async def test_is_idempotent(self, test_session: AsyncSession) -> None:
        await seed_earnings(test_session, bookings_per_host=1, now=NOW)

        second = await seed_earnings(test_session, bookings_per_host=1, now=NOW)

        assert second == {"seeded": False}
        users = await test_session.scalar(
            select(func.count(User.id)).where(User.email.like(f"%@{SEED_EMAIL_DOMAIN}"))
        )
        assert users == 11
