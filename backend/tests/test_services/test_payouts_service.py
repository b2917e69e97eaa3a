"""Tests for the host payout workflow."""

import asyncio
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from openspace.core.exceptions import NotFound, PayoutRejected
from openspace.db.base import Base
from openspace.models import Booking, Earning, Room, User
from openspace.services.payouts import (
    generate_payout_id,
    get_host_payout_details,
    process_host_payout,
)


class TestGeneratePayoutId:
    def test_base36_millis(self) -> None:
        assert generate_payout_id(datetime(1970, 1, 1, 0, 0, 36, tzinfo=UTC)) == "PO-RS0"

    def test_epoch(self) -> None:
        assert generate_payout_id(datetime(1970, 1, 1, tzinfo=UTC)) == "PO-0"

    def test_uppercase(self) -> None:
        payout_id = generate_payout_id(datetime(2026, 3, 15, tzinfo=UTC))

        assert payout_id.startswith("PO-")
        assert payout_id[3:] == payout_id[3:].upper()


class TestHostPayoutDetails:
    @pytest.mark.asyncio
    async def test_totals_per_status(
        self, test_session: AsyncSession, create_test_user: Any, create_test_earning: Any
    ) -> None:
        host = await create_test_user(role="host")
        newer = await create_test_earning(
            host=host, amount=1000, platform_fee=100, created_at=datetime(2026, 2, 2, tzinfo=UTC)
        )
        older = await create_test_earning(
            host=host, amount=500, platform_fee=50, created_at=datetime(2026, 2, 1, tzinfo=UTC)
        )
        await create_test_earning(host=host, amount=200, platform_fee=20, status="pending")

        details = await get_host_payout_details(test_session, host.id)

        assert details.host.id == host.id
        assert details.totals["available"] == Decimal("1350")
        assert details.totals["pending"] == Decimal("180")
        assert details.totals["paid_out"] == Decimal("0")
        assert [e.id for e in details.available_earnings] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_unknown_host(self, test_session: AsyncSession) -> None:
        with pytest.raises(NotFound):
            await get_host_payout_details(test_session, 9999)

    @pytest.mark.asyncio
    async def test_guest_is_not_a_host(self, test_session: AsyncSession, create_test_user: Any) -> None:
        guest = await create_test_user(role="user")

        with pytest.raises(NotFound):
            await get_host_payout_details(test_session, guest.id)


class TestProcessHostPayout:
    @pytest.mark.asyncio
    async def test_pays_available_earnings(
        self, test_session: AsyncSession, create_test_user: Any, create_test_earning: Any
    ) -> None:
        host = await create_test_user(role="host")
        first = await create_test_earning(host=host, amount=1000, platform_fee=100)
        second = await create_test_earning(host=host, amount=2000, platform_fee=200)
        paid_at = datetime(2026, 3, 15, 4, 0, tzinfo=UTC)

        result = await process_host_payout(
            test_session, host.id, [first.id, second.id], "bank_transfer", now=paid_at
        )

        assert result.total_amount == Decimal("2700")
        assert result.earnings_count == 2
        assert result.payout_id == generate_payout_id(paid_at)

        earnings = (await test_session.execute(select(Earning))).scalars().all()
        for earning in earnings:
            assert earning.status == "paid_out"
            assert earning.payout_id == result.payout_id
            assert earning.payout_method == "bank_transfer"
            assert earning.payment_method == "card"

    @pytest.mark.asyncio
    async def test_reference_is_used_as_payout_id(
        self, test_session: AsyncSession, create_test_user: Any, create_test_earning: Any
    ) -> None:
        host = await create_test_user(role="host")
        earning = await create_test_earning(host=host)

        result = await process_host_payout(test_session, host.id, [earning.id], "gcash", reference="GC-123")

        assert result.payout_id == "GC-123"

    @pytest.mark.asyncio
    async def test_skips_ineligible_earnings(
        self, test_session: AsyncSession, create_test_user: Any, create_test_earning: Any
    ) -> None:
        host = await create_test_user(role="host")
        available = await create_test_earning(host=host)
        pending = await create_test_earning(host=host, status="pending")

        result = await process_host_payout(test_session, host.id, [available.id, pending.id], "gcash")

        assert result.earnings_count == 1
        await test_session.refresh(pending)
        assert pending.status == "pending"

    @pytest.mark.asyncio
    async def test_foreign_earnings_reject_whole_request(
        self, test_session: AsyncSession, create_test_user: Any, create_test_earning: Any
    ) -> None:
        host = await create_test_user(role="host")
        other = await create_test_user(role="host")
        own = await create_test_earning(host=host)
        foreign = await create_test_earning(host=other)

        with pytest.raises(PayoutRejected, match=f"Earnings {foreign.id} do not belong"):
            await process_host_payout(test_session, host.id, [own.id, foreign.id], "gcash")

        await test_session.refresh(own)
        assert own.status == "available"

    @pytest.mark.asyncio
    async def test_nothing_eligible(
        self, test_session: AsyncSession, create_test_user: Any, create_test_earning: Any
    ) -> None:
        host = await create_test_user(role="host")
        pending = await create_test_earning(host=host, status="pending")

        with pytest.raises(PayoutRejected, match="No eligible earnings"):
            await process_host_payout(test_session, host.id, [pending.id], "gcash")

    @pytest.mark.asyncio
    async def test_missing_input(self, test_session: AsyncSession) -> None:
        with pytest.raises(PayoutRejected, match="required"):
            await process_host_payout(test_session, 1, [], "gcash")

        with pytest.raises(PayoutRejected, match="required"):
            await process_host_payout(test_session, 1, [1], "")

    @pytest.mark.asyncio
    async def test_unknown_host(self, test_session: AsyncSession) -> None:
        with pytest.raises(NotFound):
            await process_host_payout(test_session, 9999, [1], "gcash")


@pytest_asyncio.fixture
async def shared_db(tmp_path: Path) -> AsyncGenerator[Any, None]:
    """File-backed database so separate sessions use separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'payouts.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


async def seed_available_earning(session_factory: Any) -> tuple[int, int]:
    check_out = datetime(2026, 3, 1, tzinfo=UTC)
    async with session_factory() as db:
        host = User(email="host@example.com", first_name="Maria", last_name="Santos", role="host")
        guest = User(email="guest@example.com", first_name="Carlo", last_name="Bautista")
        db.add_all([host, guest])
        await db.flush()

        room = Room(host_id=host.id, title="Loft", price_per_night=Decimal("1000.00"))
        db.add(room)
        await db.flush()

        booking = Booking(
            room_id=room.id,
            user_id=guest.id,
            host_id=host.id,
            check_in=check_out - timedelta(days=1),
            check_out=check_out,
            total_price=Decimal("1000.00"),
            payment_method="card",
            payment_status="paid",
            booking_status="completed",
        )
        db.add(booking)
        await db.flush()

        earning = Earning(
            host_id=host.id,
            booking_id=booking.id,
            amount=Decimal("1000.00"),
            platform_fee=Decimal("100.00"),
            host_payout=Decimal("900.00"),
            status="available",
            payment_method="card",
            available_date=check_out + timedelta(days=1),
        )
        db.add(earning)
        await db.commit()
        return host.id, earning.id


class TestConcurrentPayouts:
    @pytest.mark.asyncio
    async def test_earning_is_paid_out_once(self, shared_db: Any) -> None:
        host_id, earning_id = await seed_available_earning(shared_db)

        async def pay(reference: str) -> Any:
            async with shared_db() as db:
                result = await process_host_payout(db, host_id, [earning_id], "gcash", reference=reference)
                await db.commit()
                return result

        outcomes = await asyncio.gather(pay("PO-A"), pay("PO-B"), return_exceptions=True)

        paid = [o for o in outcomes if not isinstance(o, BaseException)]
        rejected = [o for o in outcomes if isinstance(o, PayoutRejected)]
        assert len(paid) == 1
        assert len(rejected) == 1
        assert paid[0].total_amount == Decimal("900.00")

        async with shared_db() as db:
            earning = await db.get(Earning, earning_id)
            assert earning is not None
            assert earning.status == "paid_out"
            assert earning.payout_id == paid[0].payout_id

    @pytest.mark.asyncio
    async def test_repeat_payout_is_rejected(self, shared_db: Any) -> None:
        host_id, earning_id = await seed_available_earning(shared_db)

        async with shared_db() as db:
            await process_host_payout(db, host_id, [earning_id], "gcash", reference="PO-A")
            await db.commit()

        async with shared_db() as db:
            with pytest.raises(PayoutRejected, match="No eligible earnings"):
                await process_host_payout(db, host_id, [earning_id], "gcash", reference="PO-B")

            earning = await db.get(Earning, earning_id)
            assert earning is not None
            assert earning.payout_id == "PO-A"
