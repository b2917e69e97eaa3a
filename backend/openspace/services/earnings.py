"""Earning records: creation on booking completion and release for payout."""

from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from openspace.core.config import settings
from openspace.models.booking import ONLINE_PAYMENT_METHODS, Booking
from openspace.models.earning import Earning, EarningStatus

logger = structlog.get_logger()

CENTS = Decimal("0.01")


def split_payment(total: Decimal, fee_rate: Decimal | None = None) -> tuple[Decimal, Decimal]:
    """Split a booking total into (platform_fee, host_payout), rounded to cents."""
    fee_rate = settings.PLATFORM_FEE_RATE if fee_rate is None else fee_rate
    platform_fee = (total * fee_rate).quantize(CENTS, rounding=ROUND_HALF_UP)
    return platform_fee, total - platform_fee


async def record_booking_earning(db: AsyncSession, booking: Booking) -> Earning:
    """Create the pending earning for a booking, or return the existing one.

    The earning becomes payable ``EARNING_HOLD_DAYS`` after check-out.
    """
    result = await db.execute(select(Earning).where(Earning.booking_id == booking.id))
    existing = result.scalar_one_or_none()
    if existing:
        return existing

    platform_fee, host_payout = split_payment(booking.total_price)
    earning = Earning(
        host_id=booking.host_id,
        booking_id=booking.id,
        amount=booking.total_price,
        platform_fee=platform_fee,
        host_payout=host_payout,
        status=EarningStatus.PENDING.value,
        payment_method=booking.payment_method,
        available_date=booking.check_out + timedelta(days=settings.EARNING_HOLD_DAYS),
    )
    db.add(earning)
    await db.flush()

    logger.info(
        "earning_recorded",
        booking_id=booking.id,
        host_id=booking.host_id,
        platform_fee=str(platform_fee),
    )
    return earning


async def release_online_earnings(db: AsyncSession, now: datetime | None = None) -> int:
    """Make pending earnings from online payments immediately available.

    Online payments are already collected, so they skip the hold period.
    Returns the number of earnings released.
    """
    now = now or datetime.now(UTC)
    result = await db.execute(
        update(Earning)
        .where(
            Earning.status == EarningStatus.PENDING.value,
            Earning.payment_method.in_([m.value for m in ONLINE_PAYMENT_METHODS]),
        )
        .values(status=EarningStatus.AVAILABLE.value, available_date=now)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    released = result.rowcount or 0
    logger.info("online_earnings_released", released=released)
    return released
