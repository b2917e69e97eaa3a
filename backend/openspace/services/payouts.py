"""Host payout workflow."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from openspace.core.exceptions import NotFound, PayoutRejected
from openspace.models.earning import Earning, EarningStatus
from openspace.models.user import User

logger = structlog.get_logger()

BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


@dataclass
class HostPayoutDetails:
    host: User
    totals: dict[str, Decimal] = field(default_factory=dict)
    available_earnings: list[Earning] = field(default_factory=list)


@dataclass
class PayoutResult:
    payout_id: str
    host: User
    total_amount: Decimal
    earnings_count: int
    method: str
    paid_at: datetime


def generate_payout_id(now: datetime) -> str:
    """Build a ``PO-`` reference from the millisecond timestamp in base 36."""
    millis = int(now.timestamp() * 1000)
    digits = ""
    while millis:
        millis, remainder = divmod(millis, 36)
        digits = BASE36_DIGITS[remainder] + digits
    return f"PO-{digits or '0'}"


async def get_host(db: AsyncSession, host_id: int) -> User:
    host = await db.get(User, host_id)
    if host is None or not host.is_host:
        raise NotFound("Host not found")
    return host


async def get_host_payout_details(db: AsyncSession, host_id: int) -> HostPayoutDetails:
    """Payout totals per earning status plus the earnings ready to pay."""
    host = await get_host(db, host_id)

    result = await db.execute(
        select(
            Earning.status,
            func.coalesce(func.sum(Earning.host_payout), 0).label("total"),
        )
        .where(Earning.host_id == host_id)
        .group_by(Earning.status)
    )
    totals = {status.value: Decimal("0") for status in EarningStatus}
    for row in result.all():
        totals[row.status] = Decimal(str(row.total))

    available = await db.execute(
        select(Earning)
        .where(Earning.host_id == host_id, Earning.status == EarningStatus.AVAILABLE.value)
        .order_by(Earning.created_at.desc())
    )

    return HostPayoutDetails(
        host=host,
        totals=totals,
        available_earnings=list(available.scalars().all()),
    )


async def process_host_payout(
    db: AsyncSession,
    host_id: int,
    earning_ids: Sequence[int],
    method: str,
    reference: str | None = None,
    now: datetime | None = None,
) -> PayoutResult:
    """Mark a host's available earnings as paid out.

    Every id must belong to the host; the request is rejected before any
    update otherwise. Ids that belong to the host but are not ``available``
    are skipped.

    Raises:
        NotFound: the host does not exist.
        PayoutRejected: missing input, foreign earnings, or nothing eligible.
    """
    if not earning_ids or not method:
        raise PayoutRejected("Host ID, earning IDs array, and payment method are required")

    host = await get_host(db, host_id)
    log = logger.bind(host_id=host_id)

    requested = set(earning_ids)
    result = await db.execute(
        select(Earning.id).where(Earning.id.in_(requested), Earning.host_id == host_id)
    )
    owned = set(result.scalars().all())
    foreign = sorted(requested - owned)
    if foreign:
        log.warning("payout_rejected_foreign_earnings", earning_ids=foreign)
        raise PayoutRejected(
            f"Earnings {', '.join(str(i) for i in foreign)} do not belong to this host"
        )

    paid_at = now or datetime.now(UTC)
    payout_id = reference or generate_payout_id(paid_at)

    # Guarded on status: rows a concurrent payout already claimed match nothing
    result = await db.execute(
        update(Earning)
        .where(
            Earning.id.in_(sorted(owned)),
            Earning.host_id == host_id,
            Earning.status == EarningStatus.AVAILABLE.value,
        )
        .values(
            status=EarningStatus.PAID_OUT.value,
            paid_out_at=paid_at,
            payout_id=payout_id,
            payout_method=method,
        )
        .returning(Earning.id, Earning.host_payout)
    )
    claimed = result.all()
    if not claimed:
        raise PayoutRejected("No eligible earnings found for payout")

    total = sum((Decimal(str(row.host_payout)) for row in claimed), Decimal("0"))

    log.info(
        "payout_processed",
        payout_id=payout_id,
        earnings_count=len(claimed),
        total_amount=str(total),
    )
    return PayoutResult(
        payout_id=payout_id,
        host=host,
        total_amount=total,
        earnings_count=len(claimed),
        method=method,
        paid_at=paid_at,
    )
