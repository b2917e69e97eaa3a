"""Revenue query service: period → earnings snapshot → summary."""

import asyncio
from datetime import datetime

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from openspace.core.config import settings
from openspace.core.exceptions import DataUnavailable
from openspace.models.earning import Earning
from openspace.services.revenue.aggregator import RevenueSummary, Transaction, aggregate
from openspace.services.revenue.periods import Period, PeriodRange, as_utc, resolve_range

logger = structlog.get_logger()


async def fetch_transactions(db: AsyncSession, period_range: PeriodRange) -> list[Transaction]:
    """Load earnings settled within the range, oldest first."""
    query = (
        select(
            Earning.id,
            Earning.amount,
            Earning.platform_fee,
            Earning.payment_method,
            Earning.created_at,
            Earning.host_id,
        )
        .where(Earning.created_at <= as_utc(period_range.end))
        .order_by(Earning.created_at.asc(), Earning.id.asc())
    )
    if period_range.start is not None:
        query = query.where(Earning.created_at >= as_utc(period_range.start))

    result = await db.execute(query)
    return [
        Transaction(
            id=row.id,
            amount=row.amount,
            platform_fee=row.platform_fee,
            payment_method=row.payment_method,
            created_at=row.created_at,
            host_id=row.host_id,
        )
        for row in result.all()
    ]


async def get_platform_revenue_summary(
    db: AsyncSession,
    period: str | Period = Period.ALL,
    now: datetime | None = None,
    timeout: float | None = None,
) -> RevenueSummary:
    """Compute the platform revenue summary for a period.

    Raises:
        InvalidPeriod: unknown period selector.
        DataUnavailable: the earnings query failed or exceeded its timeout.
    """
    period_range = resolve_range(period, now)
    timeout = settings.REVENUE_QUERY_TIMEOUT if timeout is None else timeout
    log = logger.bind(period=str(Period(period).value))

    try:
        transactions = await asyncio.wait_for(
            fetch_transactions(db, period_range), timeout=timeout
        )
    except TimeoutError as exc:
        log.warning("revenue_query_timeout", timeout=timeout)
        raise DataUnavailable("Revenue data query timed out, please retry") from exc
    except SQLAlchemyError as exc:
        log.exception("revenue_query_failed", error=str(exc))
        raise DataUnavailable("Revenue data is temporarily unavailable, please retry") from exc

    summary = aggregate(transactions)
    log.info(
        "revenue_summary_computed",
        total_bookings=summary.summary.total_bookings,
        months=len(summary.monthly_trend),
    )
    return summary
