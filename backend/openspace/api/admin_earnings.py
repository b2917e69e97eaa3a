"""Admin earnings API: platform revenue, host rankings, transactions and payouts."""

import math
from datetime import date, datetime, time
from decimal import Decimal
from typing import Annotated, cast

import structlog
from dateutil.relativedelta import relativedelta
from fastapi import APIRouter, Depends, Query, Request
from pydantic import Field
from sqlalchemy import ColumnElement, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from openspace.api.envelope import CamelModel, Envelope
from openspace.core.auth import AdminUser
from openspace.core.limiter import limiter
from openspace.db.session import get_db
from openspace.models.booking import Booking, BookingStatus
from openspace.models.earning import Earning
from openspace.models.user import User, UserRole
from openspace.services.payouts import get_host_payout_details, process_host_payout
from openspace.services.revenue import (
    Period,
    RevenueSummary,
    format_currency,
    get_platform_revenue_summary,
    month_name,
    payment_method_label,
    resolve_range,
)
from openspace.services.revenue.periods import as_utc, local_timezone

router = APIRouter(prefix="/admin/earnings", tags=["admin-earnings"])
logger = structlog.get_logger()

Db = Annotated[AsyncSession, Depends(get_db)]

PERIOD_DESCRIPTION = "One of: today, week, month, year, all"


# --- Response models -------------------------------------------------------


class RevenueTotalsResponse(CamelModel):
    total_fees: float
    total_bookings: int
    avg_fee: float


class PaymentMethodRevenueResponse(CamelModel):
    method: str
    label: str
    total_fees: float
    count: int
    avg_per_booking: float


class MonthlyRevenueResponse(CamelModel):
    year: int
    month: int
    month_name: str
    revenue: float


class RevenueSummaryResponse(CamelModel):
    """Platform revenue for a period."""

    summary: RevenueTotalsResponse
    by_payment_method: list[PaymentMethodRevenueResponse]
    monthly_trend: list[MonthlyRevenueResponse]

    @classmethod
    def from_summary(cls, result: RevenueSummary) -> "RevenueSummaryResponse":
        return cls(
            summary=RevenueTotalsResponse(
                total_fees=float(result.summary.total_fees),
                total_bookings=result.summary.total_bookings,
                avg_fee=float(result.summary.avg_fee),
            ),
            by_payment_method=[
                PaymentMethodRevenueResponse(
                    method=item.method,
                    label=payment_method_label(item.method),
                    total_fees=float(item.total_fees),
                    count=item.count,
                    avg_per_booking=float(item.avg_per_booking),
                )
                for item in result.by_payment_method
            ],
            monthly_trend=[
                MonthlyRevenueResponse(
                    year=item.year,
                    month=item.month,
                    month_name=month_name(item.month),
                    revenue=float(item.revenue),
                )
                for item in result.monthly_trend
            ],
        )


class EarningsOverview(CamelModel):
    today: float
    month: float
    total: float
    growth: float


class PlatformCounts(CamelModel):
    total_hosts: int
    total_users: int
    total_bookings: int
    pending_bookings: int


class DashboardSummaryResponse(CamelModel):
    earnings: EarningsOverview
    counts: PlatformCounts


class TopHostResponse(CamelModel):
    host_id: int
    total_earnings: float
    total_platform_fee: float
    bookings_count: int
    first_name: str
    last_name: str
    email: str
    profile_image: str | None = None


class PersonInfo(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str


class TransactionResponse(CamelModel):
    id: int
    date: datetime
    booking_id: int | None
    check_in: datetime | None
    check_out: datetime | None
    guest: PersonInfo | None
    host: PersonInfo
    total_amount: float
    platform_fee: float
    host_payout: float
    payment_method: str
    payment_method_label: str
    status: str


class TransactionPage(CamelModel):
    """Paginated transaction history; pagination sits beside ``data``."""

    success: bool = True
    count: int
    total: int
    total_pages: int
    current_page: int
    data: list[TransactionResponse]


class PayoutSummary(CamelModel):
    available: float
    pending: float
    paid_out: float


class PayoutBooking(CamelModel):
    id: int
    check_in: datetime
    check_out: datetime
    price: float
    room_title: str


class AvailableEarning(CamelModel):
    id: int
    amount: float
    platform_fee: float
    total_amount: float
    date: datetime
    booking: PayoutBooking | None


class HostPayoutResponse(CamelModel):
    host_id: int
    host_name: str
    email: str
    summary: PayoutSummary
    available_earnings: list[AvailableEarning]


class ProcessPayoutRequest(CamelModel):
    host_id: int
    earning_ids: list[int] = Field(min_length=1)
    method: str = Field(min_length=1, max_length=50)
    reference: str | None = Field(default=None, max_length=50)


class PayoutResponse(CamelModel):
    payout_id: str
    host_id: int
    host_name: str
    total_amount: float
    earnings_count: int
    method: str
    paid_at: datetime


# --- Helpers ---------------------------------------------------------------


def created_within(start: datetime | None, end: datetime | None = None) -> list[ColumnElement[bool]]:
    """Filters on ``Earning.created_at``; bounds are normalized to UTC."""
    clauses: list[ColumnElement[bool]] = []
    if start is not None:
        clauses.append(Earning.created_at >= as_utc(start))
    if end is not None:
        clauses.append(Earning.created_at <= as_utc(end))
    return clauses


async def sum_platform_fees(db: AsyncSession, *clauses: ColumnElement[bool]) -> Decimal:
    result = await db.execute(
        select(func.coalesce(func.sum(Earning.platform_fee), 0)).where(*clauses)
    )
    return Decimal(str(result.scalar() or 0))


def person(user: User) -> PersonInfo:
    return PersonInfo(
        id=user.id, first_name=user.first_name, last_name=user.last_name, email=user.email
    )


# --- Endpoints -------------------------------------------------------------


@router.get("/revenue-summary", response_model=Envelope[RevenueSummaryResponse])
async def get_revenue_summary(
    admin: AdminUser,
    db: Db,
    period: str = Query(Period.ALL.value, description=PERIOD_DESCRIPTION),
) -> Envelope[RevenueSummaryResponse]:
    """Platform fee totals, payment-method breakdown and monthly trend."""
    summary = await get_platform_revenue_summary(db, period)
    return Envelope(data=RevenueSummaryResponse.from_summary(summary))


@router.get("/dashboard-summary", response_model=Envelope[DashboardSummaryResponse])
async def get_dashboard_summary(admin: AdminUser, db: Db) -> Envelope[DashboardSummaryResponse]:
    """Headline earnings and platform counts.

    Growth compares this month against the whole previous calendar month.
    """
    today_start = cast(datetime, resolve_range(Period.TODAY).start)
    month_start = cast(datetime, resolve_range(Period.MONTH).start)
    prev_month_start = month_start - relativedelta(months=1)

    today_total = await sum_platform_fees(db, *created_within(today_start))
    month_total = await sum_platform_fees(db, *created_within(month_start))
    prev_month_total = await sum_platform_fees(
        db,
        Earning.created_at >= as_utc(prev_month_start),
        Earning.created_at < as_utc(month_start),
    )
    all_time_total = await sum_platform_fees(db)

    growth = Decimal("0")
    if prev_month_total > 0:
        growth = (month_total - prev_month_total) / prev_month_total * 100

    role_counts = await db.execute(
        select(User.role, func.count(User.id)).group_by(User.role)
    )
    by_role = {role: count for role, count in role_counts.all()}
    total_bookings = await db.scalar(select(func.count(Booking.id)))
    pending_bookings = await db.scalar(
        select(func.count(Booking.id)).where(Booking.booking_status == BookingStatus.PENDING.value)
    )

    return Envelope(
        data=DashboardSummaryResponse(
            earnings=EarningsOverview(
                today=float(today_total),
                month=float(month_total),
                total=float(all_time_total),
                growth=round(float(growth), 2),
            ),
            counts=PlatformCounts(
                total_hosts=by_role.get(UserRole.HOST.value, 0),
                total_users=by_role.get(UserRole.USER.value, 0),
                total_bookings=total_bookings or 0,
                pending_bookings=pending_bookings or 0,
            ),
        )
    )


@router.get("/top-hosts", response_model=Envelope[list[TopHostResponse]])
async def get_top_hosts(
    admin: AdminUser,
    db: Db,
    limit: int = Query(10, ge=1, le=100, description="Number of hosts to return"),
    period: str = Query(Period.ALL.value, description=PERIOD_DESCRIPTION),
) -> Envelope[list[TopHostResponse]]:
    """Hosts ranked by total payout earned in the period."""
    period_range = resolve_range(period)

    total_earnings = func.sum(Earning.host_payout).label("total_earnings")
    query = (
        select(
            Earning.host_id,
            total_earnings,
            func.sum(Earning.platform_fee).label("total_platform_fee"),
            func.count(Earning.id).label("bookings_count"),
            User.first_name,
            User.last_name,
            User.email,
            User.profile_image,
        )
        .join(User, User.id == Earning.host_id)
        .where(*created_within(period_range.start, period_range.end))
        .group_by(
            Earning.host_id, User.first_name, User.last_name, User.email, User.profile_image
        )
        .order_by(desc("total_earnings"), Earning.host_id)
        .limit(limit)
    )
    result = await db.execute(query)

    return Envelope(
        data=[
            TopHostResponse(
                host_id=row.host_id,
                total_earnings=float(row.total_earnings or 0),
                total_platform_fee=float(row.total_platform_fee or 0),
                bookings_count=row.bookings_count,
                first_name=row.first_name,
                last_name=row.last_name,
                email=row.email,
                profile_image=row.profile_image,
            )
            for row in result.all()
        ]
    )


@router.get("/transactions", response_model=TransactionPage)
async def get_transactions(
    admin: AdminUser,
    db: Db,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    payment_method: str | None = Query(None, alias="paymentMethod"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
) -> TransactionPage:
    """Transaction history, newest first. ``endDate`` includes the whole day."""
    tz = local_timezone()
    filters: list[ColumnElement[bool]] = created_within(
        datetime.combine(start_date, time.min, tzinfo=tz) if start_date else None,
        datetime.combine(end_date, time.max, tzinfo=tz) if end_date else None,
    )
    if payment_method:
        filters.append(Earning.payment_method == payment_method)

    total = await db.scalar(select(func.count(Earning.id)).where(*filters)) or 0
    result = await db.execute(
        select(Earning)
        .where(*filters)
        .order_by(Earning.created_at.desc(), Earning.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    earnings = result.scalars().all()

    items = []
    for earning in earnings:
        booking = earning.booking
        items.append(
            TransactionResponse(
                id=earning.id,
                date=earning.created_at,
                booking_id=booking.id if booking else None,
                check_in=booking.check_in if booking else None,
                check_out=booking.check_out if booking else None,
                guest=person(booking.guest) if booking and booking.guest else None,
                host=person(earning.host),
                total_amount=float(earning.amount),
                platform_fee=float(earning.platform_fee),
                host_payout=float(earning.host_payout),
                payment_method=earning.payment_method,
                payment_method_label=payment_method_label(earning.payment_method),
                status=earning.status,
            )
        )

    return TransactionPage(
        count=len(items),
        total=total,
        total_pages=math.ceil(total / limit),
        current_page=page,
        data=items,
    )


@router.get("/host-payout/{host_id}", response_model=Envelope[HostPayoutResponse])
async def get_host_payout(admin: AdminUser, db: Db, host_id: int) -> Envelope[HostPayoutResponse]:
    """A host's payout totals and the earnings ready to be paid."""
    details = await get_host_payout_details(db, host_id)

    available = []
    for earning in details.available_earnings:
        booking = earning.booking
        available.append(
            AvailableEarning(
                id=earning.id,
                amount=float(earning.host_payout),
                platform_fee=float(earning.platform_fee),
                total_amount=float(earning.amount),
                date=earning.created_at,
                booking=PayoutBooking(
                    id=booking.id,
                    check_in=booking.check_in,
                    check_out=booking.check_out,
                    price=float(booking.total_price),
                    room_title=booking.room.title if booking.room else "Room",
                )
                if booking
                else None,
            )
        )

    return Envelope(
        data=HostPayoutResponse(
            host_id=details.host.id,
            host_name=details.host.full_name,
            email=details.host.email,
            summary=PayoutSummary(
                available=float(details.totals["available"]),
                pending=float(details.totals["pending"]),
                paid_out=float(details.totals["paid_out"]),
            ),
            available_earnings=available,
        )
    )


@router.post("/process-payout", response_model=Envelope[PayoutResponse])
@limiter.limit("10/minute")
async def post_process_payout(
    request: Request,
    body: ProcessPayoutRequest,
    admin: AdminUser,
    db: Db,
) -> Envelope[PayoutResponse]:
    """Mark a host's available earnings as paid out."""
    logger.info("payout_requested", admin_id=admin.id, host_id=body.host_id)

    result = await process_host_payout(
        db,
        host_id=body.host_id,
        earning_ids=body.earning_ids,
        method=body.method,
        reference=body.reference,
    )

    return Envelope(
        message=(
            f"Successfully processed payout of {format_currency(result.total_amount)} "
            f"for {result.earnings_count} earnings"
        ),
        data=PayoutResponse(
            payout_id=result.payout_id,
            host_id=result.host.id,
            host_name=result.host.full_name,
            total_amount=float(result.total_amount),
            earnings_count=result.earnings_count,
            method=result.method,
            paid_at=result.paid_at,
        ),
    )
