"""Pure reduction of settled transactions into a revenue summary."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from openspace.services.revenue.periods import to_local

ZERO = Decimal("0")


@dataclass(frozen=True)
class Transaction:
    """Read-only snapshot of one settled booking payment."""

    id: int
    amount: Decimal
    platform_fee: Decimal
    payment_method: str
    created_at: datetime
    host_id: int


@dataclass(frozen=True)
class RevenueTotals:
    total_fees: Decimal = ZERO
    total_bookings: int = 0
    avg_fee: Decimal = ZERO


@dataclass(frozen=True)
class PaymentMethodRevenue:
    method: str
    total_fees: Decimal
    count: int

    @property
    def avg_per_booking(self) -> Decimal:
        return self.total_fees / self.count if self.count else ZERO


@dataclass(frozen=True)
class MonthlyRevenue:
    year: int
    month: int
    revenue: Decimal


@dataclass(frozen=True)
class RevenueSummary:
    summary: RevenueTotals = field(default_factory=RevenueTotals)
    by_payment_method: list[PaymentMethodRevenue] = field(default_factory=list)
    monthly_trend: list[MonthlyRevenue] = field(default_factory=list)


def aggregate(transactions: Iterable[Transaction]) -> RevenueSummary:
    """Summarize transactions in a single pass.

    Payment methods keep the order in which they are first seen. Monthly
    buckets are keyed on the local (year, month) of ``created_at`` and are
    emitted in calendar order. An empty input yields a zero-valued summary.
    """
    total_fees = ZERO
    total_bookings = 0
    methods: dict[str, tuple[Decimal, int]] = {}
    months: dict[tuple[int, int], Decimal] = {}

    for tx in transactions:
        total_fees += tx.platform_fee
        total_bookings += 1

        fees, count = methods.get(tx.payment_method, (ZERO, 0))
        methods[tx.payment_method] = (fees + tx.platform_fee, count + 1)

        settled = to_local(tx.created_at)
        key = (settled.year, settled.month)
        months[key] = months.get(key, ZERO) + tx.platform_fee

    avg_fee = total_fees / total_bookings if total_bookings else ZERO

    return RevenueSummary(
        summary=RevenueTotals(
            total_fees=total_fees,
            total_bookings=total_bookings,
            avg_fee=avg_fee,
        ),
        by_payment_method=[
            PaymentMethodRevenue(method=method, total_fees=fees, count=count)
            for method, (fees, count) in methods.items()
        ],
        monthly_trend=[
            MonthlyRevenue(year=year, month=month, revenue=months[(year, month)])
            for year, month in sorted(months)
        ],
    )
