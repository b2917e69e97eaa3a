"""Turn revenue summary payloads into card and chart view data."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from openspace.services.revenue.formatting import (
    format_compact_currency,
    format_currency,
    month_name,
    payment_method_label,
)
from openspace.services.revenue.periods import Period

PERIOD_CAPTIONS: dict[Period, tuple[str, str]] = {
    Period.TODAY: ("Today's earnings", "Bookings today"),
    Period.WEEK: ("This week's earnings", "Bookings this week"),
    Period.MONTH: ("This month's earnings", "Bookings this month"),
    Period.YEAR: ("This year's earnings", "Bookings this year"),
    Period.ALL: ("All-time earnings", "All-time bookings"),
}


@dataclass(frozen=True)
class SummaryCard:
    title: str
    value: str
    caption: str


@dataclass(frozen=True)
class ChartPoint:
    name: str
    revenue: float


@dataclass(frozen=True)
class PaymentMethodRow:
    method: str
    label: str
    total: str
    count: int
    average: str
    share_pct: float


def period_caption(period: str) -> tuple[str, str]:
    """(earnings caption, bookings caption) for a period selector."""
    return PERIOD_CAPTIONS[Period(period)]


def build_summary_cards(data: dict[str, Any], period: str) -> list[SummaryCard]:
    summary = data["summary"]
    earnings_caption, bookings_caption = period_caption(period)
    return [
        SummaryCard("Platform Revenue", format_currency(summary["totalFees"]), earnings_caption),
        SummaryCard("Total Bookings", f"{summary['totalBookings']:,}", bookings_caption),
        SummaryCard("Average Fee", format_currency(summary["avgFee"]), "Per booking"),
    ]


def build_monthly_chart(data: dict[str, Any]) -> list[ChartPoint]:
    """Chart points in trend order; labels carry the year when it varies."""
    trend = data.get("monthlyTrend") or []
    years = {item.get("year") for item in trend}
    multi_year = len(years) > 1

    points = []
    for item in trend:
        name = month_name(item["month"])
        if multi_year:
            name = f"{name} {item['year']}"
        points.append(ChartPoint(name=name, revenue=float(item["revenue"])))
    return points


def chart_axis_tick(value: float) -> str:
    return format_compact_currency(value)


def build_payment_method_rows(data: dict[str, Any]) -> list[PaymentMethodRow]:
    total_fees = Decimal(str(data["summary"]["totalFees"]))
    rows = []
    for item in data.get("byPaymentMethod") or []:
        fees = Decimal(str(item["totalFees"]))
        count = item["count"]
        rows.append(
            PaymentMethodRow(
                method=item["method"],
                label=payment_method_label(item["method"]),
                total=format_currency(fees),
                count=count,
                average=format_currency(fees / count if count else 0),
                share_pct=round(float(fees / total_fees * 100), 1) if total_fees else 0.0,
            )
        )
    return rows
