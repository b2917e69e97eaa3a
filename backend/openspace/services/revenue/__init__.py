"""Platform revenue aggregation."""

from openspace.services.revenue.aggregator import (
    MonthlyRevenue,
    PaymentMethodRevenue,
    RevenueSummary,
    RevenueTotals,
    Transaction,
    aggregate,
)
from openspace.services.revenue.formatting import (
    format_compact_currency,
    format_currency,
    month_name,
    payment_method_label,
)
from openspace.services.revenue.periods import Period, PeriodRange, resolve_range
from openspace.services.revenue.service import get_platform_revenue_summary

__all__ = [
    "MonthlyRevenue",
    "PaymentMethodRevenue",
    "Period",
    "PeriodRange",
    "RevenueSummary",
    "RevenueTotals",
    "Transaction",
    "aggregate",
    "format_compact_currency",
    "format_currency",
    "get_platform_revenue_summary",
    "month_name",
    "payment_method_label",
    "resolve_range",
]
