"""Display formatting for currency amounts, months and payment methods."""

from decimal import ROUND_HALF_UP, Decimal

from openspace.core.config import settings
from openspace.core.exceptions import InvalidMonth
from openspace.models.booking import PaymentMethod

CENTS = Decimal("0.01")

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

PAYMENT_METHOD_LABELS: dict[PaymentMethod, str] = {
    PaymentMethod.PROPERTY: "Pay at Property",
    PaymentMethod.CARD: "Credit Card",
    PaymentMethod.GCASH: "GCash",
    PaymentMethod.MAYA: "Maya",
}


def _to_decimal(amount: Decimal | float | int) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def format_currency(amount: Decimal | float | int, symbol: str | None = None) -> str:
    """Render an amount as ``₱1,234.50``: grouped thousands, two decimals."""
    symbol = settings.CURRENCY_SYMBOL if symbol is None else symbol
    value = _to_decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_compact_currency(amount: Decimal | float | int, symbol: str | None = None) -> str:
    """Render an axis tick in thousands, e.g. ``₱1.5k``."""
    symbol = settings.CURRENCY_SYMBOL if symbol is None else symbol
    thousands = (_to_decimal(amount) / 1000).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    sign = "-" if thousands < 0 else ""
    text = f"{abs(thousands):f}".removesuffix(".0")
    return f"{sign}{symbol}{text}k"


def month_name(month: int) -> str:
    """Return the English name of a 1-based month number.

    Raises:
        InvalidMonth: if ``month`` is not an integer in 1..12.
    """
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidMonth(month)
    return MONTH_NAMES[month - 1]


def payment_method_label(code: str) -> str:
    """Human label for a payment method code; unknown codes pass through."""
    try:
        method = PaymentMethod(code)
    except ValueError:
        return code
    return PAYMENT_METHOD_LABELS[method]
