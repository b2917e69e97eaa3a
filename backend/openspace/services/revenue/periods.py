"""Symbolic reporting periods and their concrete time ranges."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from openspace.core.config import settings
from openspace.core.exceptions import InvalidPeriod


class Period(str, Enum):
    """Named reporting window."""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


@dataclass(frozen=True)
class PeriodRange:
    """Inclusive time range; ``start`` is None for an unbounded window."""

    start: datetime | None
    end: datetime

    def contains(self, moment: datetime) -> bool:
        moment = as_utc(moment)
        if self.start is not None and moment < as_utc(self.start):
            return False
        return moment <= as_utc(self.end)


def local_timezone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def as_utc(moment: datetime) -> datetime:
    """Normalize to an aware UTC datetime. Naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def to_local(moment: datetime) -> datetime:
    """Convert to the reporting timezone. Naive values are taken as UTC."""
    return as_utc(moment).astimezone(local_timezone())


def resolve_range(period: str | Period, now: datetime | None = None) -> PeriodRange:
    """Map a period selector onto a concrete range ending at ``now``.

    Calendar boundaries (midnight, first of month, first of year) are taken
    in the configured local timezone.

    Raises:
        InvalidPeriod: if ``period`` is not a known selector.
    """
    try:
        selected = Period(period)
    except ValueError:
        raise InvalidPeriod(str(period)) from None

    end = to_local(now) if now is not None else datetime.now(local_timezone())
    midnight = end.replace(hour=0, minute=0, second=0, microsecond=0)

    if selected is Period.TODAY:
        start: datetime | None = midnight
    elif selected is Period.WEEK:
        start = end - timedelta(days=7)
    elif selected is Period.MONTH:
        start = midnight.replace(day=1)
    elif selected is Period.YEAR:
        start = midnight.replace(month=1, day=1)
    else:
        start = None

    return PeriodRange(start=start, end=end)
