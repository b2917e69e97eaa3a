"""Revenue dashboard state keyed by request generation."""

from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from openspace.services.revenue.periods import Period

logger = structlog.get_logger()


class RevenueSummarySource(Protocol):
    async def get_platform_revenue_summary(self, period: str = "all") -> dict[str, Any]: ...


@dataclass
class RevenueDashboardState:
    """Latest revenue summary shown on the dashboard.

    Every request takes a token from a monotonically increasing generation
    counter. A response is applied only while its token is still the
    current generation, so a slow response for an earlier period can never
    overwrite a newer one.
    """

    period: str = Period.MONTH.value
    generation: int = 0
    loading: bool = False
    summary: dict[str, Any] | None = None
    error: str | None = None
    retryable: bool = False

    def begin(self, period: str) -> int:
        """Start a request for ``period`` and return its token."""
        self.generation += 1
        self.period = period
        self.loading = True
        self.error = None
        self.retryable = False
        return self.generation

    def is_current(self, token: int) -> bool:
        return token == self.generation

    def apply(self, token: int, envelope: dict[str, Any]) -> bool:
        """Apply a response envelope; returns False if it was stale."""
        if not self.is_current(token):
            logger.debug("stale_revenue_response_dropped", token=token, current=self.generation)
            return False

        self.loading = False
        if envelope.get("success"):
            self.summary = envelope.get("data")
            self.error = None
            self.retryable = False
        else:
            # Never show the previous period's figures under the new period
            self.summary = None
            self.error = envelope.get("message") or "Failed to load revenue data"
            self.retryable = bool(envelope.get("retryable", False))
        return True


class RevenueDashboard:
    """Drives period changes through the state container."""

    def __init__(self, source: RevenueSummarySource, state: RevenueDashboardState | None = None) -> None:
        self.source = source
        self.state = state or RevenueDashboardState()

    async def change_period(self, period: str) -> bool:
        """Fetch ``period`` and apply it unless a newer request superseded it."""
        token = self.state.begin(period)
        envelope = await self.source.get_platform_revenue_summary(period)
        return self.state.apply(token, envelope)

    async def refresh(self) -> bool:
        return await self.change_period(self.state.period)
