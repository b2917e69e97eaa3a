"""Thin async client for the admin earnings API used by the dashboard."""

from datetime import date
from types import TracebackType
from typing import Any, Self

import httpx
import structlog

from openspace.core.config import settings

logger = structlog.get_logger()

Envelope = dict[str, Any]

EARNINGS_PATH = "/api/admin/earnings"


class AdminEarningsClient:
    """Calls the admin earnings endpoints and always returns an envelope.

    Transport failures and timeouts are folded into
    ``{"success": False, "message": ..., "retryable": True}`` so callers
    only ever branch on ``success``.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.DASHBOARD_API_URL,
            headers=headers,
            timeout=httpx.Timeout(timeout or settings.DASHBOARD_REQUEST_TIMEOUT),
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, what: str, **kwargs: Any) -> Envelope:
        try:
            response = await self._client.request(method, f"{EARNINGS_PATH}{path}", **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("dashboard_request_failed", path=path, error=str(exc))
            return {
                "success": False,
                "message": f"Network error while fetching {what}",
                "retryable": True,
            }

        try:
            payload = response.json()
        except ValueError:
            logger.warning("dashboard_invalid_response", path=path, status_code=response.status_code)
            return {
                "success": False,
                "message": f"Unexpected response while fetching {what}",
                "retryable": response.status_code >= 500,
            }

        if not isinstance(payload, dict) or "success" not in payload:
            return {
                "success": False,
                "message": f"Unexpected response while fetching {what}",
                "retryable": False,
            }
        return payload

    async def get_dashboard_summary(self) -> Envelope:
        return await self._request("GET", "/dashboard-summary", "dashboard summary")

    async def get_platform_revenue_summary(self, period: str = "all") -> Envelope:
        """Revenue summary for ``today``, ``week``, ``month``, ``year`` or ``all``."""
        return await self._request(
            "GET", "/revenue-summary", "revenue summary", params={"period": period}
        )

    async def get_top_hosts(self, limit: int = 10, period: str = "all") -> Envelope:
        return await self._request(
            "GET", "/top-hosts", "top hosts", params={"limit": limit, "period": period}
        )

    async def get_transaction_history(
        self,
        page: int = 1,
        limit: int = 20,
        payment_method: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Envelope:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if payment_method:
            params["paymentMethod"] = payment_method
        if start_date:
            params["startDate"] = start_date.isoformat()
        if end_date:
            params["endDate"] = end_date.isoformat()
        return await self._request("GET", "/transactions", "transaction history", params=params)

    async def get_host_payout_details(self, host_id: int) -> Envelope:
        return await self._request("GET", f"/host-payout/{host_id}", "host payout details")

    async def process_host_payout(
        self,
        host_id: int,
        earning_ids: list[int],
        method: str,
        reference: str | None = None,
    ) -> Envelope:
        body: dict[str, Any] = {"hostId": host_id, "earningIds": earning_ids, "method": method}
        if reference:
            body["reference"] = reference
        return await self._request("POST", "/process-payout", "host payout", json=body)
