"""Admin revenue dashboard: API client, request state and view data."""

from openspace.dashboard.client import AdminEarningsClient
from openspace.dashboard.state import RevenueDashboard, RevenueDashboardState

__all__ = ["AdminEarningsClient", "RevenueDashboard", "RevenueDashboardState"]
