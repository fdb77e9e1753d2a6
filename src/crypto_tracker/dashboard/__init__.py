"""Server-rendered dashboard -- list and detail pages over the market data layer."""

from crypto_tracker.dashboard.app import create_dashboard_app

__all__ = ["create_dashboard_app"]
