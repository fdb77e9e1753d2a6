"""FastAPI application factory for the server-rendered dashboard."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates

from crypto_tracker.dashboard.routes import pages

TEMPLATES_DIR = Path(__file__).parent / "templates"

# (upper bound in seconds, unit length in seconds, suffix), smallest first
_AGE_UNITS = (
    (3600, 60, "m"),
    (86400, 3600, "h"),
)


def _time_ago(updated_at: float | None) -> str:
    """Render a Unix timestamp (seconds) as "just now", "5m ago", "2h ago" or "3d ago"."""
    if updated_at is None:
        return "never"
    age = time.time() - updated_at
    if age < 60:
        return "just now"
    for limit, unit, suffix in _AGE_UNITS:
        if age < limit:
            return f"{int(age // unit)}{suffix} ago"
    return f"{int(age // 86400)}d ago"


def create_dashboard_app(lifespan: Any = None) -> FastAPI:
    """Build the dashboard app with its templates and page routes.

    Args:
        lifespan: Optional async context manager for startup/shutdown. main.py
                  passes one that closes the upstream API clients.

    Returns:
        FastAPI app serving ``/`` and ``/crypto/{id}``. Before serving, the
        caller sets ``app.state.sessions`` (a SessionRegistry) and
        ``app.state.currency`` (the display currency code).
    """
    app = FastAPI(
        title="Crypto Tracker",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["time_ago"] = _time_ago
    app.state.templates = templates

    app.include_router(pages.router)

    return app
