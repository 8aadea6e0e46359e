"""FastAPI dashboard application factory with JSON API and WebSocket hub."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from ta_scanner.dashboard.routes import api, ws
from ta_scanner.dashboard.routes.ws import DashboardHub


def create_dashboard_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI dashboard application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to inject startup/shutdown logic.

    Returns:
        FastAPI application with the API router under /api and the /ws hub.
        Route handlers expect ``orchestrator`` and ``scanner`` on app.state.
    """
    app = FastAPI(
        title="Technical Analysis Scanner",
        lifespan=lifespan,
    )

    app.state.hub = DashboardHub()
    app.state.scan_task = None

    app.include_router(api.router, prefix="/api")
    app.include_router(ws.router)

    return app
