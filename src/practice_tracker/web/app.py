"""
FastAPI application for the Practice Tracker dashboard.

PURPOSE: Build the app and run it under uvicorn.
AI CONTEXT: Routes and their dependency factories live in routes.py.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from ..__version__ import __version__
from ..config import Config
from ..storage import StorageManager
from .routes import router

__all__ = ["create_app", "run_dashboard"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:  # noqa: ARG001
    """
    Report the settings that decide what the dashboard shows.

    Business context: "Where did my sessions go" and "why is my 00:30
    session on the wrong day" are answered by the storage directory and
    the timezone, so both are logged once at startup together with a timer
    left running by the CLI.

    Args:
        app: The FastAPI application instance (provided by FastAPI).

    Yields:
        None while the server handles requests.
    """
    storage = StorageManager()
    tz = Config.get_timezone()
    cutoff = Config.get_visual_start_date()

    logger.info("Practice Tracker dashboard starting (v%s)", __version__)
    logger.info("Reading practice data from %s", storage.storage_dir)
    logger.info("Day boundaries in %s", tz.key if tz else "system local time")
    if cutoff:
        logger.info("Long-range charts start no earlier than %s", cutoff.isoformat())

    timer = storage.load_timer()
    if timer.get("started_at"):
        logger.info("Timer running since %s", timer["started_at"])

    yield
    logger.info("Practice Tracker dashboard shutting down")


def create_app() -> FastAPI:
    """
    Create the dashboard application.

    Tests build a fresh app per test and replace the dependency
    factories from routes.py via app.dependency_overrides.

    Returns:
        FastAPI app serving the HTML page and htmx partials, PNG charts
        under /charts and the JSON API under /api.

    Example:
        >>> from fastapi.testclient import TestClient
        >>> TestClient(create_app()).get('/api/analytics').status_code
        200
    """
    app = FastAPI(
        title="Practice Tracker",
        description="Lifetime daily-average dashboard for practice sessions",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


def run_dashboard(
    host: str = "127.0.0.1",
    port: int = 8000,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """
    Serve the dashboard until interrupted.

    Args:
        host: Interface to bind. '0.0.0.0' exposes the dashboard to the
            local network, e.g. for a tablet on the music stand.
        port: TCP port.
        reload: Restart on code changes (development only).
        log_level: Uvicorn log level.

    Raises:
        OSError: If the port is already in use.
    """
    uvicorn.run(
        "practice_tracker.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )
