"""
FastAPI application for the Calendar Hours API.

PURPOSE: Application factory and server runner.
AI CONTEXT: One ViewState lives on app.state so the projector cache survives across requests.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from ..__version__ import __version__
from ..storage import StorageManager
from ..view_state import ViewState, view_state_from_storage
from .routes import router

__all__ = ["create_app", "run_server"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """
    Log startup and shutdown of the API server.

    Args:
        app: The FastAPI application instance (provided by FastAPI).

    Yields:
        None. Control returns to FastAPI to handle requests.
    """
    calendars = app.state.view_state.store.calendars or ()
    logger.info("Calendar Hours API starting (v%s, %d calendar(s))", __version__, len(calendars))
    yield
    logger.info("Calendar Hours API shutting down")


def create_app(view_state: ViewState | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        view_state: State to serve. Default: one restored from the default
            StorageManager, with every stored event snapshot loaded.

    Returns:
        FastAPI application with the /api routes registered and OpenAPI
        documentation at /docs.

    Example:
        >>> from fastapi.testclient import TestClient
        >>> client = TestClient(create_app(view_state))
        >>> client.get('/api/summary').status_code
        200
    """
    app = FastAPI(
        title="Calendar Hours",
        description="Hours spent in calendar events per day, week, month and year",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.view_state = view_state or view_state_from_storage(StorageManager())
    app.include_router(router)
    return app


def run_server(
    host: str = "127.0.0.1",
    port: int = 8000,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """
    Launch the Calendar Hours API server.

    Blocks until the server is stopped (Ctrl+C).

    Args:
        host: Interface to bind. '127.0.0.1' (default) for local-only access.
        port: TCP port. Default 8000.
        reload: Auto-reload on code changes, for development only.
        log_level: Uvicorn verbosity ('critical' ... 'trace').

    Raises:
        OSError: If the port is already in use or host is invalid.
    """
    uvicorn.run(
        "calendar_hours.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )
