"""
Main entrypoint for the Exercise Tracker API.

This module assembles the FastAPI application: logging, CORS, request
logging, error handlers, the versioned routers and the static front
page.  ``create_app`` builds and configures the app around a
``Settings`` instance, and an app built from the environment is
created at import time as ``app`` so it can be served directly::

    uvicorn exercise_tracker_api.app.main:app --reload

The store handle is created here and opened/closed by the lifespan.
If the store cannot be opened at startup the process exits instead of
serving requests without a store.
"""

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.db import Database
from .core.errors import StoreError, register_exception_handlers
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def open_database(db: Database) -> None:
    """Connect ``db`` or terminate the process with exit status 1."""
    try:
        db.connect()
    except StoreError as exc:
        logger.critical("Database connection error: %s", exc)
        raise SystemExit(1) from exc


def resolve_static_dir(static_dir: str) -> Path:
    path = Path(static_dir)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to build the app from.  Defaults to the settings
        read from the environment.

    Returns
    -------
    FastAPI
        A configured application whose ``state.db`` holds the store
        handle.
    """
    settings = settings or default_settings

    # Initialise logging before anything else so that startup messages
    # are formatted consistently.
    setup_logging(settings.log_level, settings.log_file)

    db = Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        open_database(db)
        logger.info("%s %s started", settings.project_name, settings.api_version)
        try:
            yield
        finally:
            db.close()

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.db = db
    app.state.settings = settings

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start_time
        logger.info(
            "%s %s -> %s (%.4fs)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # The public HTTP surface lives under /api (e.g. /api/users).
    app.include_router(v1_router, prefix="/api")

    # Mounted last so the API routes above take precedence over "/".
    static_path = resolve_static_dir(settings.static_dir)
    if static_path.is_dir():
        app.mount("/", StaticFiles(directory=str(static_path), html=True), name="static")
    else:
        logger.debug("Static directory %s not found; front page disabled", static_path)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
