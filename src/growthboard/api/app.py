"""FastAPI application factory.

The api layer validates inputs, delegates to the workspace and returns
payloads for the UI. Domain errors are mapped to HTTP status codes here
so routes can stay thin.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from growthboard.config import Settings, load_settings
from growthboard.core.errors import LockedRecordError, NotFoundError, ValidationError
from growthboard.store.base import ExperimentStore
from growthboard.store.memory import InMemoryStore
from growthboard.store.sql import SqlStore
from growthboard.workspace import Workspace

logger = logging.getLogger(__name__)

DEFAULT_OWNER = "Me"


def get_workspace(request: Request) -> Workspace:
    """Dependency returning the application's workspace."""
    return request.app.state.workspace


def get_owner(x_user_name: str | None = Header(default=None)) -> str:
    """Dependency returning the caller's display name.

    Identity is supplied by the hosting layer as an opaque header;
    guests fall back to "Me".
    """
    if x_user_name and x_user_name.strip():
        return x_user_name.strip()
    return DEFAULT_OWNER


def build_store(settings: Settings) -> ExperimentStore:
    """Pick the store for the configured mode."""
    if settings.is_mock:
        logger.info("Starting in mock mode with demo data")
        return InMemoryStore.with_demo_data()
    logger.info(f"Starting in live mode with database {settings.db_path}")
    return SqlStore(settings.db_path)


def create_app(
    store: ExperimentStore | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        store: Store to back the workspace. Defaults to the one selected
            by settings.mode.
        settings: Runtime settings. Defaults to load_settings().

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = load_settings()
    if store is None:
        store = build_store(settings)

    app = FastAPI(
        title="Growthboard API",
        description="Growth experiment board, vault and analytics",
        version="0.1.0",
    )

    workspace = Workspace(store, owner=DEFAULT_OWNER, settings=settings)
    workspace.load()
    app.state.workspace = workspace
    app.state.settings = settings

    # Add CORS middleware for UI access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFoundError)
    def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(LockedRecordError)
    def locked_handler(request: Request, exc: LockedRecordError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    # Include routes
    from growthboard.api.routes import analytics, boards, experiments

    app.include_router(boards.router, prefix="/api")
    app.include_router(experiments.router, prefix="/api")
    app.include_router(analytics.router, prefix="/api")

    # Health check endpoint
    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "mode": settings.mode,
            "pending_writes": workspace.pending_writes,
        }

    return app


# Default app instance
app = create_app()
