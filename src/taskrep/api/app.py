"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from taskrep import __version__
from taskrep.api.routes import statuses_router, transitions_router, workflow_router
from taskrep.config import Settings
from taskrep.config import settings as default_settings
from taskrep.errors import TaskRepError
from taskrep.logging import configure_logging
from taskrep.store import TransitionStore, load_workflow_file

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Seed the store from the configured workflow file on startup."""
    settings: Settings = app.state.settings
    store: TransitionStore = app.state.store
    path = settings.transitions_file

    if path is not None and not await store.list_transitions():
        log.info("Seeding workflow from file", path=str(path))
        try:
            await store.load_document(load_workflow_file(path))
        except (OSError, TaskRepError) as e:
            log.error("Failed to seed workflow", path=str(path), error=str(e))
            raise
    yield


def create_api_app(
    store: TransitionStore | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Store to serve; a fresh empty one by default
        settings: Settings to use; the environment-loaded ones by default

    Returns:
        Configured FastAPI app with all routes.
    """
    settings = settings or default_settings
    configure_logging(level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(
        title="TaskRep Workflow API",
        description="Task statuses, transitions and workflow sequencing",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store or TransitionStore(case_sensitive=settings.case_sensitive_match)

    app.include_router(statuses_router)
    app.include_router(transitions_router)
    app.include_router(workflow_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """API root - basic info."""
        return {
            "name": "TaskRep Workflow API",
            "version": __version__,
            "docs": "/docs",
        }

    return app
