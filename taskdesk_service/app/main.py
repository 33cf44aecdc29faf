"""ASGI entry point: ``uvicorn taskdesk_service.app.main:app``."""

from __future__ import annotations

from fastapi import FastAPI

from taskdesk_service.app.exception_handlers import configure_exception_handlers
from taskdesk_service.app.lifespan import lifespan
from taskdesk_service.app.middleware import configure_middleware
from taskdesk_service.app.router import setup_routers
from taskdesk_service.core.settings import get_app_settings


def create_app() -> FastAPI:
    """Build the reminders, digests and pipeline-trigger API.

    Tests call this directly and override dependencies on the result.
    """
    settings = get_app_settings()
    app = FastAPI(
        title=settings.title,
        description=settings.description,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    configure_exception_handlers(app)
    configure_middleware(app)
    setup_routers(app, settings)
    return app


app = create_app()
