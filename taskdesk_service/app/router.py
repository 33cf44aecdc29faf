"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from taskdesk_service.core.settings import get_app_settings
from taskdesk_service.features.digests.router import router as digests_router
from taskdesk_service.features.notifications.router import router as notifications_router
from taskdesk_service.features.pipeline.router import router as pipeline_router
from taskdesk_service.features.reminders.router import router as reminders_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from taskdesk_service.core.settings.app import AppSettings

logger = logging.getLogger(__name__)

metrics_router = APIRouter()


@metrics_router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus scrape endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def setup_routers(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Register all feature routers with the application."""
    app_settings = app_settings or get_app_settings()
    api_prefix = app_settings.api_prefix

    # No prefix: scraped at /metrics
    app.include_router(metrics_router, tags=["observability"])

    app.include_router(pipeline_router, prefix=api_prefix)
    app.include_router(reminders_router, prefix=api_prefix)
    app.include_router(digests_router, prefix=api_prefix)
    app.include_router(notifications_router, prefix=api_prefix)

    logger.debug("Routers registered", extra={"api_prefix": api_prefix})
