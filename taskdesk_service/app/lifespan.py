"""Startup and shutdown for the API process."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from taskdesk_service.core.settings import (
    get_ai_settings,
    get_app_settings,
    get_db_settings,
    get_logging_settings,
    get_push_settings,
)
from taskdesk_service.infra.logging import setup_logging, shutdown

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def _check_database(required: bool) -> None:
    from taskdesk_service.infra.database import init_database

    try:
        await init_database()
    except Exception as e:
        if required:
            logger.exception("Refusing to start without a database", extra={"error": str(e)})
            raise
        # Trigger requests will fail until the database comes back.
        logger.warning("Starting without a database", extra={"error": str(e)})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging and check the database; on exit, let started units finish.

    Pipeline units are shielded from request cancellation, so a trigger whose
    client disconnected may still be delivering when shutdown begins.
    """
    from taskdesk_service.features.pipeline.service import drain_inflight
    from taskdesk_service.infra.database import close_database

    settings = get_app_settings()
    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Starting %s",
        settings.service_name,
        extra={
            "environment": settings.environment,
            "timezone": settings.timezone,
            "ai_configured": get_ai_settings().is_configured,
            "push_configured": get_push_settings().is_configured,
        },
    )
    await _check_database(get_db_settings().startup_require_db)

    try:
        yield
    finally:
        drained = await drain_inflight()
        logger.info("Stopping %s", settings.service_name, extra={"drained_units": drained})
        await close_database()
        shutdown()
