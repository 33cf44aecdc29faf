"""Shared-secret check for scheduler-triggered endpoints."""

from __future__ import annotations

import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header

from taskdesk_service.core.exceptions import ServiceUnavailableException, UnauthorizedException
from taskdesk_service.core.settings import PipelineSettings, get_pipeline_settings

logger = logging.getLogger(__name__)


def get_pipeline_settings_dep() -> PipelineSettings:
    return get_pipeline_settings()


async def require_scheduler_key(
    settings: Annotated[PipelineSettings, Depends(get_pipeline_settings_dep)],
    x_api_key: Annotated[str | None, Header()] = None,
) -> None:
    """Reject the request unless ``X-API-Key`` matches ``PIPELINE_API_KEY``.

    Raises:
        ServiceUnavailableException: No key is configured on this deployment.
        UnauthorizedException: Key missing or wrong.
    """
    if settings.api_key is None or not settings.api_key.get_secret_value():
        logger.error("Scheduler trigger called but PIPELINE_API_KEY is not configured")
        raise ServiceUnavailableException(
            detail="Scheduler API key is not configured",
            type="trigger-not-configured",
        )
    expected = settings.api_key.get_secret_value()
    if not x_api_key or not hmac.compare_digest(x_api_key.encode(), expected.encode()):
        logger.warning("Rejected scheduler trigger with invalid API key")
        raise UnauthorizedException(detail="Invalid API key", type="invalid-api-key")


SchedulerKeyDep = Depends(require_scheduler_key)
