"""Scheduler trigger and health endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from taskdesk_service.core.database import utcnow
from taskdesk_service.core.dependencies import SchedulerKeyDep, SessionDep
from taskdesk_service.core.settings import (
    get_ai_settings,
    get_app_settings,
    get_pipeline_settings,
    get_push_settings,
)
from taskdesk_service.features.digests.models import DigestType
from taskdesk_service.features.pipeline.dependencies import DigestPipelineServiceDep, PipelineServiceDep
from taskdesk_service.features.pipeline.health import digest_health, reminder_health
from taskdesk_service.features.pipeline.schemas import (
    DigestGenerateResponse,
    DigestHealthResponse,
    ReminderHealthResponse,
    ReminderProcessResponse,
)

router = APIRouter(tags=["pipeline"])


@router.post(
    "/reminders/process",
    response_model=ReminderProcessResponse,
    dependencies=[SchedulerKeyDep],
    summary="Deliver due reminders",
    description="Called by the external scheduler. Requires `X-API-Key`.",
    responses={
        401: {"description": "Invalid API key"},
        503: {"description": "API key or push credentials not configured"},
    },
)
async def process_reminders(service: PipelineServiceDep) -> ReminderProcessResponse:
    return await service.process_reminders()


@router.get(
    "/reminders/process",
    response_model=ReminderHealthResponse,
    dependencies=[SchedulerKeyDep],
    summary="Reminder pipeline health",
    description="Counts pending and soon-due reminders. Requires `X-API-Key`. No side effects.",
)
async def reminders_health(session: SessionDep) -> ReminderHealthResponse:
    return await reminder_health(session, settings=get_pipeline_settings(), now=utcnow())


@router.post(
    "/digests/generate",
    response_model=DigestGenerateResponse,
    dependencies=[SchedulerKeyDep],
    summary="Generate digests for all active users",
    description=(
        "Called by the external scheduler at each digest slot. Users with a digest "
        "of the same type inside the freshness window are not regenerated."
    ),
    responses={
        401: {"description": "Invalid API key"},
        503: {"description": "API key missing, or push credentials missing while digest notices are on"},
    },
)
async def generate_digests(
    service: DigestPipelineServiceDep,
    digest_type: Annotated[DigestType | None, Query(alias="type")] = None,
) -> DigestGenerateResponse:
    return await service.generate_digests(digest_type)


@router.get(
    "/digests/generate",
    response_model=DigestHealthResponse,
    dependencies=[SchedulerKeyDep],
    summary="Digest pipeline health",
    description="Counts today's digests and reports collaborator configuration. Requires `X-API-Key`.",
)
async def digests_health(session: SessionDep) -> DigestHealthResponse:
    return await digest_health(
        session,
        tz=get_app_settings().tzinfo,
        ai_configured=get_ai_settings().is_configured,
        push_configured=get_push_settings().is_configured,
        now=utcnow(),
    )
