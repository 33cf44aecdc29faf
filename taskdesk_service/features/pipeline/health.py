"""Read-only health snapshots for the trigger endpoints."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from taskdesk_service.features.digests.models import DigestType
from taskdesk_service.features.digests.repository import get_digest_repository
from taskdesk_service.features.digests.windows import day_window
from taskdesk_service.features.pipeline.schemas import (
    DigestHealthResponse,
    ReminderHealthResponse,
)
from taskdesk_service.features.reminders.repository import get_reminder_repository

if TYPE_CHECKING:
    from datetime import datetime
    from zoneinfo import ZoneInfo

    from sqlalchemy.ext.asyncio import AsyncSession

    from taskdesk_service.core.settings import PipelineSettings


async def reminder_health(
    session: AsyncSession,
    *,
    settings: PipelineSettings,
    now: datetime,
) -> ReminderHealthResponse:
    reminders = get_reminder_repository()
    cutoff = now + timedelta(minutes=settings.health_due_soon_minutes)
    return ReminderHealthResponse(
        pending_reminders=await reminders.count_pending(session),
        reminders_due_soon=await reminders.count_pending_before(session, cutoff),
        timestamp=now,
    )


async def digest_health(
    session: AsyncSession,
    *,
    tz: ZoneInfo,
    ai_configured: bool,
    push_configured: bool,
    now: datetime,
) -> DigestHealthResponse:
    digests = get_digest_repository()
    window = day_window(now, tz)
    counts = {
        digest_type: await digests.count_generated_between(
            session, digest_type, start=window.today_start, end=window.today_end,
        )
        for digest_type in DigestType
    }
    return DigestHealthResponse(
        morning_count=counts[DigestType.MORNING],
        afternoon_count=counts[DigestType.AFTERNOON],
        ai_configured=ai_configured,
        push_configured=push_configured,
        timestamp=now,
    )
