"""Reminder pipeline commands."""

import sys

import click

from taskdesk_service.cli.commands._services import pipeline_service
from taskdesk_service.cli.utils import coro, error, field, header, info, success, warning
from taskdesk_service.core.database import utcnow
from taskdesk_service.core.settings import get_pipeline_settings
from taskdesk_service.features.pipeline.health import reminder_health
from taskdesk_service.infra.database.session import get_session_factory


@click.group(name="reminders")
def reminders() -> None:
    """Reminder delivery commands."""


@reminders.command()
@coro
async def process() -> None:
    """Deliver every pending reminder whose trigger time has passed."""
    service = pipeline_service()
    info("Scanning for due reminders...")
    try:
        result = await service.process_reminders()
    except Exception as e:
        error(f"Reminder scan failed: {e}")
        sys.exit(1)

    header("Reminder batch")
    field("Due", result.processed)
    field("Sent", result.sent)
    field("Failed", result.failed)
    field("Cancelled", result.cancelled)
    field("Duration", f"{result.duration_ms} ms")
    if result.failed:
        warning(f"{result.failed} reminder(s) left pending for the next scan")
    else:
        success("Reminder batch complete")


@reminders.command()
@coro
async def pending() -> None:
    """Show how many reminders are pending and how many fire soon."""
    settings = get_pipeline_settings()
    async with get_session_factory()() as session:
        health = await reminder_health(session, settings=settings, now=utcnow())

    header("Pending reminders")
    field("Pending", health.pending_reminders, width=16)
    field(f"Due in {settings.health_due_soon_minutes} min", health.reminders_due_soon, width=16)
