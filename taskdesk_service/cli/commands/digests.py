"""Digest pipeline commands."""

import sys

import click

from taskdesk_service.cli.commands._services import digest_pipeline_service
from taskdesk_service.cli.utils import coro, error, header, info, success, warning
from taskdesk_service.core.database import utcnow
from taskdesk_service.core.settings import get_app_settings, get_pipeline_settings
from taskdesk_service.features.digests.models import DigestType
from taskdesk_service.features.digests.windows import digest_type_for, next_scheduled_slot


@click.group(name="digests")
def digests() -> None:
    """Daily digest commands."""


@digests.command()
@click.option(
    "--type",
    "digest_type",
    type=click.Choice([t.value for t in DigestType]),
    default=None,
    help="Digest slot (default: morning before local noon, afternoon after)",
)
@coro
async def generate(digest_type: str | None) -> None:
    """Generate or reuse a digest for every active user."""
    service = digest_pipeline_service()
    info("Generating digests...")
    try:
        result = await service.generate_digests(DigestType(digest_type) if digest_type else None)
    except Exception as e:
        error(f"Digest batch failed: {e}")
        sys.exit(1)

    header(f"{result.digest_type.capitalize()} digests")
    for entry in result.results:
        line = f"  {entry.user_name}: {entry.status}"
        if entry.notified:
            line += " (notified)"
        if entry.error:
            line += f" ({entry.error})"
        click.echo(line)

    click.echo(
        f"\n  Generated {result.generated}, reused {result.reused}, "
        f"notified {result.notified}, failed {result.failed} in {result.duration_ms} ms",
    )
    if result.failed:
        warning(f"{result.failed} user(s) without a digest")
    else:
        success("Digest batch complete")


@digests.command(name="next-slot")
def next_slot() -> None:
    """Print the next scheduled digest time in local time."""
    tz = get_app_settings().tzinfo
    settings = get_pipeline_settings()
    now = utcnow()
    slot = next_scheduled_slot(
        now,
        tz,
        morning_hour=settings.morning_hour,
        afternoon_hour=settings.afternoon_hour,
    )
    click.echo(f"{digest_type_for(slot, tz)} digest at {slot.isoformat()}")
