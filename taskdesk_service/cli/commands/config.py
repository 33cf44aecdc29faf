"""Configuration checks."""

import sys

import click

from taskdesk_service.cli.utils import coro, error, header, info, success, warning
from taskdesk_service.core.exceptions import PushConfigurationError
from taskdesk_service.core.settings import (
    get_ai_settings,
    get_app_settings,
    get_db_settings,
    get_pipeline_settings,
    get_push_settings,
)
from taskdesk_service.infra.database.session import init_database
from taskdesk_service.infra.push import build_push_transport


@click.group(name="config")
def config() -> None:
    """Configuration management commands."""


@config.command()
@click.option(
    "--skip-db",
    is_flag=True,
    default=False,
    help="Do not try to connect to the database",
)
@coro
async def check(skip_db: bool) -> None:
    """Report database, summarization and push configuration.

    Exits with status 1 when push delivery is unusable, since reminders
    cannot be delivered without it.
    """
    app_settings = get_app_settings()
    info(f"Environment: {app_settings.environment}, timezone: {app_settings.timezone}")

    header("Database")
    db_settings = get_db_settings()
    info(f"  Backend: {'sqlite' if db_settings.is_sqlite else 'postgresql'}")
    if skip_db:
        info("  Connection check skipped")
    else:
        try:
            await init_database()
            success("  Database reachable")
        except Exception as e:
            warning(f"  Database unreachable: {e}")

    header("Summarization")
    ai_settings = get_ai_settings()
    if ai_settings.is_configured:
        success(f"  {ai_settings.provider} configured (model {ai_settings.model})")
    else:
        warning("  Not configured; digests cannot be generated")

    header("Scheduler trigger")
    if get_pipeline_settings().trigger_key_configured:
        success("  API key configured")
    else:
        warning("  PIPELINE_API_KEY unset; trigger endpoints answer 503")

    header("Push")
    try:
        build_push_transport(get_push_settings())
    except PushConfigurationError as e:
        error(f"  {e.detail}")
        sys.exit(1)
    success("  VAPID credentials configured")
