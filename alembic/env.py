"""Alembic environment for the taskdesk schema.

Migrations run on the async engine. The URL comes from ``DATABASE_URL`` /
``DB_*`` when set, otherwise from ``sqlalchemy.url`` in alembic.ini. SQLite
always uses batch mode since it cannot ALTER most constraints in place.
"""

from __future__ import annotations

import asyncio
import logging
from logging.config import fileConfig
from typing import TYPE_CHECKING, Any

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from taskdesk_service.core import models  # noqa: F401
from taskdesk_service.core.database.base import Base
from taskdesk_service.core.settings import get_db_settings

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

_settings = get_db_settings()
if _settings.is_configured:
    config.set_main_option("sqlalchemy.url", _settings.get_sqlalchemy_url())

_SYSTEM_SCHEMAS = {"pg_catalog", "information_schema"}


def _include_object(obj: Any, name: str | None, type_: str, reflected: bool, compare_to: Any) -> bool:
    if type_ == "table" and name == "alembic_version":
        return False
    return getattr(obj, "schema", None) not in _SYSTEM_SCHEMAS


def _skip_empty_revision(ctx: Any, revision: Any, directives: list[Any]) -> None:
    if not getattr(config.cmd_opts, "autogenerate", False) or not directives:
        return
    upgrade_ops = directives[0].upgrade_ops
    if upgrade_ops is not None and upgrade_ops.is_empty():
        directives[:] = []
        logger.info("Models match the database; no revision written")


def _configure(**kwargs: Any) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        include_object=_include_object,
        **kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure(
        connection=connection,
        render_as_batch=connection.dialect.name == "sqlite",
        process_revision_directives=_skip_empty_revision,
    )


async def _run_online() -> None:
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    asyncio.run(_run_online())
