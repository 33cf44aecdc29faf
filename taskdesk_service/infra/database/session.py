"""Process-wide async engine and session factory.

``DATABASE_URL`` (or the ``DB_*`` parts) selects PostgreSQL via psycopg; with
nothing configured a local SQLite file is used so the CLI works out of the box.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from taskdesk_service.core.settings import get_app_settings, get_db_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

LOCAL_SQLITE_URL = "sqlite+aiosqlite:///./taskdesk.db"


def _database_url() -> str:
    settings = get_db_settings()
    return settings.get_sqlalchemy_url() if settings.is_configured else LOCAL_SQLITE_URL


def _engine_kwargs() -> dict:
    settings = get_db_settings()
    kwargs = settings.sqlalchemy_engine_kwargs()
    kwargs["echo"] = settings.echo or get_app_settings().debug
    return kwargs


engine = create_async_engine(_database_url(), **_engine_kwargs())

# Committed rows stay readable; the pipeline reports on reminders after commit.
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return AsyncSessionLocal


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """One session, closed on exit. Callers commit explicitly."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_database() -> None:
    """Run ``SELECT 1`` so a bad URL fails at startup rather than on the first trigger."""
    backend = engine.url.get_backend_name()
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database unreachable", extra={"backend": backend, "error": str(e)})
        raise
    logger.info("Database reachable", extra={"backend": backend})


async def close_database() -> None:
    try:
        await engine.dispose()
    except Exception as e:
        logger.exception("Engine dispose failed", extra={"error": str(e)})
    else:
        logger.info("Database pool closed")
