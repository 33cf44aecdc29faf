"""Pytest configuration and shared fixtures.

Organization:
    - Environment: settings the application reads at import time
    - Database Fixtures: file-backed SQLite engine and session factory
    - Collaborator Fakes: push transport and summarization provider
    - Service Fixtures: dispatcher, digest and pipeline services
    - Application Fixtures: FastAPI app with overridden dependencies, HTTP client
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from tests.utils import SCHEDULER_KEY, FakeLLMProvider, FakePushTransport

if TYPE_CHECKING:
    from fastapi import FastAPI
    from sqlalchemy.ext.asyncio import AsyncEngine

    from taskdesk_service.core.settings import PipelineSettings
    from taskdesk_service.features.digests.service import DigestService
    from taskdesk_service.features.notifications.dispatcher import ReminderDispatcher
    from taskdesk_service.features.pipeline.service import PipelineService

# Ensure tests run without external infrastructure
os.environ.setdefault("APP_TIMEZONE", "America/Los_Angeles")
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DB_STARTUP_REQUIRE_DB", "false")
os.environ["PIPELINE_API_KEY"] = SCHEDULER_KEY
os.environ["AI_ANTHROPIC_API_KEY"] = ""
os.environ["PUSH_VAPID_PRIVATE_KEY"] = ""

TEST_TZ = ZoneInfo("America/Los_Angeles")


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def tz() -> ZoneInfo:
    """Platform time zone used throughout the tests."""
    return TEST_TZ


@pytest.fixture
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine]:
    """SQLite file database with every table created.

    A file (rather than ``:memory:``) lets the channels and pipeline units
    open their own connections and still see the same data.
    """
    from taskdesk_service.core import models  # noqa: F401
    from taskdesk_service.core.database import Base

    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'taskdesk.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Session for arranging data and inspecting results."""
    async with session_factory() as session:
        yield session


# ============================================================================
# Collaborator Fakes
# ============================================================================


@pytest.fixture
def push_transport() -> FakePushTransport:
    return FakePushTransport()


@pytest.fixture
def llm_provider() -> FakeLLMProvider:
    return FakeLLMProvider()


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def pipeline_settings() -> PipelineSettings:
    from taskdesk_service.core.settings import PipelineSettings

    return PipelineSettings(api_key=SCHEDULER_KEY, max_concurrency=4)


@pytest.fixture
def dispatcher(
    push_transport: FakePushTransport,
    session_factory: async_sessionmaker[AsyncSession],
    pipeline_settings: PipelineSettings,
    tz: ZoneInfo,
) -> ReminderDispatcher:
    from taskdesk_service.features.notifications.dispatcher import build_reminder_dispatcher

    return build_reminder_dispatcher(
        push_transport, session_factory, settings=pipeline_settings, tz=tz,
    )


@pytest.fixture
def digest_service(
    session_factory: async_sessionmaker[AsyncSession],
    llm_provider: FakeLLMProvider,
    pipeline_settings: PipelineSettings,
    tz: ZoneInfo,
) -> DigestService:
    from taskdesk_service.features.digests.assembler import DigestAssembler
    from taskdesk_service.features.digests.service import DigestService

    assembler = DigestAssembler(
        session_factory, llm_provider, settings=pipeline_settings, tz=tz,
    )
    return DigestService(session_factory, assembler, settings=pipeline_settings, tz=tz)


@pytest.fixture
def pipeline_service(
    session_factory: async_sessionmaker[AsyncSession],
    push_transport: FakePushTransport,
    dispatcher: ReminderDispatcher,
    digest_service: DigestService,
    pipeline_settings: PipelineSettings,
    tz: ZoneInfo,
) -> PipelineService:
    from taskdesk_service.features.notifications.channels import PushChannel
    from taskdesk_service.features.pipeline.service import PipelineService

    return PipelineService(
        session_factory,
        dispatcher,
        digest_service,
        PushChannel(push_transport, session_factory),
        settings=pipeline_settings,
        tz=tz,
    )


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(
    session_factory: async_sessionmaker[AsyncSession],
    push_transport: FakePushTransport,
    llm_provider: FakeLLMProvider,
) -> FastAPI:
    """FastAPI application wired to the test database and fakes."""
    from taskdesk_service.app.main import create_app
    from taskdesk_service.core.dependencies import get_db_session, get_session_factory_dep
    from taskdesk_service.features.pipeline.dependencies import (
        get_digest_notice_transport,
        get_llm_provider_dep,
        get_push_transport_dep,
    )

    application = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db_session] = override_session
    application.dependency_overrides[get_session_factory_dep] = lambda: session_factory
    application.dependency_overrides[get_push_transport_dep] = lambda: push_transport
    application.dependency_overrides[get_digest_notice_transport] = lambda: push_transport
    application.dependency_overrides[get_llm_provider_dep] = lambda: llm_provider
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client for the application.

    Example:
        async def test_pending(client):
            response = await client.get("/api/v1/reminders/process", headers={"X-API-Key": SCHEDULER_KEY})
            assert response.status_code == 200
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
