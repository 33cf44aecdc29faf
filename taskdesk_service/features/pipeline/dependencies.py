"""Builders for the pipeline collaborators.

Routes depend on these so tests can swap the push transport and the
summarization provider through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskdesk_service.core.dependencies import SessionFactoryDep, get_pipeline_settings_dep
from taskdesk_service.core.settings import (
    PipelineSettings,
    get_ai_settings,
    get_app_settings,
    get_pipeline_settings,
    get_push_settings,
)
from taskdesk_service.features.digests.assembler import DigestAssembler
from taskdesk_service.features.digests.service import DigestService
from taskdesk_service.features.notifications.channels import PushChannel
from taskdesk_service.features.notifications.dispatcher import build_reminder_dispatcher
from taskdesk_service.features.pipeline.service import PipelineService
from taskdesk_service.infra.ai.providers import LLMProvider, get_llm_provider
from taskdesk_service.infra.push import PushTransport, build_push_transport


@lru_cache(maxsize=1)
def get_llm_provider_dep() -> LLMProvider | None:
    """Summarization provider, or None when AI_ANTHROPIC_API_KEY is unset."""
    ai_settings = get_ai_settings()
    if not ai_settings.is_configured:
        return None
    return get_llm_provider(ai_settings)


@lru_cache(maxsize=1)
def get_push_transport_dep() -> PushTransport:
    """Web Push transport.

    Raises:
        PushConfigurationError: VAPID credentials missing (rendered as 503).
    """
    return build_push_transport(get_push_settings())


def build_digest_service(
    session_factory: async_sessionmaker[AsyncSession],
    llm_provider: LLMProvider | None,
) -> DigestService:
    """Digest service whose assembler is absent when no provider is configured."""
    settings = get_pipeline_settings()
    tz = get_app_settings().tzinfo
    assembler = None
    if llm_provider is not None:
        ai_settings = get_ai_settings()
        assembler = DigestAssembler(
            session_factory,
            llm_provider,
            settings=settings,
            tz=tz,
            temperature=ai_settings.temperature,
            max_tokens=ai_settings.max_tokens,
        )
    return DigestService(session_factory, assembler, settings=settings, tz=tz)


def build_pipeline_service(
    session_factory: async_sessionmaker[AsyncSession],
    transport: PushTransport,
    digest_service: DigestService,
) -> PipelineService:
    settings = get_pipeline_settings()
    tz = get_app_settings().tzinfo
    return PipelineService(
        session_factory,
        build_reminder_dispatcher(transport, session_factory, settings=settings, tz=tz),
        digest_service,
        PushChannel(transport, session_factory),
        settings=settings,
        tz=tz,
    )


def build_digest_pipeline_service(
    session_factory: async_sessionmaker[AsyncSession],
    transport: PushTransport | None,
    digest_service: DigestService,
    settings: PipelineSettings | None = None,
) -> PipelineService:
    """Pipeline for digest batches only; ``transport`` is None when notices are off."""
    settings = settings or get_pipeline_settings()
    return PipelineService(
        session_factory,
        None,
        digest_service,
        PushChannel(transport, session_factory) if transport is not None else None,
        settings=settings,
        tz=get_app_settings().tzinfo,
    )


def get_digest_notice_transport(
    settings: Annotated[PipelineSettings, Depends(get_pipeline_settings_dep)],
) -> PushTransport | None:
    """Push transport for digest-ready notices, or None when they are disabled.

    Raises:
        PushConfigurationError: Notices are enabled but VAPID credentials are missing.
    """
    if not settings.notify_digest_ready:
        return None
    return get_push_transport_dep()


def get_digest_service(
    session_factory: SessionFactoryDep,
    llm_provider: Annotated[LLMProvider | None, Depends(get_llm_provider_dep)],
) -> DigestService:
    return build_digest_service(session_factory, llm_provider)


def get_pipeline_service(
    session_factory: SessionFactoryDep,
    transport: Annotated[PushTransport, Depends(get_push_transport_dep)],
    digest_service: Annotated[DigestService, Depends(get_digest_service)],
) -> PipelineService:
    return build_pipeline_service(session_factory, transport, digest_service)


PipelineServiceDep = Annotated[PipelineService, Depends(get_pipeline_service)]


def get_digest_pipeline_service(
    session_factory: SessionFactoryDep,
    transport: Annotated[PushTransport | None, Depends(get_digest_notice_transport)],
    digest_service: Annotated[DigestService, Depends(get_digest_service)],
    settings: Annotated[PipelineSettings, Depends(get_pipeline_settings_dep)],
) -> PipelineService:
    return build_digest_pipeline_service(session_factory, transport, digest_service, settings)


DigestPipelineServiceDep = Annotated[PipelineService, Depends(get_digest_pipeline_service)]
