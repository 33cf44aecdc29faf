"""Pipeline wiring for commands that run outside the web application."""

import sys

from taskdesk_service.cli.utils import error
from taskdesk_service.core.exceptions import PushConfigurationError
from taskdesk_service.core.settings import get_pipeline_settings
from taskdesk_service.features.pipeline.dependencies import (
    build_digest_pipeline_service,
    build_digest_service,
    build_pipeline_service,
    get_llm_provider_dep,
)
from taskdesk_service.features.pipeline.service import PipelineService
from taskdesk_service.infra.database.session import get_session_factory
from taskdesk_service.infra.push import PushTransport, build_push_transport


def _push_transport() -> PushTransport:
    try:
        return build_push_transport()
    except PushConfigurationError as e:
        error(e.detail)
        sys.exit(1)


def pipeline_service() -> PipelineService:
    """Build the reminder pipeline, exiting with status 1 if push is unusable."""
    transport = _push_transport()
    session_factory = get_session_factory()
    digest_service = build_digest_service(session_factory, get_llm_provider_dep())
    return build_pipeline_service(session_factory, transport, digest_service)


def digest_pipeline_service() -> PipelineService:
    """Build the digest pipeline; push is only required when digest-ready notices are on."""
    settings = get_pipeline_settings()
    transport = _push_transport() if settings.notify_digest_ready else None
    session_factory = get_session_factory()
    digest_service = build_digest_service(session_factory, get_llm_provider_dep())
    return build_digest_pipeline_service(session_factory, transport, digest_service, settings)
