"""Build the configured LLM provider from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from taskdesk_service.infra.ai.providers.anthropic_provider import AnthropicProvider

if TYPE_CHECKING:
    from taskdesk_service.core.settings.ai import AISettings
    from taskdesk_service.infra.ai.providers.base import LLMProvider


def get_llm_provider(settings: AISettings | None = None) -> LLMProvider:
    """Create the summarization provider selected by AI_PROVIDER.

    Raises:
        ProviderNotConfiguredError: If the provider has no API key.
    """
    if settings is None:
        from taskdesk_service.core.settings import get_ai_settings

        settings = get_ai_settings()

    llm = settings.get_llm_settings()
    return AnthropicProvider(
        api_key=llm.api_key.get_secret_value() if llm.api_key else None,
        model_name=llm.model,
        timeout=llm.timeout,
        max_retries=llm.max_retries,
        max_tokens=llm.max_tokens,
    )
