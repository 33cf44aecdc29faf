"""LLM providers used to summarize digests."""

from __future__ import annotations

from .anthropic_provider import AnthropicProvider
from .base import (
    BaseProvider,
    LLMMessage,
    LLMProvider,
    LLMResponse,
    ProviderAuthenticationError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from .factory import get_llm_provider

__all__ = [
    "AnthropicProvider",
    "BaseProvider",
    "LLMMessage",
    "LLMProvider",
    "LLMResponse",
    "ProviderAuthenticationError",
    "ProviderError",
    "ProviderNotConfiguredError",
    "ProviderRateLimitError",
    "ProviderTimeoutError",
    "get_llm_provider",
]
