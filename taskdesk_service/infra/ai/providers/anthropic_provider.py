"""Digest summarization through the Anthropic Messages API."""

from __future__ import annotations

import logging
from typing import Any

import anthropic
from anthropic import AsyncAnthropic

from taskdesk_service.infra.ai.providers.base import (
    BaseProvider,
    LLMMessage,
    LLMResponse,
    ProviderAuthenticationError,
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)

logger = logging.getLogger(__name__)

# Most specific first; APIError is the SDK's catch-all.
_SDK_ERRORS: tuple[tuple[type[anthropic.APIError], type[ProviderError], str], ...] = (
    (anthropic.AuthenticationError, ProviderAuthenticationError, "Anthropic rejected the API key"),
    (anthropic.RateLimitError, ProviderRateLimitError, "Anthropic rate limit reached"),
    (anthropic.APITimeoutError, ProviderTimeoutError, "Anthropic request timed out"),
)


def _split_system(messages: list[LLMMessage]) -> tuple[str | None, list[dict[str, str]]]:
    """Messages API takes the system prompt as a separate parameter."""
    system: str | None = None
    turns: list[dict[str, str]] = []
    for message in messages:
        if message.role == "system":
            system = message.content
        else:
            turns.append({"role": message.role, "content": message.content})
    return system, turns


class AnthropicProvider(BaseProvider):
    def __init__(
        self,
        api_key: str | None = None,
        model_name: str = "claude-sonnet-4-20250514",
        timeout: int = 60,
        max_retries: int = 2,
        max_tokens: int = 1024,
    ) -> None:
        """
        Args:
            api_key: ``AI_ANTHROPIC_API_KEY``; required.
            model_name: Claude model id.
            timeout: Per-request timeout in seconds.
            max_retries: Retries performed inside the SDK client.
            max_tokens: Completion cap when the caller passes none.
        """
        super().__init__(api_key=api_key, timeout=timeout, max_retries=max_retries)
        self.model_name = model_name
        self.default_max_tokens = max_tokens
        self._validate_api_key()
        self.client = AsyncAnthropic(api_key=self.api_key, timeout=self.timeout, max_retries=self.max_retries)

    def get_provider_name(self) -> str:
        return "anthropic"

    def get_model_name(self) -> str:
        return self.model_name

    async def generate(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        system, turns = _split_system(messages)
        params: dict[str, Any] = {
            "model": self.model_name,
            "messages": turns,
            "temperature": temperature,
            "max_tokens": max_tokens or self.default_max_tokens,
            **kwargs,
        }
        if system:
            params["system"] = system

        try:
            response = await self.client.messages.create(**params)
        except anthropic.APIError as e:
            raise self._translate(e) from e

        usage = None
        if response.usage:
            usage = {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            }
        logger.debug(
            "Anthropic completion",
            extra={"model": response.model, "usage": usage, "stop_reason": response.stop_reason},
        )
        return LLMResponse(
            content="".join(block.text for block in response.content if block.type == "text"),
            model=response.model,
            usage=usage,
            finish_reason=response.stop_reason,
            provider_metadata={"id": response.id},
        )

    def _translate(self, error: anthropic.APIError) -> ProviderError:
        for sdk_type, error_type, message in _SDK_ERRORS:
            if isinstance(error, sdk_type):
                break
        else:
            error_type, message = ProviderError, f"Anthropic generation failed: {error}"
        return error_type(message, provider="anthropic", operation="llm_generation", original_error=error)
