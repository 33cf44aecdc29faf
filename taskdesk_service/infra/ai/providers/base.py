"""Text-generation provider contract used by the digest assembler.

The assembler depends only on ``LLMProvider``; tests substitute a fake that
returns canned text or raises a ``ProviderError``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel


class LLMMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class LLMResponse(BaseModel):
    """Generated text plus accounting returned by the provider."""

    content: str
    model: str
    usage: dict[str, int] | None = None
    finish_reason: str | None = None
    provider_metadata: dict[str, Any] | None = None


@runtime_checkable
class LLMProvider(Protocol):
    """Anything that turns a conversation into one completion."""

    async def generate(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Raises ``ProviderError`` (or a subclass) on any failure."""
        ...

    def get_model_name(self) -> str: ...


class BaseProvider(ABC):
    """Credentials and client limits shared by concrete providers."""

    def __init__(self, api_key: str | None = None, timeout: int = 120, max_retries: int = 3) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries

    @abstractmethod
    def get_provider_name(self) -> str: ...

    def _validate_api_key(self) -> None:
        if not self.api_key:
            raise ProviderNotConfiguredError(
                f"{self.get_provider_name()} requires an API key",
                provider=self.get_provider_name(),
                operation="init",
            )


class ProviderError(Exception):
    """The provider could not produce a completion.

    Attributes:
        provider: Provider name, e.g. ``anthropic``
        operation: What was being attempted (``init``, ``llm_generation``)
        original_error: SDK exception, when there was one
    """

    def __init__(
        self,
        message: str,
        provider: str,
        operation: str,
        original_error: Exception | None = None,
    ) -> None:
        self.provider = provider
        self.operation = operation
        self.original_error = original_error
        super().__init__(message)


class ProviderNotConfiguredError(ProviderError):
    """No API key for the selected provider."""


class ProviderAuthenticationError(ProviderError):
    """The API key was rejected."""


class ProviderRateLimitError(ProviderError):
    pass


class ProviderTimeoutError(ProviderError):
    pass
