"""Web Push transport backed by pywebpush.

The transport receives an explicit ``VapidConfig`` at construction; there is
no module-level client. Building the config raises ``PushConfigurationError``
when credentials are absent, so a deployment without VAPID keys fails on
first use instead of silently dropping push notifications.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Protocol

import requests
from pywebpush import WebPushException, webpush

from taskdesk_service.core.exceptions import PushConfigurationError

if TYPE_CHECKING:
    from taskdesk_service.core.settings.push import PushSettings

logger = logging.getLogger(__name__)

Urgency = Literal["very-low", "low", "normal", "high"]

GONE_STATUS_CODES = frozenset({404, 410})


@dataclass(frozen=True, slots=True)
class VapidConfig:
    """Credentials and defaults for signing Web Push requests."""

    public_key: str
    private_key: str
    subject: str
    ttl_seconds: int = 86400
    timeout: float = 10.0

    def __post_init__(self) -> None:
        missing = [
            name
            for name, value in (
                ("vapid_public_key", self.public_key),
                ("vapid_private_key", self.private_key),
                ("vapid_subject", self.subject),
            )
            if not value
        ]
        if missing:
            raise PushConfigurationError(missing)
        if not self.subject.startswith(("mailto:", "https:")):
            msg = "VAPID subject must be a mailto: or https: URI"
            raise ValueError(msg)

    @classmethod
    def from_settings(cls, settings: PushSettings) -> VapidConfig:
        """Build the config from PUSH_* settings.

        Raises:
            PushConfigurationError: If any credential is missing.
        """
        private_key = (
            settings.vapid_private_key.get_secret_value() if settings.vapid_private_key else ""
        )
        return cls(
            public_key=settings.vapid_public_key or "",
            private_key=private_key,
            subject=settings.vapid_subject or "",
            ttl_seconds=settings.ttl_seconds,
            timeout=settings.timeout,
        )


@dataclass(frozen=True, slots=True)
class PushSendResult:
    """Outcome of one push request to one subscription endpoint."""

    ok: bool
    status_code: int | None = None
    error: str | None = None
    response_time_ms: float | None = None

    @property
    def subscription_gone(self) -> bool:
        """The push service reports the endpoint no longer exists."""
        return self.status_code in GONE_STATUS_CODES


class PushTransport(Protocol):
    """Anything that can deliver an encoded payload to one subscription."""

    async def deliver(
        self,
        subscription_info: dict[str, Any],
        payload: str,
        *,
        urgency: Urgency = "normal",
    ) -> PushSendResult: ...


class WebPushTransport:
    """Deliver payloads through the browser push services via pywebpush.

    pywebpush is synchronous (requests), so each call runs in a worker thread.
    """

    def __init__(self, config: VapidConfig) -> None:
        self._config = config

    @property
    def config(self) -> VapidConfig:
        return self._config

    async def deliver(
        self,
        subscription_info: dict[str, Any],
        payload: str,
        *,
        urgency: Urgency = "normal",
    ) -> PushSendResult:
        """Send one payload; every failure comes back as ``ok=False``, never raised."""
        start = time.time()
        endpoint = _endpoint_host(subscription_info)
        try:
            response = await asyncio.to_thread(
                webpush,
                subscription_info=subscription_info,
                data=payload,
                vapid_private_key=self._config.private_key,
                # pywebpush mutates the claims dict (adds aud/exp)
                vapid_claims={"sub": self._config.subject},
                ttl=self._config.ttl_seconds,
                timeout=self._config.timeout,
                headers={"Urgency": urgency},
            )
        except WebPushException as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            logger.warning(
                "Push service rejected notification",
                extra={"status_code": status_code, "endpoint": endpoint, "error": str(exc)},
            )
            return PushSendResult(ok=False, status_code=status_code, error=str(exc), response_time_ms=_ms_since(start))
        except requests.RequestException as exc:
            logger.warning(
                "Push service unreachable",
                extra={"endpoint": endpoint, "error": str(exc), "error_type": type(exc).__name__},
            )
            return PushSendResult(ok=False, error=f"{type(exc).__name__}: {exc}", response_time_ms=_ms_since(start))
        except Exception as exc:
            logger.exception("Push send failed", extra={"endpoint": endpoint})
            return PushSendResult(ok=False, error=str(exc) or type(exc).__name__, response_time_ms=_ms_since(start))

        return PushSendResult(
            ok=True,
            status_code=getattr(response, "status_code", None),
            response_time_ms=_ms_since(start),
        )


def _ms_since(start: float) -> float:
    return (time.time() - start) * 1000


def _endpoint_host(subscription_info: dict[str, Any]) -> str:
    endpoint = str(subscription_info.get("endpoint", ""))
    return endpoint.split("/")[2] if endpoint.count("/") >= 2 else endpoint


def build_push_transport(settings: PushSettings | None = None) -> WebPushTransport:
    """Create a transport from PUSH_* settings.

    Raises:
        PushConfigurationError: If VAPID credentials are missing.
    """
    if settings is None:
        from taskdesk_service.core.settings import get_push_settings

        settings = get_push_settings()
    return WebPushTransport(VapidConfig.from_settings(settings))
