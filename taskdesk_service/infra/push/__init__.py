"""Web Push delivery."""

from __future__ import annotations

from .webpush import (
    PushSendResult,
    PushTransport,
    Urgency,
    VapidConfig,
    WebPushTransport,
    build_push_transport,
)

__all__ = [
    "PushSendResult",
    "PushTransport",
    "Urgency",
    "VapidConfig",
    "WebPushTransport",
    "build_push_transport",
]
