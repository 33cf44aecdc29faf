"""Base protocol and types for delivery channels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from uuid import UUID

    from taskdesk_service.features.notifications.schemas import PushPayload


@dataclass(frozen=True, slots=True)
class Notice:
    """Rendered notification addressed to one user.

    Each channel picks the representation it needs: push uses ``payload``,
    in-app uses ``text``.
    """

    recipient_id: UUID
    recipient_name: str
    payload: PushPayload
    text: str = ""
    related_task_id: UUID | None = None


@dataclass
class DeliveryResult:
    """Result of a channel delivery attempt.

    Attributes:
        success: Whether delivery succeeded
        response_time_ms: Time taken for delivery in milliseconds
        error_message: Error description if failed
        error_category: Error classification (push_rejected, no_subscriptions, ...)
        metadata: Channel-specific metadata
    """

    success: bool
    response_time_ms: int | None = None
    error_message: str | None = None
    error_category: str | None = None
    metadata: dict[str, str | int | bool] | None = None


class NotificationChannel(Protocol):
    """Protocol for delivery channels.

    ``send`` never raises for a delivery problem; failures come back as an
    unsuccessful ``DeliveryResult`` so sibling channels and other reminders
    are unaffected.
    """

    async def send(self, notice: Notice) -> DeliveryResult: ...

    def get_channel_name(self) -> str: ...
