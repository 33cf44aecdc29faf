"""Notification payload schemas."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskdesk_service.core.database import utcnow


class NotificationType(StrEnum):
    """Kind of notification; clients vary urgency and interaction by it."""

    DUE_SOON = "due_soon"
    DUE_TODAY = "due_today"
    OVERDUE = "overdue"
    DIGEST_READY = "digest_ready"


_HIGH_URGENCY = frozenset({NotificationType.DUE_SOON, NotificationType.OVERDUE})
_REQUIRES_INTERACTION = frozenset({NotificationType.DUE_TODAY, NotificationType.OVERDUE})


class PushPayload(BaseModel):
    """JSON document handed to the browser's service worker.

    Serialized with camelCase keys (``taskId``, ``requireInteraction``).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str = Field(..., max_length=120)
    body: str = Field(..., max_length=500)
    tag: str = Field(..., description="Client-side grouping/deduplication key")
    type: NotificationType
    url: str = "/"
    task_id: UUID | None = None
    digest_id: UUID | None = None
    require_interaction: bool = False
    timestamp: datetime = Field(default_factory=utcnow)

    @classmethod
    def for_type(cls, notification_type: NotificationType, **fields: object) -> PushPayload:
        """Build a payload with interaction behavior derived from the type."""
        fields.setdefault("require_interaction", notification_type in _REQUIRES_INTERACTION)
        return cls(type=notification_type, **fields)

    @property
    def urgency(self) -> str:
        """Web Push ``Urgency`` header value."""
        return "high" if self.type in _HIGH_URGENCY else "normal"

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class PushSubscriptionKeys(BaseModel):
    p256dh: str = Field(..., min_length=1, max_length=255)
    auth: str = Field(..., min_length=1, max_length=255)


class PushSubscriptionCreate(BaseModel):
    """Browser ``PushSubscription.toJSON()`` output."""

    endpoint: str = Field(..., min_length=1, pattern=r"^https://")
    keys: PushSubscriptionKeys
    user_agent: str | None = Field(default=None, max_length=500)


class PushSubscriptionResponse(BaseModel):
    """A registered endpoint; the client keys are never echoed back."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    endpoint: str
    user_agent: str | None
    created_at: datetime
    updated_at: datetime
