"""SQLAlchemy models for the notifications feature."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from taskdesk_service.core.database import UTCDateTime, UUIDTimestampedBase

SYSTEM_SENDER = "System"


class PushSubscription(UUIDTimestampedBase):
    """A browser Web Push endpoint registered by a user.

    One user may hold several subscriptions (one per device/browser).
    Endpoints answering 404/410 are removed by the push channel.
    """

    __tablename__ = "push_subscriptions"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    endpoint: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    p256dh: Mapped[str] = mapped_column(String(255), nullable=False, comment="Client public key")
    auth: Mapped[str] = mapped_column(String(255), nullable=False, comment="Client auth secret")
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def to_subscription_info(self) -> dict[str, object]:
        """Shape expected by pywebpush."""
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}


class InAppMessage(UUIDTimestampedBase):
    """A message shown in the recipient's in-app message feed."""

    __tablename__ = "in_app_messages"

    recipient_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    recipient_name: Mapped[str] = mapped_column(String(100), nullable=False)
    sender: Mapped[str] = mapped_column(String(100), default=SYSTEM_SENDER, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    related_task_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True,
    )
    read_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    __table_args__ = (
        Index("ix_in_app_messages_recipient_created", "recipient_id", "created_at"),
    )
