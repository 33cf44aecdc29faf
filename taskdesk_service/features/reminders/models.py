"""Reminder model and its state vocabulary."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from taskdesk_service.core.database import UTCDateTime, UUIDTimestampedBase


class ReminderStatus(StrEnum):
    """Reminder lifecycle.

    ``pending -> sent`` when at least one channel delivered,
    ``pending -> cancelled`` on explicit cancel. Both targets are terminal.
    """

    PENDING = "pending"
    SENT = "sent"
    CANCELLED = "cancelled"


class ReminderChannel(StrEnum):
    PUSH = "push"
    IN_APP = "in_app"
    BOTH = "both"

    @property
    def uses_push(self) -> bool:
        return self in (ReminderChannel.PUSH, ReminderChannel.BOTH)

    @property
    def uses_in_app(self) -> bool:
        return self in (ReminderChannel.IN_APP, ReminderChannel.BOTH)


TERMINAL_STATUSES = frozenset({ReminderStatus.SENT, ReminderStatus.CANCELLED})


class Reminder(UUIDTimestampedBase):
    """A scheduled notification about a task.

    ``user_id`` is the explicit recipient; when it is null the task's
    assignee at dispatch time receives the reminder.
    """

    __tablename__ = "reminders"

    task_id: Mapped[UUID] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    user_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="Explicit recipient; null means the task's assignee at dispatch time",
    )
    trigger_time: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    channel: Mapped[str] = mapped_column(
        String(20), default=ReminderChannel.BOTH, nullable=False,
    )
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=ReminderStatus.PENDING, nullable=False,
    )
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    is_automatic: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False,
        comment="Created from the task due date; replaced when it changes",
    )

    # Delivery bookkeeping
    sent_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    attempt_count: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False, comment="Dispatches where every channel failed",
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_reminders_status_trigger_time", "status", "trigger_time"),
    )

    @property
    def is_pending(self) -> bool:
        return self.status == ReminderStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def channel_enum(self) -> ReminderChannel:
        return ReminderChannel(self.channel)

    def __repr__(self) -> str:
        return (
            f"<Reminder(id={self.id}, task_id={self.task_id}, "
            f"trigger_time={self.trigger_time}, status={self.status})>"
        )
