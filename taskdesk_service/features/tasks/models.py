"""Task model.

Tasks are owned by the wider platform; this service reads them and keeps the
legacy ``reminder_at`` / ``reminder_sent`` mirror up to date.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from sqlalchemy import Boolean, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from taskdesk_service.core.database import UTCDateTime, UUIDTimestampedBase


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


PRIORITY_RANK: dict[str, int] = {
    TaskPriority.URGENT: 4,
    TaskPriority.HIGH: 3,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 1,
}


class Task(UUIDTimestampedBase):
    """A unit of work on the team board.

    ``assigned_to``, ``created_by`` and ``updated_by`` hold user names.
    ``updated_at`` doubles as the completion instant for completed tasks.
    """

    __tablename__ = "tasks"

    text: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(
        String(20), default=TaskPriority.MEDIUM, nullable=False,
    )
    status: Mapped[str] = mapped_column(String(30), default="todo", nullable=False)
    due_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    assigned_to: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Legacy single-reminder mirror
    reminder_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(),
        nullable=True,
        comment="Earliest pending reminder (legacy single-reminder consumers)",
    )
    reminder_sent: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Legacy flag: reminder_at has been delivered",
    )

    __table_args__ = (
        Index("ix_tasks_completed_due_date", "completed", "due_date"),
    )

    @property
    def priority_rank(self) -> int:
        return PRIORITY_RANK.get(self.priority, 0)

    def is_related_to(self, user_name: str) -> bool:
        """Assigned to, created by, or open to anyone (unassigned)."""
        return (
            self.assigned_to is None
            or self.assigned_to == user_name
            or self.created_by == user_name
        )

    def can_be_managed_by(self, user_name: str) -> bool:
        """Creator, assignee or last editor."""
        return user_name in {self.created_by, self.assigned_to, self.updated_by}

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, text={self.text[:30]!r}, completed={self.completed})>"
