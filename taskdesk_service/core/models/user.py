"""Platform user model."""

from __future__ import annotations

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from taskdesk_service.core.database import UUIDTimestampedBase


class User(UUIDTimestampedBase):
    """A team member who owns tasks and receives notifications.

    Tasks reference users by ``name`` (the platform's display identity), while
    reminders, digests and push subscriptions reference ``id``.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True, comment="Display name used on tasks",
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False, comment="Inactive users get no digests",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name!r})>"
