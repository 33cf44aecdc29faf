"""Activity log model (read-only input to digests)."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from taskdesk_service.core.database import Base, UTCDateTime, UUIDPKMixin, utcnow


class ActivityLogEntry(Base, UUIDPKMixin):
    """One recorded team action such as ``task_completed``."""

    __tablename__ = "activity_log"

    action: Mapped[str] = mapped_column(String(50), nullable=False)
    user_name: Mapped[str] = mapped_column(String(100), nullable=False)
    task_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True,
    )
    task_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB().with_variant(JSON(), "sqlite"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utcnow, nullable=False,
    )

    __table_args__ = (Index("ix_activity_log_created_at", "created_at"),)
