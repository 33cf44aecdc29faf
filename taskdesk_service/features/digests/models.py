"""Digest model."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Date, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from taskdesk_service.core.database import UTCDateTime, UUIDTimestampedBase


class DigestType(StrEnum):
    MORNING = "morning"
    AFTERNOON = "afternoon"


class Digest(UUIDTimestampedBase):
    """A generated briefing for one user.

    ``payload`` holds the camelCase JSON form of ``DigestPayload``.
    """

    __tablename__ = "digests"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    user_name: Mapped[str] = mapped_column(String(100), nullable=False)
    digest_type: Mapped[str] = mapped_column(String(20), nullable=False)
    digest_date: Mapped[date] = mapped_column(
        Date, nullable=False, comment="Local calendar date the digest covers",
    )
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSONB().with_variant(JSON(), "sqlite"), nullable=False,
    )
    generated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    __table_args__ = (
        Index("ix_digests_user_generated_at", "user_id", "generated_at"),
    )

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def __repr__(self) -> str:
        return f"<Digest(id={self.id}, user={self.user_name!r}, type={self.digest_type})>"
