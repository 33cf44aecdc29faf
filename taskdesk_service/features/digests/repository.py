"""Digest persistence, freshness lookups and read tracking."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select, update

from taskdesk_service.core.database import BaseRepository
from taskdesk_service.features.digests.models import Digest

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from taskdesk_service.features.digests.models import DigestType


class DigestRepository(BaseRepository[Digest]):
    """Repository for Digest model."""

    def __init__(self) -> None:
        super().__init__(Digest)

    async def find_fresh(
        self,
        session: AsyncSession,
        user_id: UUID,
        *,
        since: datetime,
        digest_type: DigestType | None = None,
    ) -> Digest | None:
        """Most recent digest generated at or after ``since``.

        With ``digest_type`` only digests of that type count.
        """
        stmt = select(Digest).where(Digest.user_id == user_id, Digest.generated_at >= since)
        if digest_type is not None:
            stmt = stmt.where(Digest.digest_type == digest_type)
        stmt = stmt.order_by(Digest.generated_at.desc()).limit(1)
        result = await session.execute(stmt)
        digest = result.scalars().first()
        self._lazy.debug(
            lambda: f"db.find_fresh(user={user_id}, since={since}, type={digest_type}) -> "
            f"{digest.id if digest else None}",
        )
        return digest

    async def mark_read(self, session: AsyncSession, digest_id: UUID, now: datetime) -> bool:
        """Set ``read_at`` if it is still null.

        Returns True only for the call that actually set it.
        """
        result = await session.execute(
            update(Digest)
            .where(Digest.id == digest_id, Digest.read_at.is_(None))
            .values(read_at=now)
            .execution_options(synchronize_session=False),
        )
        return (result.rowcount or 0) == 1

    async def count_generated_between(
        self,
        session: AsyncSession,
        digest_type: DigestType,
        *,
        start: datetime,
        end: datetime,
    ) -> int:
        stmt = select(func.count()).select_from(Digest).where(
            Digest.digest_type == digest_type,
            Digest.generated_at >= start,
            Digest.generated_at < end,
        )
        return (await session.execute(stmt)).scalar_one()


_digest_repository: DigestRepository | None = None


def get_digest_repository() -> DigestRepository:
    """Get DigestRepository instance."""
    global _digest_repository
    if _digest_repository is None:
        _digest_repository = DigestRepository()
    return _digest_repository
