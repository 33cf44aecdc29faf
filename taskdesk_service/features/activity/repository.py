"""Activity log queries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from taskdesk_service.core.database import BaseRepository
from taskdesk_service.features.activity.models import ActivityLogEntry

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession


class ActivityRepository(BaseRepository[ActivityLogEntry]):
    def __init__(self) -> None:
        super().__init__(ActivityLogEntry)

    async def find_since(
        self,
        session: AsyncSession,
        *,
        since: datetime,
        limit: int = 50,
    ) -> Sequence[ActivityLogEntry]:
        """Most recent entries at or after ``since``, newest first."""
        stmt = (
            select(ActivityLogEntry)
            .where(ActivityLogEntry.created_at >= since)
            .order_by(ActivityLogEntry.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        entries = result.scalars().all()
        self._lazy.debug(lambda: f"db.find_since({since}, limit={limit}): {len(entries)} entries")
        return entries


_activity_repository: ActivityRepository | None = None


def get_activity_repository() -> ActivityRepository:
    global _activity_repository
    if _activity_repository is None:
        _activity_repository = ActivityRepository()
    return _activity_repository
