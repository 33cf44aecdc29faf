"""Task queries used by the digest assembler and reminder management."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import case, select

from taskdesk_service.core.database import BaseRepository
from taskdesk_service.features.tasks.models import PRIORITY_RANK, Task

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession

_priority_rank = case(PRIORITY_RANK, value=Task.priority, else_=0)


class TaskRepository(BaseRepository[Task]):
    """Read-side queries over tasks.

    All boundaries are half-open ``[start, end)`` instants in UTC; callers
    compute them from the platform's local calendar day.
    """

    def __init__(self) -> None:
        super().__init__(Task)

    async def find_overdue(self, session: AsyncSession, *, before: datetime) -> Sequence[Task]:
        """Incomplete tasks due before ``before``, oldest due date first."""
        stmt = (
            select(Task)
            .where(
                Task.completed.is_(False),
                Task.due_date.is_not(None),
                Task.due_date < before,
            )
            .order_by(Task.due_date.asc())
        )
        result = await session.execute(stmt)
        tasks = result.scalars().all()
        self._lazy.debug(lambda: f"db.find_overdue(before={before}): {len(tasks)} tasks")
        return tasks

    async def find_due_between(
        self,
        session: AsyncSession,
        *,
        start: datetime,
        end: datetime,
    ) -> Sequence[Task]:
        """Incomplete tasks due in ``[start, end)``, highest priority first."""
        stmt = (
            select(Task)
            .where(
                Task.completed.is_(False),
                Task.due_date >= start,
                Task.due_date < end,
            )
            .order_by(_priority_rank.desc(), Task.due_date.asc())
        )
        result = await session.execute(stmt)
        tasks = result.scalars().all()
        self._lazy.debug(lambda: f"db.find_due_between({start}, {end}): {len(tasks)} tasks")
        return tasks

    async def find_completed_between(
        self,
        session: AsyncSession,
        *,
        start: datetime,
        end: datetime,
    ) -> Sequence[Task]:
        """Tasks completed (last updated) in ``[start, end)``, most recent first."""
        stmt = (
            select(Task)
            .where(
                Task.completed.is_(True),
                Task.updated_at >= start,
                Task.updated_at < end,
            )
            .order_by(Task.updated_at.desc())
        )
        result = await session.execute(stmt)
        tasks = result.scalars().all()
        self._lazy.debug(lambda: f"db.find_completed_between({start}, {end}): {len(tasks)} tasks")
        return tasks


_task_repository: TaskRepository | None = None


def get_task_repository() -> TaskRepository:
    """Get the shared TaskRepository instance."""
    global _task_repository
    if _task_repository is None:
        _task_repository = TaskRepository()
    return _task_repository
