"""Reminder data access: the due-reminder scanner and the legacy task mirror."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, func, or_, select

from taskdesk_service.core.database import BaseRepository
from taskdesk_service.features.reminders.models import Reminder, ReminderStatus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from taskdesk_service.features.tasks.models import Task


class ReminderRepository(BaseRepository[Reminder]):
    """Repository for Reminder model."""

    def __init__(self) -> None:
        super().__init__(Reminder)

    async def find_due(self, session: AsyncSession, now: datetime) -> Sequence[Reminder]:
        """Scan for pending reminders whose trigger time has passed.

        Pure read. Sent and cancelled reminders never match. Ordered by
        trigger time, oldest first, so batch logs read chronologically.
        """
        stmt = (
            select(Reminder)
            .where(
                Reminder.status == ReminderStatus.PENDING,
                Reminder.trigger_time <= now,
            )
            .order_by(Reminder.trigger_time, Reminder.id)
        )
        result = await session.execute(stmt)
        reminders = result.scalars().all()
        self._lazy.debug(lambda: f"db.find_due(now={now.isoformat()}) -> {len(reminders)} due")
        return reminders

    async def count_pending(self, session: AsyncSession) -> int:
        stmt = select(func.count()).select_from(Reminder).where(
            Reminder.status == ReminderStatus.PENDING,
        )
        return (await session.execute(stmt)).scalar_one()

    async def count_pending_before(self, session: AsyncSession, cutoff: datetime) -> int:
        """Pending reminders that trigger at or before ``cutoff``."""
        stmt = select(func.count()).select_from(Reminder).where(
            Reminder.status == ReminderStatus.PENDING,
            Reminder.trigger_time <= cutoff,
        )
        return (await session.execute(stmt)).scalar_one()

    async def list_filtered(
        self,
        session: AsyncSession,
        *,
        task_id: UUID | None = None,
        user_id: UUID | None = None,
        status: ReminderStatus | None = None,
        actor_id: UUID | None = None,
        actor_name: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Sequence[Reminder]:
        """List reminders ordered by trigger time.

        Without ``task_id``/``user_id`` the actor's own reminders are returned:
        those addressed to them explicitly or created by them.
        """
        stmt = select(Reminder)
        if task_id is not None:
            stmt = stmt.where(Reminder.task_id == task_id)
        if user_id is not None:
            stmt = stmt.where(Reminder.user_id == user_id)
        if task_id is None and user_id is None and (actor_id or actor_name):
            stmt = stmt.where(
                or_(Reminder.user_id == actor_id, Reminder.created_by == actor_name),
            )
        if status is not None:
            stmt = stmt.where(Reminder.status == status)
        stmt = stmt.order_by(Reminder.trigger_time, Reminder.id).limit(limit).offset(offset)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def earliest_pending_for_task(
        self,
        session: AsyncSession,
        task_id: UUID,
    ) -> Reminder | None:
        stmt = (
            select(Reminder)
            .where(Reminder.task_id == task_id, Reminder.status == ReminderStatus.PENDING)
            .order_by(Reminder.trigger_time)
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def delete_pending_automatic(self, session: AsyncSession, task_id: UUID) -> int:
        """Remove the task's pending automatic reminders. Returns the number removed."""
        result = await session.execute(
            delete(Reminder).where(
                Reminder.task_id == task_id,
                Reminder.status == ReminderStatus.PENDING,
                Reminder.is_automatic.is_(True),
            ),
        )
        await session.flush()
        count = result.rowcount or 0
        self._lazy.debug(lambda: f"db.delete_pending_automatic: task {task_id} -> {count} removed")
        return count

    async def sync_task_mirror(
        self,
        session: AsyncSession,
        task: Task,
        *,
        delivered: bool = False,
    ) -> None:
        """Point the task's legacy ``reminder_at`` at its earliest pending reminder.

        With nothing pending, a delivery keeps ``reminder_at`` and flags it
        sent; any other change clears the pair.
        """
        await session.flush()
        earliest = await self.earliest_pending_for_task(session, task.id)
        if earliest is not None:
            task.reminder_at = earliest.trigger_time
            task.reminder_sent = False
        elif delivered:
            task.reminder_sent = True
        else:
            task.reminder_at = None
            task.reminder_sent = False
        await session.flush()
        self._lazy.debug(
            lambda: f"db.sync_task_mirror: task {task.id} reminder_at={task.reminder_at} sent={task.reminder_sent}",
        )


_reminder_repository: ReminderRepository | None = None


def get_reminder_repository() -> ReminderRepository:
    """Get ReminderRepository instance."""
    global _reminder_repository
    if _reminder_repository is None:
        _reminder_repository = ReminderRepository()
    return _reminder_repository
