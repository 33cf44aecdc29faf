"""Reminder recipient resolution.

Precedence: an explicit ``Reminder.user_id`` wins; otherwise the task's
assignee is looked up at dispatch time, so reassigning a task after the
reminder was created changes who is notified.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from taskdesk_service.core.repositories import get_user_repository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from taskdesk_service.core.models import User
    from taskdesk_service.features.reminders.models import Reminder
    from taskdesk_service.features.tasks.models import Task


async def resolve_recipient(session: AsyncSession, reminder: Reminder, task: Task) -> User | None:
    """Return the user who should receive ``reminder``, or None if nobody can."""
    users = get_user_repository()
    if reminder.user_id is not None:
        return await users.get(session, reminder.user_id)
    if task.assigned_to:
        return await users.find_by_name(session, task.assigned_to)
    return None
