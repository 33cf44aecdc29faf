"""Service layer for reminder management."""

from __future__ import annotations

from typing import TYPE_CHECKING

from taskdesk_service.core.database import utcnow
from taskdesk_service.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from taskdesk_service.core.repositories import get_user_repository
from taskdesk_service.core.services.base import BaseService
from taskdesk_service.features.reminders.models import Reminder, ReminderStatus
from taskdesk_service.features.reminders.repository import (
    ReminderRepository,
    get_reminder_repository,
)
from taskdesk_service.features.reminders.triggers import (
    DEFAULT_REMINDER_OFFSETS,
    ReminderPreset,
    compute_trigger_time,
)
from taskdesk_service.features.tasks.repository import get_task_repository

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID
    from zoneinfo import ZoneInfo

    from sqlalchemy.ext.asyncio import AsyncSession

    from taskdesk_service.core.models import User
    from taskdesk_service.features.reminders.schemas import ReminderCreate, ReminderUpdate
    from taskdesk_service.features.tasks.models import Task

PAST_TRIGGER_MESSAGE = "Reminder time must be in the future"
COMPLETED_TASK_MESSAGE = "Cannot add reminder to completed task"


class ReminderService(BaseService):
    """Create, list, reschedule, cancel and delete reminders.

    Every mutation re-synchronizes the parent task's legacy
    ``reminder_at`` / ``reminder_sent`` mirror and commits.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        tz: ZoneInfo,
        repository: ReminderRepository | None = None,
    ) -> None:
        super().__init__()
        self._session = session
        self._tz = tz
        self._repository = repository or get_reminder_repository()
        self._tasks = get_task_repository()
        self._users = get_user_repository()

    async def create_reminder(
        self,
        actor: User,
        payload: ReminderCreate,
        *,
        now: datetime | None = None,
    ) -> Reminder:
        """Create a reminder on a task the actor manages.

        Raises:
            NotFoundException: Task or explicit recipient does not exist.
            ValidationException: Past trigger time or completed task.
            ForbiddenException: Actor is not creator, assignee or last editor.
        """
        now = now or utcnow()
        task = await self._get_task(payload.task_id)
        self._ensure_can_manage(actor, task)
        if task.completed:
            raise ValidationException(detail=COMPLETED_TASK_MESSAGE, field="task_id")

        trigger_time = payload.trigger_time
        if payload.preset is not None and payload.preset is not ReminderPreset.CUSTOM:
            try:
                trigger_time = compute_trigger_time(payload.preset, task.due_date, tz=self._tz)
            except ValueError as exc:
                raise ValidationException(detail=str(exc), field="preset") from exc
        assert trigger_time is not None
        self._ensure_future(trigger_time, now)

        if payload.user_id is not None and await self._users.get(self._session, payload.user_id) is None:
            raise NotFoundException(
                detail=f"User {payload.user_id} not found",
                type="user-not-found",
                extra={"user_id": str(payload.user_id)},
            )

        reminder = await self._repository.create(
            self._session,
            Reminder(
                task_id=task.id,
                user_id=payload.user_id,
                trigger_time=trigger_time,
                channel=payload.channel,
                message=payload.message,
                status=ReminderStatus.PENDING,
                created_by=actor.name,
                attempt_count=0,
            ),
        )
        await self._repository.sync_task_mirror(self._session, task)
        await self._session.commit()

        self.logger.info(
            "Reminder created",
            extra={
                "reminder_id": str(reminder.id),
                "task_id": str(task.id),
                "channel": reminder.channel,
                "explicit_recipient": payload.user_id is not None,
                "operation": "service.create_reminder",
            },
        )
        return reminder

    async def list_reminders(
        self,
        actor: User,
        *,
        task_id: UUID | None = None,
        user_id: UUID | None = None,
        status: ReminderStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Reminder]:
        """List reminders by task, by recipient, or the actor's own.

        Raises:
            NotFoundException: Unknown task.
            ForbiddenException: Task the actor does not manage, or another
                user's reminders.
        """
        if task_id is not None:
            task = await self._get_task(task_id)
            self._ensure_can_manage(actor, task)
        if user_id is not None and user_id != actor.id:
            raise ForbiddenException(
                detail="Cannot list reminders addressed to another user",
                extra={"user_id": str(user_id)},
            )

        reminders = list(
            await self._repository.list_filtered(
                self._session,
                task_id=task_id,
                user_id=user_id,
                status=status,
                actor_id=actor.id,
                actor_name=actor.name,
                limit=limit,
                offset=offset,
            ),
        )
        self._lazy.debug(
            lambda: f"service.list_reminders(task_id={task_id}, user_id={user_id}, status={status}) -> {len(reminders)} items",
        )
        return reminders

    async def update_reminder(
        self,
        actor: User,
        reminder_id: UUID,
        payload: ReminderUpdate,
        *,
        now: datetime | None = None,
    ) -> Reminder:
        """Reschedule, cancel/reopen or edit the message of a reminder.

        Sent and cancelled reminders are terminal: only their message may
        change.

        Raises:
            NotFoundException: Unknown reminder.
            ForbiddenException: Actor may not manage it.
            ConflictException: Reschedule or status change on a terminal reminder.
            ValidationException: New trigger time is not in the future.
        """
        now = now or utcnow()
        reminder, task = await self._get_managed(actor, reminder_id)
        fields = payload.model_fields_set

        changes_schedule = (payload.trigger_time is not None) or (payload.status is not None)
        if changes_schedule and reminder.is_terminal:
            raise ConflictException(
                detail=f"Reminder is already {reminder.status}",
                type="reminder-terminal",
                extra={"reminder_id": str(reminder.id), "status": reminder.status},
            )

        if payload.trigger_time is not None:
            self._ensure_future(payload.trigger_time, now)
            reminder.trigger_time = payload.trigger_time
        if payload.status is not None:
            reminder.status = ReminderStatus(payload.status)
        if "message" in fields:
            reminder.message = payload.message

        await self._repository.sync_task_mirror(self._session, task)
        await self._session.commit()

        self.logger.info(
            "Reminder updated",
            extra={
                "reminder_id": str(reminder.id),
                "rescheduled": payload.trigger_time is not None,
                "status": reminder.status,
                "operation": "service.update_reminder",
            },
        )
        return reminder

    async def delete_reminder(self, actor: User, reminder_id: UUID) -> None:
        """Hard-delete a reminder.

        Raises:
            NotFoundException: Unknown reminder.
            ForbiddenException: Actor may not manage it.
        """
        reminder, task = await self._get_managed(actor, reminder_id)
        await self._repository.delete(self._session, reminder)
        await self._repository.sync_task_mirror(self._session, task)
        await self._session.commit()

        self.logger.info(
            "Reminder deleted",
            extra={"reminder_id": str(reminder_id), "operation": "service.delete_reminder"},
        )

    async def schedule_default_reminders(
        self,
        task: Task,
        *,
        created_by: str,
        now: datetime | None = None,
    ) -> list[Reminder]:
        """Replace the task's automatic reminders to match its due date.

        Pending automatic reminders are removed first, then one is created a
        day and one an hour before the due date, skipping offsets already in
        the past. A task without a due date, or a completed one, ends up with
        none. Manual reminders are left alone. Recipient is resolved at
        dispatch time.
        """
        now = now or utcnow()
        removed = await self._repository.delete_pending_automatic(self._session, task.id)

        created: list[Reminder] = []
        if task.due_date is not None and not task.completed:
            for offset in DEFAULT_REMINDER_OFFSETS:
                trigger_time = task.due_date - offset
                if trigger_time <= now:
                    continue
                created.append(
                    await self._repository.create(
                        self._session,
                        Reminder(
                            task_id=task.id,
                            trigger_time=trigger_time,
                            status=ReminderStatus.PENDING,
                            created_by=created_by,
                            attempt_count=0,
                            is_automatic=True,
                        ),
                    ),
                )
        if created or removed:
            await self._repository.sync_task_mirror(self._session, task)
            await self._session.commit()
            self.logger.info(
                "Default reminders scheduled",
                extra={
                    "task_id": str(task.id),
                    "count": len(created),
                    "replaced": removed,
                    "operation": "service.schedule_default_reminders",
                },
            )
        return created

    async def refresh_default_reminders(
        self,
        actor: User,
        task_id: UUID,
        *,
        now: datetime | None = None,
    ) -> list[Reminder]:
        """Re-derive a task's automatic reminders after its due date changed.

        Raises:
            NotFoundException: Unknown task.
            ForbiddenException: Actor may not manage it.
        """
        task = await self._get_task(task_id)
        self._ensure_can_manage(actor, task)
        return await self.schedule_default_reminders(task, created_by=actor.name, now=now)

    async def _get_task(self, task_id: UUID) -> Task:
        task = await self._tasks.get(self._session, task_id)
        if task is None:
            raise NotFoundException(
                detail=f"Task {task_id} not found",
                type="task-not-found",
                extra={"task_id": str(task_id)},
            )
        return task

    async def _get_managed(self, actor: User, reminder_id: UUID) -> tuple[Reminder, Task]:
        reminder = await self._repository.get(self._session, reminder_id)
        if reminder is None:
            raise NotFoundException(
                detail=f"Reminder {reminder_id} not found",
                type="reminder-not-found",
                extra={"reminder_id": str(reminder_id)},
            )
        task = await self._get_task(reminder.task_id)
        if reminder.created_by != actor.name:
            self._ensure_can_manage(actor, task)
        return reminder, task

    @staticmethod
    def _ensure_can_manage(actor: User, task: Task) -> None:
        if not task.can_be_managed_by(actor.name):
            raise ForbiddenException(
                detail="Only the task's creator, assignee or last editor can manage its reminders",
                extra={"task_id": str(task.id)},
            )

    @staticmethod
    def _ensure_future(trigger_time: datetime, now: datetime) -> None:
        if trigger_time <= now:
            raise ValidationException(detail=PAST_TRIGGER_MESSAGE, field="trigger_time")


__all__ = ["COMPLETED_TASK_MESSAGE", "PAST_TRIGGER_MESSAGE", "ReminderService"]
