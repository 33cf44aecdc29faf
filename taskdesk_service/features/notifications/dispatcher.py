"""Reminder dispatcher coordinating push and in-app delivery."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from taskdesk_service.features.notifications.channels import (
    DeliveryResult,
    InAppChannel,
    Notice,
    PushChannel,
)
from taskdesk_service.features.notifications.messages import (
    classify_reminder,
    reminder_in_app_text,
    reminder_push_payload,
)
from taskdesk_service.features.notifications.metrics import (
    notification_delivered_total,
    notification_delivery_duration_seconds,
    notification_errors_total,
    reminder_dispatch_total,
)
from taskdesk_service.features.reminders.models import ReminderStatus
from taskdesk_service.features.reminders.repository import get_reminder_repository
from taskdesk_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID
    from zoneinfo import ZoneInfo

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from taskdesk_service.core.models import User
    from taskdesk_service.core.settings import PipelineSettings
    from taskdesk_service.features.notifications.channels import NotificationChannel
    from taskdesk_service.features.reminders.models import Reminder
    from taskdesk_service.features.tasks.models import Task
    from taskdesk_service.infra.push import PushTransport

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)

TASK_COMPLETED = "task completed"
NO_RECIPIENT = "no recipient"


@dataclass(frozen=True, slots=True)
class ChannelAttempt:
    """One channel's result for one reminder."""

    channel: str
    result: DeliveryResult

    @property
    def success(self) -> bool:
        return self.result.success


@dataclass(slots=True)
class DeliveryOutcome:
    """What happened to a reminder during one dispatch."""

    reminder_id: UUID
    recipient: str | None
    attempts: list[ChannelAttempt] = field(default_factory=list)
    status: ReminderStatus = ReminderStatus.PENDING
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """At least one channel delivered."""
        return any(attempt.success for attempt in self.attempts)

    @property
    def failed_channels(self) -> list[str]:
        return [attempt.channel for attempt in self.attempts if not attempt.success]

    @property
    def label(self) -> str:
        """sent, cancelled or failed."""
        if self.status == ReminderStatus.PENDING:
            return "failed"
        return str(self.status)


class ReminderDispatcher:
    """Deliver one due reminder and record the result on it.

    Channel failures are captured in the returned ``DeliveryOutcome`` and
    never raised. The reminder's status is written only after every attempted
    channel has resolved:

    - any channel succeeded: ``sent``
    - every channel failed: stays ``pending`` with ``attempt_count`` bumped,
      or ``cancelled`` once ``max_delivery_attempts`` is reached
    - the task was completed (when enabled): ``cancelled`` without delivery
    """

    def __init__(
        self,
        push_channel: NotificationChannel,
        in_app_channel: NotificationChannel,
        *,
        settings: PipelineSettings,
        tz: ZoneInfo,
    ) -> None:
        self._push = push_channel
        self._in_app = in_app_channel
        self._settings = settings
        self._tz = tz
        self._reminders = get_reminder_repository()

    async def dispatch(
        self,
        session: AsyncSession,
        reminder: Reminder,
        task: Task,
        recipient: User | None,
        now: datetime,
    ) -> DeliveryOutcome:
        """Attempt delivery, then persist the reminder's new state and commit."""
        outcome = DeliveryOutcome(
            reminder_id=reminder.id,
            recipient=recipient.name if recipient is not None else None,
        )

        if task.completed and self._settings.cancel_completed_task_reminders:
            outcome.status = ReminderStatus.CANCELLED
            outcome.error = TASK_COMPLETED
        elif recipient is None:
            outcome.error = NO_RECIPIENT
        else:
            outcome.attempts = await self._attempt_channels(reminder, task, recipient, now)
            if outcome.succeeded:
                outcome.status = ReminderStatus.SENT
            else:
                outcome.error = "; ".join(
                    f"{attempt.channel}: {attempt.result.error_message or attempt.result.error_category}"
                    for attempt in outcome.attempts
                )

        self._apply(reminder, outcome, now)
        await self._reminders.sync_task_mirror(
            session, task, delivered=outcome.status == ReminderStatus.SENT,
        )
        await session.commit()

        reminder_dispatch_total.labels(outcome=outcome.label).inc()
        self._log_outcome(reminder, outcome)
        return outcome

    def _apply(self, reminder: Reminder, outcome: DeliveryOutcome, now: datetime) -> None:
        if outcome.status == ReminderStatus.SENT:
            reminder.status = ReminderStatus.SENT
            reminder.sent_at = now
            failed = outcome.failed_channels
            reminder.last_error = f"partial: {', '.join(failed)} failed" if failed else None
            return

        reminder.last_error = outcome.error
        if outcome.status == ReminderStatus.CANCELLED:
            reminder.status = ReminderStatus.CANCELLED
            return

        reminder.attempt_count = (reminder.attempt_count or 0) + 1
        cap = self._settings.max_delivery_attempts
        if cap is not None and reminder.attempt_count >= cap:
            reminder.status = ReminderStatus.CANCELLED
            outcome.status = ReminderStatus.CANCELLED

    async def _attempt_channels(
        self,
        reminder: Reminder,
        task: Task,
        recipient: User,
        now: datetime,
    ) -> list[ChannelAttempt]:
        channel = reminder.channel_enum
        notification_type = classify_reminder(
            task,
            now,
            self._tz,
            due_soon_window=timedelta(minutes=self._settings.due_soon_minutes),
        )
        notice = Notice(
            recipient_id=recipient.id,
            recipient_name=recipient.name,
            payload=reminder_push_payload(reminder, task, notification_type, now),
            text=reminder_in_app_text(reminder, task, now, self._tz),
            related_task_id=task.id,
        )

        selected: list[NotificationChannel] = []
        if channel.uses_push:
            selected.append(self._push)
        if channel.uses_in_app:
            selected.append(self._in_app)

        lazy_logger.debug(
            lambda: f"Dispatching reminder {reminder.id} ({notification_type}) to "
            f"{[c.get_channel_name() for c in selected]}",
        )
        results = await asyncio.gather(*(self._send(c, notice) for c in selected))
        return [
            ChannelAttempt(channel=c.get_channel_name(), result=result)
            for c, result in zip(selected, results, strict=True)
        ]

    async def _send(self, channel: NotificationChannel, notice: Notice) -> DeliveryResult:
        channel_name = channel.get_channel_name()
        try:
            result = await channel.send(notice)
        except Exception as exc:
            logger.exception(
                "Unexpected error from notification channel",
                extra={"channel": channel_name, "recipient": notice.recipient_name},
            )
            result = DeliveryResult(
                success=False,
                error_message=str(exc) or type(exc).__name__,
                error_category="exception",
            )

        if result.response_time_ms is not None:
            notification_delivery_duration_seconds.labels(channel=channel_name).observe(
                result.response_time_ms / 1000.0,
            )
        if result.success:
            notification_delivered_total.labels(channel=channel_name, status="delivered").inc()
        else:
            notification_delivered_total.labels(channel=channel_name, status="failed").inc()
            notification_errors_total.labels(
                channel=channel_name,
                error_category=result.error_category or "unknown",
            ).inc()
            logger.warning(
                "Notification channel failed",
                extra={
                    "channel": channel_name,
                    "recipient": notice.recipient_name,
                    "error_category": result.error_category,
                    "error": result.error_message,
                },
            )
        return result

    def _log_outcome(self, reminder: Reminder, outcome: DeliveryOutcome) -> None:
        extra = {
            "reminder_id": str(reminder.id),
            "task_id": str(reminder.task_id),
            "recipient": outcome.recipient,
            "outcome": outcome.label,
            "attempt_count": reminder.attempt_count,
            "operation": "reminders.dispatch",
        }
        if outcome.status == ReminderStatus.SENT:
            logger.info("Reminder sent", extra=extra)
        elif outcome.status == ReminderStatus.CANCELLED:
            logger.info("Reminder cancelled", extra={**extra, "reason": outcome.error})
        else:
            logger.warning("Reminder delivery failed", extra={**extra, "error": outcome.error})


def build_reminder_dispatcher(
    transport: PushTransport,
    session_factory: async_sessionmaker[AsyncSession],
    *,
    settings: PipelineSettings,
    tz: ZoneInfo,
) -> ReminderDispatcher:
    """Wire the push and in-app channels into a dispatcher."""
    return ReminderDispatcher(
        PushChannel(transport, session_factory),
        InAppChannel(session_factory),
        settings=settings,
        tz=tz,
    )
