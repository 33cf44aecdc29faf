"""Notification wording and reminder classification.

All calendar comparisons happen in the platform time zone passed in by the
caller; instants are aware datetimes.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from taskdesk_service.features.notifications.schemas import NotificationType, PushPayload

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from taskdesk_service.features.reminders.models import Reminder
    from taskdesk_service.features.tasks.models import Task

PUSH_TITLES: dict[NotificationType, str] = {
    NotificationType.DUE_SOON: "Task Due Soon",
    NotificationType.DUE_TODAY: "Task Due Today",
    NotificationType.OVERDUE: "Overdue Task",
    NotificationType.DIGEST_READY: "Your Daily Briefing is Ready",
}


def classify_reminder(
    task: Task,
    now: datetime,
    tz: ZoneInfo,
    *,
    due_soon_window: timedelta,
) -> NotificationType:
    """Pick the notification type for a reminder about ``task``.

    Order of checks: past due, due within the window, due later today.
    Tasks without a due date, or due on a later day, are "due soon".
    """
    due = task.due_date
    if due is None:
        return NotificationType.DUE_SOON
    if due <= now:
        return NotificationType.OVERDUE
    if due - now <= due_soon_window:
        return NotificationType.DUE_SOON
    if due.astimezone(tz).date() == now.astimezone(tz).date():
        return NotificationType.DUE_TODAY
    return NotificationType.DUE_SOON


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def describe_span(delta: timedelta) -> str:
    """Rough human span: "45 minutes", "3 hours", "2 days"."""
    seconds = abs(int(delta.total_seconds()))
    if seconds < 60:
        return "less than a minute"
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    return _plural(hours // 24, "day")


def format_due(due: datetime, now: datetime, tz: ZoneInfo) -> str:
    """Calendar phrase for a due date ("Today at 5:00 PM", "Tomorrow", ...)."""
    local_due = due.astimezone(tz)
    day_diff = (local_due.date() - now.astimezone(tz).date()).days
    time_part = local_due.strftime("%I:%M %p").lstrip("0")
    if day_diff < 0:
        return f"Overdue ({local_due.strftime('%b')} {local_due.day})"
    if day_diff == 0:
        return f"Today at {time_part}"
    if day_diff == 1:
        return f"Tomorrow at {time_part}"
    if day_diff <= 7:
        return f"{local_due.strftime('%A')} at {time_part}"
    return f"{local_due.strftime('%A, %b')} {local_due.day}"


def reminder_push_payload(
    reminder: Reminder,
    task: Task,
    notification_type: NotificationType,
    now: datetime,
) -> PushPayload:
    """Push notification for a due reminder."""
    if reminder.message:
        body = f'"{task.text}": {reminder.message}'
    elif notification_type is NotificationType.OVERDUE and task.due_date is not None:
        body = f'"{task.text}" is overdue by {describe_span(now - task.due_date)}'
    elif task.due_date is not None:
        body = f'"{task.text}" is due in {describe_span(task.due_date - now)}'
    else:
        body = f'Reminder: "{task.text}"'

    return PushPayload.for_type(
        notification_type,
        title=PUSH_TITLES[notification_type],
        body=body[:500],
        tag=f"reminder-{task.id}",
        url=f"/?task={task.id}",
        task_id=task.id,
        timestamp=now,
    )


def reminder_in_app_text(reminder: Reminder, task: Task, now: datetime, tz: ZoneInfo) -> str:
    """Body of the in-app message for a due reminder."""
    lines = ["Reminder", ""]
    priority = f" ({task.priority.capitalize()})" if task.priority else ""
    lines.append(f"{task.text}{priority}")
    if task.due_date is not None:
        lines.append(f"Due: {format_due(task.due_date, now, tz)}")
    if reminder.message:
        lines.extend(["", reminder.message])
    lines.extend(["", "Tap to view task"])
    return "\n".join(lines)


def digest_ready_body(greeting: str, today_count: int, overdue_count: int) -> str:
    """Notice body sent when a new digest is available."""
    if overdue_count and today_count:
        detail = (
            f"{_plural(today_count, 'task')} due today, {overdue_count} overdue. "
            "Tap to view your briefing."
        )
    elif today_count:
        detail = f"{_plural(today_count, 'task')} due today. Tap to view your briefing."
    elif overdue_count:
        detail = f"{_plural(overdue_count, 'overdue task')}. Tap to view your briefing."
    else:
        detail = "You're all caught up! Tap to view your briefing."
    return f"{greeting} {detail}"
