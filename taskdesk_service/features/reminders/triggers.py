"""Trigger-time presets relative to a task's due date."""

from __future__ import annotations

from datetime import datetime, time, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo


class ReminderPreset(StrEnum):
    AT_TIME = "at_time"
    FIVE_MIN_BEFORE = "5_min_before"
    FIFTEEN_MIN_BEFORE = "15_min_before"
    THIRTY_MIN_BEFORE = "30_min_before"
    ONE_HOUR_BEFORE = "1_hour_before"
    ONE_DAY_BEFORE = "1_day_before"
    MORNING_OF = "morning_of"
    CUSTOM = "custom"


PRESET_OFFSETS: dict[ReminderPreset, timedelta] = {
    ReminderPreset.AT_TIME: timedelta(0),
    ReminderPreset.FIVE_MIN_BEFORE: timedelta(minutes=5),
    ReminderPreset.FIFTEEN_MIN_BEFORE: timedelta(minutes=15),
    ReminderPreset.THIRTY_MIN_BEFORE: timedelta(minutes=30),
    ReminderPreset.ONE_HOUR_BEFORE: timedelta(hours=1),
    ReminderPreset.ONE_DAY_BEFORE: timedelta(days=1),
}

MORNING_OF_TIME = time(9, 0)

# Offsets applied automatically when a task with a due date is created
DEFAULT_REMINDER_OFFSETS = (timedelta(days=1), timedelta(hours=1))


def compute_trigger_time(
    preset: ReminderPreset,
    due_date: datetime | None,
    *,
    tz: ZoneInfo,
    custom: datetime | None = None,
) -> datetime:
    """Resolve a preset to an instant.

    ``morning_of`` is 09:00 local time on the due date's local calendar day.

    Raises:
        ValueError: ``custom`` without a custom time, or a relative preset
            on a task without a due date.
    """
    if preset is ReminderPreset.CUSTOM:
        if custom is None:
            msg = "custom preset requires a trigger time"
            raise ValueError(msg)
        return custom
    if due_date is None:
        msg = f"preset {preset} needs a task due date"
        raise ValueError(msg)
    if preset is ReminderPreset.MORNING_OF:
        local_day = due_date.astimezone(tz).date()
        return datetime.combine(local_day, MORNING_OF_TIME, tzinfo=tz)
    return due_date - PRESET_OFFSETS[preset]
