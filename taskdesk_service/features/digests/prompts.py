"""Prompt rendering for digest summarization."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from zoneinfo import ZoneInfo

    from taskdesk_service.features.activity.models import ActivityLogEntry
    from taskdesk_service.features.digests.models import DigestType
    from taskdesk_service.features.tasks.models import Task

ACTION_DESCRIPTIONS: dict[str, str] = {
    "task_created": "created task",
    "task_completed": "completed task",
    "task_updated": "updated task",
    "task_deleted": "deleted task",
    "task_reopened": "reopened task",
    "status_changed": "changed status of",
    "priority_changed": "changed priority of",
    "assigned_to_changed": "reassigned",
    "subtask_completed": "completed subtask on",
    "subtask_added": "added subtask to",
    "attachment_added": "added attachment to",
}

RESPONSE_SHAPE = """{
  "overdueSummary": "1-2 sentences on the overdue situation, with empathy if anything is overdue",
  "todaySummary": "1-2 sentences on what is on the plate today",
  "teamActivitySummary": "1-2 sentences on team activity and momentum",
  "teamHighlights": ["up to 3 notable team accomplishments"],
  "focusSuggestion": "one specific, actionable recommendation"
}"""


def describe_action(action: str) -> str:
    """Past-tense phrase for an activity action."""
    return ACTION_DESCRIPTIONS.get(action, action.replace("_", " "))


def format_clock(instant: datetime, tz: ZoneInfo) -> str:
    """``3:05 PM`` in local time."""
    return instant.astimezone(tz).strftime("%I:%M %p").lstrip("0")


def format_task_line(task: Task, tz: ZoneInfo) -> str:
    line = f"- {task.text} ({task.priority} priority)"
    if task.assigned_to:
        line += f" [Assigned: {task.assigned_to}]"
    if task.due_date is not None:
        local_due = task.due_date.astimezone(tz)
        line += f" [Due: {local_due.strftime('%b')} {local_due.day}]"
    return line


def render_activity_transcript(
    entries: Sequence[ActivityLogEntry],
    tz: ZoneInfo,
    *,
    limit: int = 20,
) -> list[str]:
    """Transcript lines for the ``limit`` most recent entries, oldest first.

    ``entries`` may come in any order.
    """
    recent = sorted(entries, key=lambda e: e.created_at, reverse=True)[:limit]
    lines = []
    for entry in reversed(recent):
        line = f"- {format_clock(entry.created_at, tz)}: {entry.user_name} {describe_action(entry.action)}"
        if entry.task_text:
            line += f' "{entry.task_text}"'
        lines.append(line)
    return lines


def _section(title: str, lines: list[str], empty: str) -> str:
    return f"=== {title} ===\n" + ("\n".join(lines) if lines else empty)


def build_digest_prompt(
    *,
    user_name: str,
    digest_type: DigestType,
    as_of: datetime,
    tz: ZoneInfo,
    overdue: Sequence[Task],
    due_today: Sequence[Task],
    completed_yesterday: Sequence[Task],
    activity: Sequence[ActivityLogEntry],
    transcript_limit: int = 20,
) -> str:
    """Prompt asking for the JSON briefing described by ``RESPONSE_SHAPE``."""
    local_now = as_of.astimezone(tz)
    focus_window = "first today" if digest_type == "morning" else "before wrapping up"
    completed_lines = [
        f"- {task.text} (completed by {task.updated_by or task.assigned_to or 'team'})"
        for task in completed_yesterday
    ]

    sections = [
        _section(
            f"OVERDUE TASKS ({len(overdue)} tasks)",
            [format_task_line(t, tz) for t in overdue],
            "No overdue tasks.",
        ),
        _section(
            f"TODAY'S TASKS ({len(due_today)} tasks)",
            [format_task_line(t, tz) for t in due_today],
            "No tasks due today.",
        ),
        _section(
            f"TEAM COMPLETIONS YESTERDAY ({len(completed_yesterday)} tasks)",
            completed_lines,
            "No tasks were completed yesterday.",
        ),
        _section(
            "RECENT TEAM ACTIVITY (last 24 hours)",
            render_activity_transcript(activity, tz, limit=transcript_limit),
            "No recent activity recorded.",
        ),
    ]

    return "\n\n".join(
        [
            f"You are writing a personalized {digest_type} briefing for {user_name}, "
            "a member of a small team that shares a task board.",
            f"Today is {local_now.strftime('%A, %B')} {local_now.day}, {local_now.year}.",
            *sections,
            "Respond with ONLY a JSON object (no markdown, no code fences) in exactly this shape:",
            RESPONSE_SHAPE,
            "Guidelines:\n"
            "- Keep summaries concise, warm and personal\n"
            "- Emphasize urgent or high priority overdue work\n"
            f"- The focus suggestion says what {user_name} should tackle {focus_window}, "
            "ordered by urgency, then priority, then due date\n"
            "- Acknowledge team wins",
        ],
    )
