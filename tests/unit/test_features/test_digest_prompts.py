"""Unit tests for prompt rendering and summarization response parsing."""

from __future__ import annotations

import json
from datetime import datetime
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from taskdesk_service.features.activity.models import ActivityLogEntry
from taskdesk_service.features.digests.exceptions import DigestGenerationError, DigestParseError
from taskdesk_service.features.digests.models import DigestType
from taskdesk_service.features.digests.prompts import (
    RESPONSE_SHAPE,
    build_digest_prompt,
    describe_action,
    format_task_line,
    render_activity_transcript,
)
from taskdesk_service.features.digests.schemas import extract_ai_response
from taskdesk_service.features.tasks.models import Task
from tests.utils import AI_RESPONSE

LA = ZoneInfo("America/Los_Angeles")
NOW = datetime(2026, 6, 1, 5, 0, tzinfo=LA)


def entry(action: str, user: str, hour: int, minute: int, text: str | None = None) -> ActivityLogEntry:
    return ActivityLogEntry(
        id=uuid4(),
        action=action,
        user_name=user,
        task_text=text,
        created_at=datetime(2026, 5, 31, hour, minute, tzinfo=LA),
    )


@pytest.mark.unit
class TestExtractAIResponse:
    """Strict parsing: first ``{`` to last ``}``, exact schema."""

    def test_parses_object_wrapped_in_prose(self):
        text = f"Here is your briefing:\n```json\n{json.dumps(AI_RESPONSE)}\n```\nEnjoy!"

        result = extract_ai_response(text)

        assert result.focus_suggestion == AI_RESPONSE["focusSuggestion"]
        assert result.team_highlights == AI_RESPONSE["teamHighlights"]

    def test_no_object_raises(self):
        with pytest.raises(DigestParseError) as exc_info:
            extract_ai_response("I could not produce a summary today.")

        assert exc_info.value.raw_response == "I could not produce a summary today."

    def test_missing_field_raises(self):
        data = {key: value for key, value in AI_RESPONSE.items() if key != "focusSuggestion"}

        with pytest.raises(DigestParseError, match="failed validation"):
            extract_ai_response(json.dumps(data))

    def test_unknown_field_raises(self):
        with pytest.raises(DigestParseError):
            extract_ai_response(json.dumps({**AI_RESPONSE, "mood": "sunny"}))

    def test_wrong_type_raises(self):
        with pytest.raises(DigestParseError):
            extract_ai_response(json.dumps({**AI_RESPONSE, "teamHighlights": "Shipped it"}))

    def test_invalid_json_raises(self):
        with pytest.raises(DigestParseError):
            extract_ai_response('{"overdueSummary": "unterminated}')

    def test_parse_error_is_a_generation_error(self):
        assert issubclass(DigestParseError, DigestGenerationError)


@pytest.mark.unit
class TestActivityTranscript:
    def test_most_recent_entries_oldest_first(self):
        entries = [
            entry("task_created", "bob", 10, 0, "Draft agenda"),
            entry("task_completed", "carol", 15, 30, "Deploy"),
            entry("task_updated", "alice", 9, 5, "Old thing"),
        ]

        lines = render_activity_transcript(entries, LA, limit=2)

        assert lines == [
            '- 10:00 AM: bob created task "Draft agenda"',
            '- 3:30 PM: carol completed task "Deploy"',
        ]

    def test_unknown_action_is_humanized(self):
        assert describe_action("comment_added") == "comment added"
        assert describe_action("assigned_to_changed") == "reassigned"

    def test_entry_without_task_text(self):
        lines = render_activity_transcript([entry("task_deleted", "bob", 8, 0)], LA)

        assert lines == ["- 8:00 AM: bob deleted task"]


@pytest.mark.unit
class TestBuildDigestPrompt:
    def test_sections_and_shape(self):
        overdue = Task(
            id=uuid4(),
            text="Pay invoice",
            priority="high",
            assigned_to="alice",
            due_date=datetime(2026, 5, 30, 17, 0, tzinfo=LA),
        )

        prompt = build_digest_prompt(
            user_name="alice",
            digest_type=DigestType.MORNING,
            as_of=NOW,
            tz=LA,
            overdue=[overdue],
            due_today=[],
            completed_yesterday=[],
            activity=[],
        )

        assert "morning briefing for alice" in prompt
        assert "Today is Monday, June 1, 2026." in prompt
        assert "=== OVERDUE TASKS (1 tasks) ===" in prompt
        assert "- Pay invoice (high priority) [Assigned: alice] [Due: May 30]" in prompt
        assert "No tasks due today." in prompt
        assert "No tasks were completed yesterday." in prompt
        assert "No recent activity recorded." in prompt
        assert RESPONSE_SHAPE in prompt
        assert "tackle first today" in prompt

    def test_afternoon_focus_window(self):
        prompt = build_digest_prompt(
            user_name="bob",
            digest_type=DigestType.AFTERNOON,
            as_of=NOW,
            tz=LA,
            overdue=[],
            due_today=[],
            completed_yesterday=[],
            activity=[],
        )

        assert "afternoon briefing for bob" in prompt
        assert "before wrapping up" in prompt

    def test_task_line_without_assignee_or_due(self):
        task = Task(id=uuid4(), text="Water plants", priority="low")

        assert format_task_line(task, LA) == "- Water plants (low priority)"
