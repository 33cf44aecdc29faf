"""Test utilities: model factories and collaborator fakes.

Usage:
    from tests.utils import ModelFactory, FakePushTransport

    alice = await ModelFactory.user(db_session, "alice")
    await ModelFactory.subscription(db_session, alice, "https://push.example/alice")
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from taskdesk_service.core.database import utcnow
from taskdesk_service.core.models import (
    ActivityLogEntry,
    Digest,
    PushSubscription,
    Reminder,
    Task,
    User,
)
from taskdesk_service.features.reminders.models import ReminderChannel, ReminderStatus
from taskdesk_service.infra.ai.providers import LLMResponse, ProviderError
from taskdesk_service.infra.push import PushSendResult

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from taskdesk_service.infra.ai.providers import LLMMessage

SCHEDULER_KEY = "test-scheduler-key"

AI_RESPONSE: dict[str, Any] = {
    "overdueSummary": "One task slipped past its date.",
    "todaySummary": "Two things on the plate today.",
    "teamActivitySummary": "The team closed three tasks yesterday.",
    "teamHighlights": ["Shipped the release", "Fixed the login bug", "Cleaned the backlog"],
    "focusSuggestion": "Start with the overdue invoice.",
}


# ============================================================================
# Model Factories
# ============================================================================


class ModelFactory:
    """Persist test rows with realistic defaults.

    Every method adds, commits and returns the instance.
    """

    @staticmethod
    async def _save[M](session: AsyncSession, instance: M) -> M:
        session.add(instance)
        await session.commit()
        return instance

    @staticmethod
    async def user(session: AsyncSession, name: str = "alice", *, is_active: bool = True) -> User:
        return await ModelFactory._save(
            session, User(id=uuid4(), name=name, email=f"{name}@example.com", is_active=is_active),
        )

    @staticmethod
    async def task(
        session: AsyncSession,
        text: str = "Pay invoice",
        *,
        due_date: datetime | None = None,
        assigned_to: str | None = "alice",
        created_by: str | None = "alice",
        updated_by: str | None = None,
        priority: str = "medium",
        completed: bool = False,
        updated_at: datetime | None = None,
    ) -> Task:
        now = utcnow()
        return await ModelFactory._save(
            session,
            Task(
                id=uuid4(),
                text=text,
                priority=priority,
                status="done" if completed else "todo",
                due_date=due_date,
                completed=completed,
                assigned_to=assigned_to,
                created_by=created_by,
                updated_by=updated_by,
                reminder_sent=False,
                created_at=now,
                updated_at=updated_at or now,
            ),
        )

    @staticmethod
    async def reminder(
        session: AsyncSession,
        task: Task,
        *,
        trigger_time: datetime,
        user_id: Any = None,
        channel: ReminderChannel = ReminderChannel.BOTH,
        message: str | None = None,
        status: ReminderStatus = ReminderStatus.PENDING,
        created_by: str = "alice",
        attempt_count: int = 0,
        is_automatic: bool = False,
    ) -> Reminder:
        return await ModelFactory._save(
            session,
            Reminder(
                id=uuid4(),
                task_id=task.id,
                user_id=user_id,
                trigger_time=trigger_time,
                channel=channel,
                message=message,
                status=status,
                created_by=created_by,
                attempt_count=attempt_count,
                is_automatic=is_automatic,
            ),
        )

    @staticmethod
    async def subscription(session: AsyncSession, user: User, endpoint: str) -> PushSubscription:
        return await ModelFactory._save(
            session,
            PushSubscription(
                id=uuid4(),
                user_id=user.id,
                endpoint=endpoint,
                p256dh="BNc-test-p256dh",
                auth="test-auth",
            ),
        )

    @staticmethod
    async def activity(
        session: AsyncSession,
        action: str,
        user_name: str,
        *,
        created_at: datetime,
        task_text: str | None = None,
    ) -> ActivityLogEntry:
        return await ModelFactory._save(
            session,
            ActivityLogEntry(
                id=uuid4(),
                action=action,
                user_name=user_name,
                task_text=task_text,
                created_at=created_at,
            ),
        )

    @staticmethod
    async def digest(
        session: AsyncSession,
        user: User,
        *,
        digest_type: str,
        generated_at: datetime,
        read_at: datetime | None = None,
    ) -> Digest:
        payload = {
            "greeting": f"Hello, {user.name}!",
            "overdueTasks": {"count": 0, "summary": "Nothing overdue.", "tasks": []},
            "todaysTasks": {"count": 0, "summary": "A quiet day.", "tasks": []},
            "teamActivity": {"summary": "Calm.", "highlights": [], "completedYesterday": 0},
            "focusSuggestion": "Plan the week.",
            "generatedAt": generated_at.isoformat(),
        }
        return await ModelFactory._save(
            session,
            Digest(
                id=uuid4(),
                user_id=user.id,
                user_name=user.name,
                digest_type=digest_type,
                digest_date=generated_at.date(),
                payload=payload,
                generated_at=generated_at,
                read_at=read_at,
            ),
        )


# ============================================================================
# Collaborator Fakes
# ============================================================================


@dataclass
class PushDelivery:
    endpoint: str
    payload: dict[str, Any]
    urgency: str


class FakePushTransport:
    """Records deliveries instead of calling browser push services.

    ``statuses`` maps an endpoint to the HTTP status its push service answers
    (201 when absent). ``errors`` maps an endpoint to an exception raised instead
    of answering. ``delay`` makes every delivery take that many seconds.
    """

    def __init__(self) -> None:
        self.deliveries: list[PushDelivery] = []
        self.statuses: dict[str, int] = {}
        self.errors: dict[str, Exception] = {}
        self.delay = 0.0
        self.active = 0
        self.max_active = 0

    async def deliver(
        self,
        subscription_info: dict[str, Any],
        payload: str,
        *,
        urgency: str = "normal",
    ) -> PushSendResult:
        endpoint = subscription_info["endpoint"]
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if endpoint in self.errors:
                raise self.errors[endpoint]
            self.deliveries.append(PushDelivery(endpoint, json.loads(payload), urgency))
        finally:
            self.active -= 1

        status_code = self.statuses.get(endpoint, 201)
        if status_code >= 400:
            return PushSendResult(ok=False, status_code=status_code, error=f"Push failed: {status_code}")
        return PushSendResult(ok=True, status_code=status_code)


class FakeLLMProvider:
    """Summarization provider returning canned text, or raising ``error``."""

    def __init__(self, content: str | None = None, error: Exception | None = None) -> None:
        self.content = content if content is not None else json.dumps(AI_RESPONSE)
        self.error = error
        self.prompts: list[str] = []

    async def generate(
        self,
        messages: list[LLMMessage],
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        self.prompts.append(messages[-1].content)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.content, model="fake-model")

    def get_model_name(self) -> str:
        return "fake-model"


def provider_down() -> ProviderError:
    return ProviderError("Service unavailable", provider="anthropic", operation="generate")
