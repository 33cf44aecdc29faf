"""Digest assembly: windowed reads, prompt, one summarization call, strict parse."""

from __future__ import annotations

import asyncio
import time
from datetime import timedelta
from typing import TYPE_CHECKING

from taskdesk_service.core.services.base import BaseService
from taskdesk_service.features.activity.repository import get_activity_repository
from taskdesk_service.features.digests.exceptions import DigestGenerationError, DigestParseError
from taskdesk_service.features.digests.metrics import digest_generation_duration_seconds
from taskdesk_service.features.digests.models import DigestType
from taskdesk_service.features.digests.prompts import build_digest_prompt
from taskdesk_service.features.digests.schemas import (
    ActivitySection,
    DigestPayload,
    DigestTask,
    TaskSection,
    extract_ai_response,
)
from taskdesk_service.features.digests.windows import day_window
from taskdesk_service.features.tasks.repository import get_task_repository
from taskdesk_service.infra.ai.providers import LLMMessage, ProviderError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence
    from datetime import datetime
    from zoneinfo import ZoneInfo

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from taskdesk_service.core.models import User
    from taskdesk_service.core.settings import PipelineSettings
    from taskdesk_service.features.tasks.models import Task
    from taskdesk_service.infra.ai.providers import LLMProvider

GREETINGS = {
    DigestType.MORNING: "Good morning",
    DigestType.AFTERNOON: "Good afternoon",
}

RAW_RESPONSE_LOG_LIMIT = 500


class DigestAssembler(BaseService):
    """Build one user's briefing.

    The four reads run concurrently, each in its own session. Any read
    failure, provider failure or unparseable response raises
    ``DigestGenerationError``; no partial digest is ever produced.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        llm_provider: LLMProvider,
        *,
        settings: PipelineSettings,
        tz: ZoneInfo,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> None:
        super().__init__()
        self._session_factory = session_factory
        self._llm = llm_provider
        self._settings = settings
        self._tz = tz
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._tasks = get_task_repository()
        self._activity = get_activity_repository()

    async def assemble(self, user: User, digest_type: DigestType, as_of: datetime) -> DigestPayload:
        """Gather data for ``user`` as of ``as_of`` and summarize it.

        Raises:
            DigestGenerationError: A read or the summarization call failed.
            DigestParseError: The summarization response was not a valid briefing.
        """
        start = time.perf_counter()
        window = day_window(as_of, self._tz)
        activity_since = as_of - timedelta(hours=self._settings.activity_window_hours)

        try:
            overdue, due_today, completed, activity = await asyncio.gather(
                self._read(lambda s: self._tasks.find_overdue(s, before=window.today_start)),
                self._read(
                    lambda s: self._tasks.find_due_between(
                        s, start=window.today_start, end=window.today_end,
                    ),
                ),
                self._read(
                    lambda s: self._tasks.find_completed_between(
                        s, start=window.yesterday_start, end=window.today_start,
                    ),
                ),
                self._read(
                    lambda s: self._activity.find_since(
                        s, since=activity_since, limit=self._settings.activity_limit,
                    ),
                ),
            )
        except Exception as exc:
            raise DigestGenerationError(
                f"Digest data read failed: {exc}",
                user_name=user.name,
                digest_type=digest_type,
            ) from exc

        user_overdue = [task for task in overdue if task.is_related_to(user.name)]
        user_today = [task for task in due_today if task.is_related_to(user.name)]

        prompt = build_digest_prompt(
            user_name=user.name,
            digest_type=digest_type,
            as_of=as_of,
            tz=self._tz,
            overdue=user_overdue,
            due_today=user_today,
            completed_yesterday=completed,
            activity=activity,
            transcript_limit=self._settings.transcript_limit,
        )
        self._lazy.debug(lambda: f"Digest prompt for {user.name}: {len(prompt)} chars")

        try:
            response = await self._llm.generate(
                [LLMMessage(role="user", content=prompt)],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except ProviderError as exc:
            raise DigestGenerationError(
                f"Summarization failed: {exc}",
                user_name=user.name,
                digest_type=digest_type,
            ) from exc

        try:
            summary = extract_ai_response(response.content)
        except DigestParseError as exc:
            self.logger.error(
                "Unparseable summarization response",
                extra={
                    "user_name": user.name,
                    "digest_type": str(digest_type),
                    "error": exc.message,
                    "raw_response": response.content[:RAW_RESPONSE_LOG_LIMIT],
                },
            )
            raise DigestParseError(
                exc.message,
                raw_response=exc.raw_response,
                user_name=user.name,
                digest_type=digest_type,
            ) from exc

        limit = self._settings.digest_task_limit
        payload = DigestPayload(
            greeting=f"{GREETINGS[digest_type]}, {user.name}!",
            overdue_tasks=TaskSection(
                count=len(user_overdue),
                summary=summary.overdue_summary,
                tasks=_digest_tasks(user_overdue[:limit]),
            ),
            todays_tasks=TaskSection(
                count=len(user_today),
                summary=summary.today_summary,
                tasks=_digest_tasks(user_today[:limit]),
            ),
            team_activity=ActivitySection(
                summary=summary.team_activity_summary,
                highlights=summary.team_highlights[: self._settings.digest_highlight_limit],
                completed_yesterday=len(completed),
            ),
            focus_suggestion=summary.focus_suggestion,
            generated_at=as_of,
        )
        digest_generation_duration_seconds.labels(digest_type=str(digest_type)).observe(
            time.perf_counter() - start,
        )
        return payload

    async def _read[R](self, query: Callable[[AsyncSession], Awaitable[R]]) -> R:
        async with self._session_factory() as session:
            return await query(session)


def _digest_tasks(tasks: Sequence[Task]) -> list[DigestTask]:
    return [
        DigestTask(
            id=task.id,
            text=task.text,
            priority=task.priority,
            due_date=task.due_date,
            assigned_to=task.assigned_to,
            status=task.status,
        )
        for task in tasks
    ]
