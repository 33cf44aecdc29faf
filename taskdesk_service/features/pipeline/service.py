"""Scheduler-triggered batches: reminder processing and digest generation.

Each reminder and each user's digest is an independent unit of work run
under a semaphore. A unit that has started is shielded from cancellation of
the surrounding request, so a caller timeout never leaves a reminder whose
status disagrees with what its channels actually did. Units still waiting
for the semaphore are simply not started.
"""

from __future__ import annotations

import asyncio
import time
from functools import partial
from typing import TYPE_CHECKING, Any

from taskdesk_service.core.database import utcnow
from taskdesk_service.core.repositories import get_user_repository
from taskdesk_service.core.services.base import BaseService
from taskdesk_service.features.digests.exceptions import DigestGenerationError
from taskdesk_service.features.digests.metrics import digest_notice_total
from taskdesk_service.features.digests.schemas import DigestPayload
from taskdesk_service.features.digests.windows import digest_type_for
from taskdesk_service.features.notifications.channels import Notice
from taskdesk_service.features.notifications.messages import PUSH_TITLES, digest_ready_body
from taskdesk_service.features.notifications.schemas import NotificationType, PushPayload
from taskdesk_service.features.pipeline.metrics import (
    pipeline_batch_duration_seconds,
    pipeline_runs_total,
    pipeline_unit_errors_total,
)
from taskdesk_service.features.pipeline.schemas import (
    DigestGenerateResponse,
    ReminderProcessResponse,
    UserDigestResult,
)
from taskdesk_service.features.reminders.recipients import resolve_recipient
from taskdesk_service.features.reminders.repository import get_reminder_repository
from taskdesk_service.features.tasks.repository import get_task_repository
from taskdesk_service.infra.logging import log_context

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine
    from datetime import datetime
    from uuid import UUID
    from zoneinfo import ZoneInfo

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from taskdesk_service.core.models import User
    from taskdesk_service.core.settings import PipelineSettings
    from taskdesk_service.features.digests.models import Digest, DigestType
    from taskdesk_service.features.digests.service import DigestService
    from taskdesk_service.features.notifications.channels import NotificationChannel
    from taskdesk_service.features.notifications.dispatcher import ReminderDispatcher

DIGEST_NOTICE_GREETINGS = {"morning": "Good morning!", "afternoon": "Good afternoon!"}

# Started units, referenced until done
_INFLIGHT: set[asyncio.Task[Any]] = set()


class PipelineService(BaseService):
    """Entry points invoked by the external scheduler.

    A service built for digests only has no ``dispatcher``, and no
    ``push_channel`` when digest-ready notices are off.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dispatcher: ReminderDispatcher | None,
        digest_service: DigestService,
        push_channel: NotificationChannel | None,
        *,
        settings: PipelineSettings,
        tz: ZoneInfo,
    ) -> None:
        super().__init__()
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._digests = digest_service
        self._push = push_channel
        self._settings = settings
        self._tz = tz
        self._reminders = get_reminder_repository()
        self._tasks = get_task_repository()
        self._users = get_user_repository()

    # ──────────────────────────────────────────────
    # Reminders
    # ──────────────────────────────────────────────

    async def process_reminders(self, now: datetime | None = None) -> ReminderProcessResponse:
        """Scan for due reminders and dispatch each one independently.

        A failing scan query raises; failures of individual reminders are
        counted and logged.
        """
        if self._dispatcher is None:
            msg = "PipelineService was built without a reminder dispatcher"
            raise RuntimeError(msg)
        now = now or utcnow()
        start = time.perf_counter()
        try:
            async with self._session_factory() as session:
                due_ids = [reminder.id for reminder in await self._reminders.find_due(session, now)]
        except Exception:
            pipeline_runs_total.labels(operation="process_reminders", result="error").inc()
            self.logger.exception("Reminder scan failed", extra={"operation": "pipeline.process_reminders"})
            raise

        labels = await self._run_units(
            "process_reminders",
            [partial(self._process_one, reminder_id, now) for reminder_id in due_ids],
        )

        duration = time.perf_counter() - start
        response = ReminderProcessResponse(
            processed=len(due_ids),
            sent=labels.count("sent"),
            failed=labels.count("failed"),
            cancelled=labels.count("cancelled"),
            timestamp=now,
            duration_ms=int(duration * 1000),
        )
        pipeline_runs_total.labels(operation="process_reminders", result="completed").inc()
        pipeline_batch_duration_seconds.labels(operation="process_reminders").observe(duration)
        self.logger.info(
            "Reminder batch complete",
            extra={
                "processed": response.processed,
                "sent": response.sent,
                "failed": response.failed,
                "cancelled": response.cancelled,
                "duration_ms": response.duration_ms,
                "operation": "pipeline.process_reminders",
            },
        )
        return response

    async def _process_one(self, reminder_id: UUID, now: datetime) -> str:
        with log_context(reminder_id=str(reminder_id)):
            return await self._dispatch_one(reminder_id, now)

    async def _dispatch_one(self, reminder_id: UUID, now: datetime) -> str:
        async with self._session_factory() as session:
            reminder = await self._reminders.get(session, reminder_id)
            if reminder is None or not reminder.is_pending:
                # Handled by an overlapping trigger or changed by a user since the scan
                self._lazy.debug(lambda: f"Reminder {reminder_id} no longer pending, skipping")
                return "skipped"
            task = await self._tasks.get_or_raise(session, reminder.task_id)
            recipient = await resolve_recipient(session, reminder, task)
            outcome = await self._dispatcher.dispatch(session, reminder, task, recipient, now)
            return outcome.label

    # ──────────────────────────────────────────────
    # Digests
    # ──────────────────────────────────────────────

    async def generate_digests(
        self,
        digest_type: DigestType | None = None,
        now: datetime | None = None,
    ) -> DigestGenerateResponse:
        """Get-or-create a digest for every active user.

        Omitting ``digest_type`` picks morning before local noon. A user whose
        generation fails is reported and skipped.
        """
        now = now or utcnow()
        digest_type = digest_type or digest_type_for(now, self._tz)
        start = time.perf_counter()

        async with self._session_factory() as session:
            users = list(await self._users.find_active(session))

        outcomes = await self._run_units(
            "generate_digests",
            [partial(self._generate_one, user, digest_type, now) for user in users],
        )
        results = [
            outcome
            if isinstance(outcome, UserDigestResult)
            else UserDigestResult(user_name=user.name, status="failed", error="unexpected error")
            for user, outcome in zip(users, outcomes, strict=True)
        ]

        duration = time.perf_counter() - start
        response = DigestGenerateResponse(
            digest_type=digest_type,
            users=len(users),
            generated=sum(1 for r in results if r.status == "generated"),
            reused=sum(1 for r in results if r.status == "reused"),
            notified=sum(1 for r in results if r.notified),
            failed=sum(1 for r in results if r.status == "failed"),
            timestamp=now,
            duration_ms=int(duration * 1000),
            results=results,
        )
        pipeline_runs_total.labels(operation="generate_digests", result="completed").inc()
        pipeline_batch_duration_seconds.labels(operation="generate_digests").observe(duration)
        self.logger.info(
            "Digest batch complete",
            extra={
                "digest_type": str(digest_type),
                "users": response.users,
                "generated": response.generated,
                "reused": response.reused,
                "notified": response.notified,
                "failed": response.failed,
                "duration_ms": response.duration_ms,
                "operation": "pipeline.generate_digests",
            },
        )
        return response

    async def _generate_one(self, user: User, digest_type: DigestType, now: datetime) -> UserDigestResult:
        with log_context(user_id=str(user.id), digest_type=str(digest_type)):
            return await self._generate_for(user, digest_type, now)

    async def _generate_for(
        self,
        user: User,
        digest_type: DigestType,
        now: datetime,
    ) -> UserDigestResult:
        try:
            digest, is_new = await self._digests.get_or_create(user, digest_type, now)
        except DigestGenerationError as exc:
            self.logger.warning(
                "Digest generation failed for user",
                extra={
                    "user_id": str(user.id),
                    "digest_type": str(digest_type),
                    "error": exc.message,
                },
            )
            return UserDigestResult(user_name=user.name, status="failed", error=exc.message)

        notified = False
        if is_new and self._push is not None and self._settings.notify_digest_ready:
            notified = await self._send_digest_notice(user, digest)
        return UserDigestResult(
            user_name=user.name,
            status="generated" if is_new else "reused",
            digest_id=digest.id,
            notified=notified,
        )

    async def _send_digest_notice(self, user: User, digest: Digest) -> bool:
        payload = DigestPayload.model_validate(digest.payload)
        body = digest_ready_body(
            DIGEST_NOTICE_GREETINGS.get(digest.digest_type, "Hello!"),
            payload.todays_tasks.count,
            payload.overdue_tasks.count,
        )
        push_payload = PushPayload.for_type(
            NotificationType.DIGEST_READY,
            title=PUSH_TITLES[NotificationType.DIGEST_READY],
            body=body,
            tag=f"digest-{digest.digest_type}",
            url="/?view=dashboard",
            digest_id=digest.id,
        )
        result = await self._push.send(
            Notice(recipient_id=user.id, recipient_name=user.name, payload=push_payload),
        )
        digest_notice_total.labels(result="sent" if result.success else "failed").inc()
        if not result.success:
            self._lazy.debug(
                lambda: f"Digest notice for {user.name} not delivered: {result.error_category}",
            )
        return result.success

    # ──────────────────────────────────────────────
    # Concurrency
    # ──────────────────────────────────────────────

    async def _run_units(
        self,
        operation: str,
        units: list[Callable[[], Coroutine[Any, Any, Any]]],
    ) -> list[Any]:
        """Run unit factories with bounded concurrency.

        A unit is only created once it holds the semaphore. Exceptions become
        ``"failed"``.
        """
        semaphore = asyncio.Semaphore(self._settings.max_concurrency)

        async def bounded(unit: Callable[[], Coroutine[Any, Any, Any]]) -> Any:
            async with semaphore:
                task = asyncio.ensure_future(unit())
                _INFLIGHT.add(task)
                task.add_done_callback(_INFLIGHT.discard)
                try:
                    return await asyncio.shield(task)
                except Exception:
                    pipeline_unit_errors_total.labels(operation=operation).inc()
                    self.logger.exception(
                        "Unit of batch work failed",
                        extra={"operation": f"pipeline.{operation}"},
                    )
                    return "failed"

        return await asyncio.gather(*(bounded(unit) for unit in units))


async def drain_inflight() -> int:
    """Wait for shielded units that outlived a cancelled batch request.

    Returns how many were still running.
    """
    pending = list(_INFLIGHT)
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
    return len(pending)
