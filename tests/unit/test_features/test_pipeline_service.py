"""Unit tests for the scheduler-triggered batches."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import select

from taskdesk_service.core.database import utcnow
from taskdesk_service.core.models import Reminder
from taskdesk_service.core.settings import PipelineSettings
from taskdesk_service.features.digests.assembler import DigestAssembler
from taskdesk_service.features.digests.models import DigestType
from taskdesk_service.features.digests.service import DigestService
from taskdesk_service.features.notifications.channels import PushChannel
from taskdesk_service.features.notifications.dispatcher import build_reminder_dispatcher
from taskdesk_service.features.pipeline.service import PipelineService, drain_inflight
from taskdesk_service.features.reminders.models import ReminderChannel, ReminderStatus
from tests.utils import SCHEDULER_KEY, FakeLLMProvider, ModelFactory, provider_down

LA = ZoneInfo("America/Los_Angeles")
MORNING = datetime(2026, 6, 1, 5, 0, tzinfo=LA)


class FlakyDispatcher:
    """Delegates to a real dispatcher but crashes on one reminder."""

    def __init__(self, inner, failing_id) -> None:
        self.inner = inner
        self.failing_id = failing_id

    async def dispatch(self, session, reminder, *args):
        if reminder.id == self.failing_id:
            raise RuntimeError("dispatcher crashed")
        return await self.inner.dispatch(session, reminder, *args)


def make_pipeline(session_factory, push_transport, *, llm=None, dispatcher=None, **overrides):
    settings = PipelineSettings(api_key=SCHEDULER_KEY, **overrides)
    assembler = (
        DigestAssembler(session_factory, llm, settings=settings, tz=LA) if llm is not None else None
    )
    return PipelineService(
        session_factory,
        dispatcher or build_reminder_dispatcher(push_transport, session_factory, settings=settings, tz=LA),
        DigestService(session_factory, assembler, settings=settings, tz=LA),
        PushChannel(push_transport, session_factory),
        settings=settings,
        tz=LA,
    )


async def statuses(session_factory) -> dict:
    async with session_factory() as session:
        rows = (await session.execute(select(Reminder))).scalars().all()
    return {row.id: row.status for row in rows}


@pytest.fixture
async def alice(db_session):
    user = await ModelFactory.user(db_session, "alice")
    await ModelFactory.subscription(db_session, user, "https://push.example/alice")
    return user


@pytest.mark.unit
class TestProcessReminders:
    """Scan, per-reminder dispatch and aggregate counts."""

    async def test_mixed_batch(self, db_session, session_factory, pipeline_service, push_transport, alice):
        past = utcnow() - timedelta(minutes=2)
        open_task = await ModelFactory.task(db_session, due_date=utcnow() + timedelta(minutes=20))
        done_task = await ModelFactory.task(db_session, "Filed taxes", completed=True)
        orphan_task = await ModelFactory.task(db_session, "Nobody's job", assigned_to=None)

        sent = await ModelFactory.reminder(db_session, open_task, trigger_time=past)
        cancelled = await ModelFactory.reminder(db_session, done_task, trigger_time=past)
        failed = await ModelFactory.reminder(db_session, orphan_task, trigger_time=past)
        future = await ModelFactory.reminder(
            db_session, open_task, trigger_time=utcnow() + timedelta(hours=1),
        )
        await ModelFactory.reminder(
            db_session, open_task, trigger_time=past, status=ReminderStatus.SENT,
        )

        result = await pipeline_service.process_reminders()

        assert (result.processed, result.sent, result.failed, result.cancelled) == (3, 1, 1, 1)
        assert len(push_transport.deliveries) == 1
        stored = await statuses(session_factory)
        assert stored[sent.id] == ReminderStatus.SENT
        assert stored[cancelled.id] == ReminderStatus.CANCELLED
        assert stored[failed.id] == ReminderStatus.PENDING
        assert stored[future.id] == ReminderStatus.PENDING

        rerun = await pipeline_service.process_reminders()

        assert (rerun.processed, rerun.sent, rerun.failed) == (1, 0, 1)

    async def test_rerun_delivers_nothing_twice(self, db_session, pipeline_service, push_transport, alice):
        task = await ModelFactory.task(db_session)
        for minutes in (1, 2, 3):
            await ModelFactory.reminder(
                db_session, task, trigger_time=utcnow() - timedelta(minutes=minutes),
            )

        first = await pipeline_service.process_reminders()
        second = await pipeline_service.process_reminders()

        assert first.sent == 3
        assert second.processed == 0
        assert len(push_transport.deliveries) == 3

    async def test_empty_scan(self, pipeline_service):
        result = await pipeline_service.process_reminders()

        assert result.processed == 0
        assert result.duration_ms >= 0

    async def test_crashing_unit_does_not_stop_batch(
        self, db_session, session_factory, push_transport, tz, alice,
    ):
        task = await ModelFactory.task(db_session)
        good = await ModelFactory.reminder(db_session, task, trigger_time=utcnow() - timedelta(minutes=2))
        bad = await ModelFactory.reminder(db_session, task, trigger_time=utcnow() - timedelta(minutes=1))
        settings = PipelineSettings(api_key=SCHEDULER_KEY)
        inner = build_reminder_dispatcher(push_transport, session_factory, settings=settings, tz=tz)
        service = make_pipeline(
            session_factory, push_transport, dispatcher=FlakyDispatcher(inner, bad.id),
        )

        result = await service.process_reminders()

        assert (result.processed, result.sent, result.failed) == (2, 1, 1)
        stored = await statuses(session_factory)
        assert stored[good.id] == ReminderStatus.SENT
        assert stored[bad.id] == ReminderStatus.PENDING

    async def test_scan_failure_raises(self, pipeline_service, monkeypatch):
        async def broken_scan(session, now):
            raise RuntimeError("relation reminders does not exist")

        monkeypatch.setattr(pipeline_service._reminders, "find_due", broken_scan)

        with pytest.raises(RuntimeError, match="does not exist"):
            await pipeline_service.process_reminders()

    async def test_concurrency_is_bounded(self, db_session, session_factory, push_transport, alice):
        task = await ModelFactory.task(db_session)
        for minutes in range(1, 7):
            await ModelFactory.reminder(
                db_session,
                task,
                trigger_time=utcnow() - timedelta(minutes=minutes),
                channel=ReminderChannel.PUSH,
            )
        push_transport.delay = 0.05
        service = make_pipeline(session_factory, push_transport, max_concurrency=2)

        result = await service.process_reminders()

        assert result.sent == 6
        assert 1 <= push_transport.max_active <= 2


@pytest.mark.unit
class TestGenerateDigests:
    async def test_generates_and_notifies(self, db_session, session_factory, push_transport, alice):
        await ModelFactory.user(db_session, "bob")
        await ModelFactory.user(db_session, "carol", is_active=False)
        await ModelFactory.task(db_session, due_date=datetime(2026, 6, 1, 11, 0, tzinfo=LA))
        llm = FakeLLMProvider()
        service = make_pipeline(session_factory, push_transport, llm=llm)

        result = await service.generate_digests(DigestType.MORNING, now=MORNING)

        assert (result.users, result.generated, result.reused, result.failed) == (2, 2, 0, 0)
        assert result.notified == 1
        assert [r.user_name for r in result.results] == ["alice", "bob"]
        assert len(llm.prompts) == 2
        notice = push_transport.deliveries[0].payload
        assert notice["type"] == "digest_ready"
        assert notice["tag"] == "digest-morning"
        assert notice["title"] == "Your Daily Briefing is Ready"
        assert notice["body"] == "Good morning! 1 task due today. Tap to view your briefing."

    async def test_second_trigger_reuses(self, db_session, session_factory, push_transport, alice):
        llm = FakeLLMProvider()
        service = make_pipeline(session_factory, push_transport, llm=llm)

        await service.generate_digests(DigestType.MORNING, now=MORNING)
        again = await service.generate_digests(DigestType.MORNING, now=MORNING + timedelta(minutes=15))

        assert (again.generated, again.reused, again.notified) == (0, 1, 0)
        assert len(llm.prompts) == 1
        assert len(push_transport.deliveries) == 1

    async def test_notice_can_be_disabled(self, session_factory, push_transport, alice):
        service = make_pipeline(
            session_factory, push_transport, llm=FakeLLMProvider(), notify_digest_ready=False,
        )

        result = await service.generate_digests(DigestType.MORNING, now=MORNING)

        assert result.generated == 1
        assert result.notified == 0
        assert push_transport.deliveries == []

    async def test_summarization_failure_is_reported(self, session_factory, push_transport, alice):
        service = make_pipeline(session_factory, push_transport, llm=FakeLLMProvider(error=provider_down()))

        result = await service.generate_digests(DigestType.MORNING, now=MORNING)

        assert result.failed == 1
        assert result.results[0].status == "failed"
        assert "Summarization failed" in result.results[0].error
        assert push_transport.deliveries == []

    async def test_type_derived_from_local_time(self, session_factory, push_transport, alice):
        service = make_pipeline(session_factory, push_transport, llm=FakeLLMProvider())

        result = await service.generate_digests(now=datetime(2026, 6, 1, 16, 0, tzinfo=LA))

        assert result.digest_type == DigestType.AFTERNOON

    async def test_without_summarization_every_user_fails(self, session_factory, push_transport, alice):
        service = make_pipeline(session_factory, push_transport)

        result = await service.generate_digests(DigestType.MORNING, now=MORNING)

        assert result.failed == 1
        assert result.results[0].error == "Summarization service is not configured"


@pytest.mark.unit
class TestCancellation:
    """A cancelled trigger finishes started units and never starts the rest."""

    async def test_started_unit_settles_after_cancel(self, db_session, session_factory, push_transport, alice):
        task = await ModelFactory.task(db_session)
        for minutes in (1, 2, 3):
            await ModelFactory.reminder(
                db_session,
                task,
                trigger_time=utcnow() - timedelta(minutes=minutes),
                channel=ReminderChannel.PUSH,
            )
        push_transport.delay = 0.2
        service = make_pipeline(session_factory, push_transport, max_concurrency=1)

        batch = asyncio.create_task(service.process_reminders())
        for _ in range(200):
            if push_transport.active:
                break
            await asyncio.sleep(0.01)
        assert push_transport.active == 1

        batch.cancel()
        with pytest.raises(asyncio.CancelledError):
            await batch
        drained = await drain_inflight()

        assert drained == 1
        assert len(push_transport.deliveries) == 1
        async with session_factory() as session:
            rows = (await session.execute(select(Reminder))).scalars().all()
        assert sorted(row.status for row in rows) == [
            ReminderStatus.PENDING,
            ReminderStatus.PENDING,
            ReminderStatus.SENT,
        ]
        assert all(row.attempt_count == 0 for row in rows)
        assert all(row.last_error is None for row in rows if row.status == ReminderStatus.PENDING)

    async def test_drain_with_nothing_in_flight(self):
        assert await drain_inflight() == 0


@pytest.mark.unit
class TestDigestOnlyPipeline:
    """Digest batches built without a dispatcher or push channel."""

    def make(self, session_factory, **overrides):
        settings = PipelineSettings(api_key=SCHEDULER_KEY, **overrides)
        assembler = DigestAssembler(session_factory, FakeLLMProvider(), settings=settings, tz=LA)
        return PipelineService(
            session_factory,
            None,
            DigestService(session_factory, assembler, settings=settings, tz=LA),
            None,
            settings=settings,
            tz=LA,
        )

    async def test_generates_without_push_channel(self, session_factory, alice):
        service = self.make(session_factory)

        result = await service.generate_digests(DigestType.MORNING, now=MORNING)

        assert (result.generated, result.notified, result.failed) == (1, 0, 0)

    async def test_reminder_processing_needs_dispatcher(self, session_factory):
        service = self.make(session_factory)

        with pytest.raises(RuntimeError, match="without a reminder dispatcher"):
            await service.process_reminders()
