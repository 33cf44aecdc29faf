"""Integration tests for the reminders API against a real database."""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from taskdesk_service.core.database import utcnow
from taskdesk_service.core.models import Task
from taskdesk_service.features.reminders.service import COMPLETED_TASK_MESSAGE, PAST_TRIGGER_MESSAGE
from tests.utils import ModelFactory

BASE = "/api/v1/reminders"
ALICE = {"X-User-Name": "alice"}


@pytest.fixture
async def alice(db_session):
    return await ModelFactory.user(db_session, "alice")


@pytest.fixture
async def task(db_session):
    return await ModelFactory.task(db_session, due_date=utcnow() + timedelta(days=2))


def in_future(**delta) -> str:
    return (utcnow() + timedelta(**delta)).isoformat()


@pytest.mark.integration
class TestReminderAuth:
    async def test_missing_user_header(self, client: AsyncClient):
        response = await client.get(BASE)

        assert response.status_code == 401
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["type"] == "missing-user"

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.get(BASE, headers={"X-User-Name": "mallory"})

        assert response.status_code == 401
        assert response.json()["type"] == "unknown-user"


@pytest.mark.integration
class TestCreateReminder:
    async def test_create_with_explicit_time(self, client: AsyncClient, db_session, alice, task):
        trigger = in_future(hours=3)

        response = await client.post(
            BASE,
            json={"task_id": str(task.id), "trigger_time": trigger, "message": "Bring receipts"},
            headers=ALICE,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["channel"] == "both"
        assert body["user_id"] is None
        assert body["created_by"] == "alice"
        assert body["attempt_count"] == 0

        db_session.expire_all()
        stored = (await db_session.execute(select(Task).where(Task.id == task.id))).scalar_one()
        assert stored.reminder_at is not None
        assert stored.reminder_sent is False

    async def test_create_with_preset(self, client: AsyncClient, alice, task):
        response = await client.post(
            BASE,
            json={"task_id": str(task.id), "preset": "1_hour_before", "channel": "push"},
            headers=ALICE,
        )

        assert response.status_code == 201
        assert response.json()["channel"] == "push"

    async def test_preset_without_due_date(self, client: AsyncClient, db_session, alice):
        undated = await ModelFactory.task(db_session, "Someday")

        response = await client.post(
            BASE, json={"task_id": str(undated.id), "preset": "morning_of"}, headers=ALICE,
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "preset"

    async def test_past_trigger_time(self, client: AsyncClient, alice, task):
        response = await client.post(
            BASE,
            json={"task_id": str(task.id), "trigger_time": in_future(minutes=-5)},
            headers=ALICE,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["detail"] == PAST_TRIGGER_MESSAGE
        assert body["errors"][0]["field"] == "trigger_time"

    async def test_completed_task(self, client: AsyncClient, db_session, alice):
        done = await ModelFactory.task(db_session, completed=True)

        response = await client.post(
            BASE,
            json={"task_id": str(done.id), "trigger_time": in_future(hours=1)},
            headers=ALICE,
        )

        assert response.status_code == 422
        assert response.json()["detail"] == COMPLETED_TASK_MESSAGE

    async def test_task_not_managed_by_actor(self, client: AsyncClient, db_session, alice):
        await ModelFactory.user(db_session, "bob")
        bobs = await ModelFactory.task(db_session, assigned_to="bob", created_by="bob")

        response = await client.post(
            BASE,
            json={"task_id": str(bobs.id), "trigger_time": in_future(hours=1)},
            headers=ALICE,
        )

        assert response.status_code == 403

    async def test_unknown_task(self, client: AsyncClient, alice):
        response = await client.post(
            BASE,
            json={"task_id": str(uuid4()), "trigger_time": in_future(hours=1)},
            headers=ALICE,
        )

        assert response.status_code == 404
        assert response.json()["type"] == "task-not-found"

    async def test_unknown_recipient(self, client: AsyncClient, alice, task):
        response = await client.post(
            BASE,
            json={"task_id": str(task.id), "trigger_time": in_future(hours=1), "user_id": str(uuid4())},
            headers=ALICE,
        )

        assert response.status_code == 404
        assert response.json()["type"] == "user-not-found"

    async def test_naive_trigger_time_rejected(self, client: AsyncClient, alice, task):
        response = await client.post(
            BASE,
            json={"task_id": str(task.id), "trigger_time": "2030-01-01T09:00:00"},
            headers=ALICE,
        )

        assert response.status_code == 422
        assert response.json()["type"] == "validation-error"


@pytest.mark.integration
class TestManageReminder:
    async def test_list_own_reminders(self, client: AsyncClient, db_session, alice, task):
        later = await ModelFactory.reminder(db_session, task, trigger_time=utcnow() + timedelta(hours=5))
        sooner = await ModelFactory.reminder(db_session, task, trigger_time=utcnow() + timedelta(hours=1))

        response = await client.get(BASE, headers=ALICE)

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [str(sooner.id), str(later.id)]

    async def test_list_filtered_by_status(self, client: AsyncClient, db_session, alice, task):
        from taskdesk_service.features.reminders.models import ReminderStatus

        await ModelFactory.reminder(db_session, task, trigger_time=utcnow() + timedelta(hours=1))
        await ModelFactory.reminder(
            db_session, task, trigger_time=utcnow() - timedelta(hours=1), status=ReminderStatus.SENT,
        )

        response = await client.get(BASE, params={"status": "sent", "task_id": str(task.id)}, headers=ALICE)

        assert [r["status"] for r in response.json()] == ["sent"]

    async def test_cancel_then_reschedule_conflicts(self, client: AsyncClient, db_session, alice, task):
        reminder = await ModelFactory.reminder(db_session, task, trigger_time=utcnow() + timedelta(hours=1))

        cancelled = await client.patch(f"{BASE}/{reminder.id}", json={"status": "cancelled"}, headers=ALICE)
        rescheduled = await client.patch(
            f"{BASE}/{reminder.id}", json={"trigger_time": in_future(hours=2)}, headers=ALICE,
        )
        edited = await client.patch(f"{BASE}/{reminder.id}", json={"message": "Never mind"}, headers=ALICE)

        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"
        assert rescheduled.status_code == 409
        assert rescheduled.json()["type"] == "reminder-terminal"
        assert edited.status_code == 200
        assert edited.json()["message"] == "Never mind"

    async def test_reschedule_into_past(self, client: AsyncClient, db_session, alice, task):
        reminder = await ModelFactory.reminder(db_session, task, trigger_time=utcnow() + timedelta(hours=1))

        response = await client.patch(
            f"{BASE}/{reminder.id}", json={"trigger_time": in_future(hours=-1)}, headers=ALICE,
        )

        assert response.status_code == 422

    async def test_delete(self, client: AsyncClient, db_session, alice, task):
        reminder = await ModelFactory.reminder(db_session, task, trigger_time=utcnow() + timedelta(hours=1))

        deleted = await client.delete(f"{BASE}/{reminder.id}", headers=ALICE)
        again = await client.delete(f"{BASE}/{reminder.id}", headers=ALICE)

        assert deleted.status_code == 204
        assert again.status_code == 404
        assert again.json()["type"] == "reminder-not-found"


@pytest.mark.integration
class TestDefaultReminders:
    async def test_refresh_follows_due_date(self, client: AsyncClient, db_session, alice, task):
        manual = await ModelFactory.reminder(db_session, task, trigger_time=utcnow() + timedelta(hours=3))

        first = await client.put(f"{BASE}/tasks/{task.id}/defaults", headers=ALICE)
        task.due_date = task.due_date + timedelta(days=1)
        await db_session.commit()
        second = await client.put(f"{BASE}/tasks/{task.id}/defaults", headers=ALICE)
        listed = await client.get(BASE, params={"task_id": str(task.id)}, headers=ALICE)

        assert first.status_code == 200
        assert second.status_code == 200
        assert len(second.json()) == 2
        assert all(r["is_automatic"] for r in second.json())
        body = listed.json()
        assert len(body) == 3
        assert {r["id"] for r in body if not r["is_automatic"]} == {str(manual.id)}
        assert {r["id"] for r in body if r["is_automatic"]} == {r["id"] for r in second.json()}

    async def test_unknown_task(self, client: AsyncClient, alice):
        response = await client.put(f"{BASE}/tasks/{uuid4()}/defaults", headers=ALICE)

        assert response.status_code == 404
        assert response.json()["type"] == "task-not-found"
