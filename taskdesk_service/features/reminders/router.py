"""API router for reminder management."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from taskdesk_service.core.dependencies import CurrentUserDep, SessionDep
from taskdesk_service.core.settings import get_app_settings
from taskdesk_service.features.reminders.models import ReminderStatus
from taskdesk_service.features.reminders.schemas import (
    ReminderCreate,
    ReminderResponse,
    ReminderUpdate,
)
from taskdesk_service.features.reminders.service import ReminderService

router = APIRouter(prefix="/reminders", tags=["reminders"])


def get_reminder_service(session: SessionDep) -> ReminderService:
    return ReminderService(session, tz=get_app_settings().tzinfo)


ReminderServiceDep = Annotated[ReminderService, Depends(get_reminder_service)]


@router.post(
    "",
    response_model=ReminderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a reminder",
    responses={
        403: {"description": "Actor cannot manage the task"},
        404: {"description": "Task or recipient not found"},
        422: {"description": "Trigger time not in the future, or task completed"},
    },
)
async def create_reminder(
    payload: ReminderCreate,
    actor: CurrentUserDep,
    service: ReminderServiceDep,
) -> ReminderResponse:
    """Create a reminder for a task.

    Omit ``user_id`` to notify whoever is assigned to the task when the
    reminder fires.
    """
    reminder = await service.create_reminder(actor, payload)
    return ReminderResponse.model_validate(reminder)


@router.get(
    "",
    response_model=list[ReminderResponse],
    summary="List reminders",
    description="Filter by task or recipient; with neither, the caller's own reminders.",
)
async def list_reminders(
    actor: CurrentUserDep,
    service: ReminderServiceDep,
    task_id: UUID | None = None,
    user_id: UUID | None = None,
    status_filter: Annotated[ReminderStatus | None, Query(alias="status")] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[ReminderResponse]:
    reminders = await service.list_reminders(
        actor,
        task_id=task_id,
        user_id=user_id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return [ReminderResponse.model_validate(reminder) for reminder in reminders]


@router.patch(
    "/{reminder_id}",
    response_model=ReminderResponse,
    summary="Reschedule, cancel or edit a reminder",
    responses={
        404: {"description": "Reminder not found"},
        409: {"description": "Reminder already sent or cancelled"},
    },
)
async def update_reminder(
    reminder_id: UUID,
    payload: ReminderUpdate,
    actor: CurrentUserDep,
    service: ReminderServiceDep,
) -> ReminderResponse:
    reminder = await service.update_reminder(actor, reminder_id, payload)
    return ReminderResponse.model_validate(reminder)


@router.delete(
    "/{reminder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a reminder",
    responses={404: {"description": "Reminder not found"}},
)
async def delete_reminder(
    reminder_id: UUID,
    actor: CurrentUserDep,
    service: ReminderServiceDep,
) -> Response:
    await service.delete_reminder(actor, reminder_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/tasks/{task_id}/defaults",
    response_model=list[ReminderResponse],
    summary="Refresh a task's automatic reminders",
    description=(
        "Replaces the task's pending automatic reminders with ones a day and an hour "
        "before its current due date. Manual reminders are kept."
    ),
    responses={
        403: {"description": "Actor cannot manage the task"},
        404: {"description": "Task not found"},
    },
)
async def refresh_default_reminders(
    task_id: UUID,
    actor: CurrentUserDep,
    service: ReminderServiceDep,
) -> list[ReminderResponse]:
    reminders = await service.refresh_default_reminders(actor, task_id)
    return [ReminderResponse.model_validate(reminder) for reminder in reminders]
