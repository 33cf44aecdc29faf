"""API router for browser push subscriptions."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from taskdesk_service.core.dependencies import CurrentUserDep, SessionDep
from taskdesk_service.features.notifications.schemas import (
    PushSubscriptionCreate,
    PushSubscriptionResponse,
)
from taskdesk_service.features.notifications.service import PushSubscriptionService

router = APIRouter(prefix="/push/subscriptions", tags=["notifications"])


def get_push_subscription_service(session: SessionDep) -> PushSubscriptionService:
    return PushSubscriptionService(session)


PushSubscriptionServiceDep = Annotated[PushSubscriptionService, Depends(get_push_subscription_service)]


@router.post(
    "",
    response_model=PushSubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a push subscription",
    responses={200: {"description": "Endpoint already registered; keys refreshed"}},
)
async def subscribe(
    payload: PushSubscriptionCreate,
    actor: CurrentUserDep,
    service: PushSubscriptionServiceDep,
    response: Response,
) -> PushSubscriptionResponse:
    """Store the browser's subscription for the calling user.

    Re-posting a known endpoint updates its keys instead of adding a row.
    """
    subscription, created = await service.subscribe(actor, payload)
    if not created:
        response.status_code = status.HTTP_200_OK
    return PushSubscriptionResponse.model_validate(subscription)


@router.get(
    "",
    response_model=list[PushSubscriptionResponse],
    summary="List the caller's push subscriptions",
)
async def list_subscriptions(
    actor: CurrentUserDep,
    service: PushSubscriptionServiceDep,
) -> list[PushSubscriptionResponse]:
    subscriptions = await service.list_subscriptions(actor)
    return [PushSubscriptionResponse.model_validate(s) for s in subscriptions]


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove push subscriptions",
    description="Removes the given endpoint, or all of the caller's endpoints when omitted.",
)
async def unsubscribe(
    actor: CurrentUserDep,
    service: PushSubscriptionServiceDep,
    endpoint: Annotated[str | None, Query(min_length=1)] = None,
) -> Response:
    await service.unsubscribe(actor, endpoint)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
