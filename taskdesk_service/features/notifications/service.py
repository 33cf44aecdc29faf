"""Service layer for a user's browser push subscriptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from taskdesk_service.core.database import utcnow
from taskdesk_service.core.services.base import BaseService
from taskdesk_service.features.notifications.models import PushSubscription
from taskdesk_service.features.notifications.repository import (
    PushSubscriptionRepository,
    get_push_subscription_repository,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from taskdesk_service.core.models import User
    from taskdesk_service.features.notifications.schemas import PushSubscriptionCreate


class PushSubscriptionService(BaseService):
    """Register, list and remove the endpoints the push channel sends to."""

    def __init__(
        self,
        session: AsyncSession,
        repository: PushSubscriptionRepository | None = None,
    ) -> None:
        super().__init__()
        self._session = session
        self._repository = repository or get_push_subscription_repository()

    async def subscribe(self, actor: User, payload: PushSubscriptionCreate) -> tuple[PushSubscription, bool]:
        """Upsert by endpoint. Returns the row and whether it was new.

        An endpoint already registered to another user moves to the actor,
        since a browser profile has one endpoint per service worker.
        """
        existing = await self._repository.get_by(self._session, PushSubscription.endpoint, payload.endpoint)
        if existing is None:
            subscription = await self._repository.create(
                self._session,
                PushSubscription(
                    user_id=actor.id,
                    endpoint=payload.endpoint,
                    p256dh=payload.keys.p256dh,
                    auth=payload.keys.auth,
                    user_agent=payload.user_agent,
                ),
            )
        else:
            if existing.user_id != actor.id:
                self.logger.info(
                    "Push endpoint moved to another user",
                    extra={"subscription_id": str(existing.id), "user_id": str(actor.id)},
                )
            existing.user_id = actor.id
            existing.p256dh = payload.keys.p256dh
            existing.auth = payload.keys.auth
            existing.user_agent = payload.user_agent or existing.user_agent
            existing.updated_at = utcnow()
            await self._session.flush()
            subscription = existing
        await self._session.commit()

        self.logger.info(
            "Push subscription stored",
            extra={
                "subscription_id": str(subscription.id),
                "user_id": str(actor.id),
                "created": existing is None,
                "operation": "service.subscribe",
            },
        )
        return subscription, existing is None

    async def list_subscriptions(self, actor: User) -> Sequence[PushSubscription]:
        return await self._repository.find_for_user(self._session, actor.id)

    async def unsubscribe(self, actor: User, endpoint: str | None = None) -> int:
        """Remove one endpoint, or every endpoint of the actor when omitted.

        Only the actor's own rows are touched. Returns the number removed.
        """
        removed = await self._repository.delete_for_user(self._session, actor.id, endpoint)
        await self._session.commit()
        self.logger.info(
            "Push subscriptions removed",
            extra={
                "user_id": str(actor.id),
                "removed": removed,
                "all": endpoint is None,
                "operation": "service.unsubscribe",
            },
        )
        return removed


__all__ = ["PushSubscriptionService"]
