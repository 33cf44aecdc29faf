"""Data access for push subscriptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from taskdesk_service.core.database import BaseRepository
from taskdesk_service.features.notifications.models import InAppMessage, PushSubscription

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


class PushSubscriptionRepository(BaseRepository[PushSubscription]):
    """Repository for browser push subscriptions."""

    def __init__(self) -> None:
        super().__init__(PushSubscription)

    async def find_for_user(
        self,
        session: AsyncSession,
        user_id: UUID,
    ) -> Sequence[PushSubscription]:
        stmt = (
            select(PushSubscription)
            .where(PushSubscription.user_id == user_id)
            .order_by(PushSubscription.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_by_ids(self, session: AsyncSession, ids: Collection[UUID]) -> int:
        """Delete subscriptions by id. Returns the number of rows removed."""
        if not ids:
            return 0
        result = await session.execute(
            delete(PushSubscription).where(PushSubscription.id.in_(list(ids))),
        )
        await session.flush()
        count = result.rowcount or 0
        self._lazy.debug(lambda: f"db.delete_by_ids: PushSubscription -> {count} removed")
        return count

    async def delete_for_user(
        self,
        session: AsyncSession,
        user_id: UUID,
        endpoint: str | None = None,
    ) -> int:
        """Delete one of the user's subscriptions, or all of them without ``endpoint``."""
        stmt = delete(PushSubscription).where(PushSubscription.user_id == user_id)
        if endpoint is not None:
            stmt = stmt.where(PushSubscription.endpoint == endpoint)
        result = await session.execute(stmt)
        await session.flush()
        count = result.rowcount or 0
        self._lazy.debug(lambda: f"db.delete_for_user: PushSubscription user {user_id} -> {count} removed")
        return count


class InAppMessageRepository(BaseRepository[InAppMessage]):
    """Repository for in-app messages."""

    def __init__(self) -> None:
        super().__init__(InAppMessage)

    async def find_for_recipient(
        self,
        session: AsyncSession,
        recipient_id: UUID,
        *,
        limit: int = 50,
    ) -> Sequence[InAppMessage]:
        stmt = (
            select(InAppMessage)
            .where(InAppMessage.recipient_id == recipient_id)
            .order_by(InAppMessage.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


_subscription_repository: PushSubscriptionRepository | None = None
_message_repository: InAppMessageRepository | None = None


def get_push_subscription_repository() -> PushSubscriptionRepository:
    """Get PushSubscriptionRepository instance."""
    global _subscription_repository
    if _subscription_repository is None:
        _subscription_repository = PushSubscriptionRepository()
    return _subscription_repository


def get_in_app_message_repository() -> InAppMessageRepository:
    """Get InAppMessageRepository instance."""
    global _message_repository
    if _message_repository is None:
        _message_repository = InAppMessageRepository()
    return _message_repository
