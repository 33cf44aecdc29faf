"""Push channel: fan a notice out to every subscription of the recipient."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from taskdesk_service.features.notifications.channels.base import DeliveryResult
from taskdesk_service.features.notifications.metrics import push_subscriptions_pruned_total
from taskdesk_service.features.notifications.repository import (
    get_push_subscription_repository,
)
from taskdesk_service.infra.push import PushSendResult

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from taskdesk_service.features.notifications.channels.base import Notice
    from taskdesk_service.infra.push import PushTransport

logger = logging.getLogger(__name__)


class PushChannel:
    """Deliver a notice to all of a user's browser push subscriptions.

    Succeeds when at least one subscription accepted the payload. A user with
    no subscriptions is a failed delivery (``no_subscriptions``). Endpoints the
    push service reports as gone (404/410) are deleted.
    """

    def __init__(
        self,
        transport: PushTransport,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._transport = transport
        self._session_factory = session_factory
        self._repository = get_push_subscription_repository()

    async def send(self, notice: Notice) -> DeliveryResult:
        start_time = time.time()
        try:
            return await self._send(notice, start_time)
        except Exception as exc:
            logger.exception(
                "Push delivery raised",
                extra={"recipient": notice.recipient_name, "channel": "push"},
            )
            return DeliveryResult(
                success=False,
                error_message=str(exc) or type(exc).__name__,
                error_category="exception",
                response_time_ms=_elapsed_ms(start_time),
            )

    async def _send(self, notice: Notice, start_time: float) -> DeliveryResult:
        async with self._session_factory() as session:
            subscriptions = await self._repository.find_for_user(session, notice.recipient_id)
            targets = [(sub.id, sub.to_subscription_info()) for sub in subscriptions]

        if not targets:
            return DeliveryResult(
                success=False,
                error_message=f"{notice.recipient_name} has no push subscriptions",
                error_category="no_subscriptions",
                response_time_ms=_elapsed_ms(start_time),
            )

        body = notice.payload.to_json()
        outcomes = await asyncio.gather(
            *(
                self._transport.deliver(info, body, urgency=notice.payload.urgency)
                for _, info in targets
            ),
            return_exceptions=True,
        )
        results: list[PushSendResult] = []
        raised = 0
        for (sub_id, _), outcome in zip(targets, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                raised += 1
                logger.warning(
                    "Push to one subscription raised",
                    extra={"recipient": notice.recipient_name, "subscription_id": str(sub_id)},
                    exc_info=outcome,
                )
                outcome = PushSendResult(ok=False, error=str(outcome) or type(outcome).__name__)
            results.append(outcome)

        gone = [sub_id for (sub_id, _), result in zip(targets, results, strict=True) if result.subscription_gone]
        if gone:
            await self._prune(gone, notice.recipient_name)

        delivered = sum(1 for result in results if result.ok)
        metadata: dict[str, str | int | bool] = {
            "subscriptions": len(targets),
            "delivered": delivered,
            "pruned": len(gone),
            "errored": raised,
        }
        if delivered:
            return DeliveryResult(
                success=True,
                response_time_ms=_elapsed_ms(start_time),
                metadata=metadata,
            )

        if raised == len(targets):
            category = "exception"
        elif len(gone) == len(targets):
            category = "subscription_gone"
        else:
            category = "push_rejected"
        errors = "; ".join(result.error or "push rejected" for result in results)
        return DeliveryResult(
            success=False,
            error_message=errors,
            error_category=category,
            response_time_ms=_elapsed_ms(start_time),
            metadata=metadata,
        )


    async def _prune(self, subscription_ids: list, recipient_name: str) -> None:
        async with self._session_factory() as session:
            removed = await self._repository.delete_by_ids(session, subscription_ids)
            await session.commit()
        push_subscriptions_pruned_total.inc(removed)
        logger.info(
            "Removed stale push subscriptions",
            extra={"recipient": recipient_name, "count": removed},
        )

    def get_channel_name(self) -> str:
        return "push"


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)
