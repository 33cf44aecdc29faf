"""In-app channel: writes a message into the recipient's feed."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from taskdesk_service.features.notifications.channels.base import DeliveryResult
from taskdesk_service.features.notifications.models import SYSTEM_SENDER, InAppMessage
from taskdesk_service.features.notifications.repository import get_in_app_message_repository
from taskdesk_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from taskdesk_service.features.notifications.channels.base import Notice

logger = logging.getLogger(__name__)
lazy_logger = get_lazy_logger(__name__)


class InAppChannel:
    """Deliver a notice as an in-app message from "System".

    The message is written and committed in its own session, so a failure
    here never rolls back the caller's reminder bookkeeping.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._repository = get_in_app_message_repository()

    async def send(self, notice: Notice) -> DeliveryResult:
        start_time = time.time()
        try:
            async with self._session_factory() as session:
                message = await self._repository.create(
                    session,
                    InAppMessage(
                        recipient_id=notice.recipient_id,
                        recipient_name=notice.recipient_name,
                        sender=SYSTEM_SENDER,
                        text=notice.text or notice.payload.body,
                        related_task_id=notice.related_task_id,
                    ),
                )
                await session.commit()
        except Exception as exc:
            logger.exception(
                "In-app message write failed",
                extra={"recipient": notice.recipient_name, "channel": "in_app"},
            )
            return DeliveryResult(
                success=False,
                error_message=str(exc) or type(exc).__name__,
                error_category="exception",
                response_time_ms=int((time.time() - start_time) * 1000),
            )

        lazy_logger.debug(
            lambda: f"In-app message {message.id} written for {notice.recipient_name}",
        )
        return DeliveryResult(
            success=True,
            response_time_ms=int((time.time() - start_time) * 1000),
            metadata={"message_id": str(message.id)},
        )

    def get_channel_name(self) -> str:
        return "in_app"
