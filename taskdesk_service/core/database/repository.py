"""Shared base for the pipeline's repositories.

Every query takes the session explicitly. The pipeline opens one session per
unit of work (a reminder dispatch, a digest read), so a repository never holds
one itself and a single instance is safe to share across concurrent units.

Example:
    class DigestRepository(BaseRepository[Digest]):
        async def find_fresh(self, session, user_id, *, since):
            stmt = select(Digest).where(Digest.user_id == user_id, Digest.generated_at >= since)
            return (await session.execute(stmt)).scalars().first()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from taskdesk_service.core.database.exceptions import NotFoundError
from taskdesk_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute


class BaseRepository[T]:
    """Primary-key lookups plus add/remove for one mapped class.

    Feature repositories subclass this and add their own queries
    (``find_due``, ``find_overdue``, ``find_fresh`` ...).
    """

    __slots__ = ("model", "_logger", "_lazy")

    def __init__(self, model: type[T]) -> None:
        self.model = model
        name = f"taskdesk_service.repository.{model.__name__}"
        self._logger = logging.getLogger(name)
        self._lazy = get_lazy_logger(name)

    async def get(self, session: AsyncSession, pk: Any) -> T | None:
        """Row with primary key ``pk``, or None.

        Served from the session's identity map when already loaded.
        """
        instance = await session.get(self.model, pk)
        self._lazy.debug(lambda: f"db.get {self.model.__name__}({pk}) hit={instance is not None}")
        return instance

    async def get_or_raise(self, session: AsyncSession, pk: Any) -> T:
        """Like ``get`` but a missing row is an error.

        Used where the row must exist, e.g. the task behind a due reminder.

        Raises:
            NotFoundError: No row with that key.
        """
        instance = await self.get(session, pk)
        if instance is None:
            self._logger.warning(
                "Referenced row missing",
                extra={"entity": self.model.__name__, "id": str(pk)},
            )
            raise NotFoundError(self.model.__name__, {"id": pk})
        return instance

    async def get_by(
        self,
        session: AsyncSession,
        column: InstrumentedAttribute[Any],
        value: Any,
    ) -> T | None:
        """First row where ``column == value``; used for unique columns like ``User.name``."""
        result = await session.execute(select(self.model).where(column == value).limit(1))
        instance = result.scalars().first()
        self._lazy.debug(
            lambda: f"db.get_by {self.model.__name__}.{column.key}={value!r} hit={instance is not None}",
        )
        return instance

    async def create(self, session: AsyncSession, instance: T) -> T:
        """Add ``instance`` and flush so its id and server defaults are populated.

        The caller commits.
        """
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        self._lazy.debug(lambda: f"db.create {self.model.__name__}({getattr(instance, 'id', None)})")
        return instance

    async def delete(self, session: AsyncSession, instance: T) -> None:
        """Remove ``instance`` and flush; the caller commits."""
        await session.delete(instance)
        await session.flush()
        self._lazy.debug(lambda: f"db.delete {self.model.__name__}({getattr(instance, 'id', None)})")
