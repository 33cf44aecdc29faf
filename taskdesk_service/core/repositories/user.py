"""User repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from taskdesk_service.core.database import BaseRepository
from taskdesk_service.core.models.user import User

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession


class UserRepository(BaseRepository[User]):
    """User lookups by name and the active-user roster used by digest batches."""

    def __init__(self) -> None:
        super().__init__(User)

    async def find_by_name(self, session: AsyncSession, name: str) -> User | None:
        return await self.get_by(session, User.name, name)

    async def find_active(self, session: AsyncSession) -> Sequence[User]:
        """All active users, ordered by name for stable batch logs."""
        stmt = select(User).where(User.is_active.is_(True)).order_by(User.name)
        result = await session.execute(stmt)
        users = result.scalars().all()
        self._lazy.debug(lambda: f"db.find_active: {len(users)} users")
        return users


_user_repository: UserRepository | None = None


def get_user_repository() -> UserRepository:
    """Get the shared UserRepository instance."""
    global _user_repository
    if _user_repository is None:
        _user_repository = UserRepository()
    return _user_repository
