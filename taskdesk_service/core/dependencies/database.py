"""Session dependencies.

Route handlers that touch one aggregate take ``SessionDep``. The pipeline and
digest routes fan out into concurrent units, each needing its own session, so
they take ``SessionFactoryDep`` instead.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskdesk_service.infra.database import get_async_session, get_session_factory


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    async with get_async_session() as session:
        yield session


def get_session_factory_dep() -> async_sessionmaker[AsyncSession]:
    return get_session_factory()


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]
SessionFactoryDep = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory_dep)]
