"""Actor identity for user-facing routes.

Authentication happens upstream (the platform's gateway); this service trusts
the ``X-User-Name`` header it forwards and resolves it to an active user.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from taskdesk_service.core.dependencies.database import SessionDep
from taskdesk_service.core.exceptions import UnauthorizedException
from taskdesk_service.core.models import User
from taskdesk_service.core.repositories import get_user_repository


async def get_current_user(
    session: SessionDep,
    x_user_name: Annotated[str | None, Header()] = None,
) -> User:
    """Resolve the acting user.

    Raises:
        UnauthorizedException: Header missing or names no active user.
    """
    if not x_user_name or not x_user_name.strip():
        raise UnauthorizedException(
            detail="Missing X-User-Name header",
            type="missing-user",
        )
    user = await get_user_repository().find_by_name(session, x_user_name.strip())
    if user is None or not user.is_active:
        raise UnauthorizedException(
            detail="Unknown user",
            type="unknown-user",
            extra={"user_name": x_user_name},
        )
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]
