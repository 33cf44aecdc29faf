"""API router for digest reads."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from taskdesk_service.core.dependencies import CurrentUserDep
from taskdesk_service.features.digests.schemas import LatestDigestResponse
from taskdesk_service.features.digests.service import DigestService
from taskdesk_service.features.pipeline.dependencies import get_digest_service

router = APIRouter(prefix="/digests", tags=["digests"])


@router.get(
    "/latest",
    response_model=LatestDigestResponse,
    summary="Get the caller's current digest",
    description=(
        "Returns the most recent digest generated within the freshness window, "
        "generating one on demand when none exists. Marks it read unless "
        "`mark_read=false`."
    ),
)
async def get_latest_digest(
    user: CurrentUserDep,
    service: Annotated[DigestService, Depends(get_digest_service)],
    mark_read: Annotated[bool, Query()] = True,
) -> LatestDigestResponse:
    return await service.latest_for_user(user, mark_read=mark_read)
