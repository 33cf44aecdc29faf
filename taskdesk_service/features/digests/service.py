"""Freshness-gated digest store and read tracking."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from taskdesk_service.core.database import utcnow
from taskdesk_service.core.services.base import BaseService
from taskdesk_service.features.digests.exceptions import DigestGenerationError, DigestParseError
from taskdesk_service.features.digests.metrics import digest_generation_total
from taskdesk_service.features.digests.models import Digest, DigestType
from taskdesk_service.features.digests.repository import DigestRepository, get_digest_repository
from taskdesk_service.features.digests.schemas import DigestPayload, LatestDigestResponse
from taskdesk_service.features.digests.windows import digest_type_for, next_scheduled_slot

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID
    from zoneinfo import ZoneInfo

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from taskdesk_service.core.models import User
    from taskdesk_service.core.settings import PipelineSettings
    from taskdesk_service.features.digests.assembler import DigestAssembler

NO_DIGEST_MESSAGE = "No recent digest available"


class DigestService(BaseService):
    """Return the current digest for a user, generating one only when none is fresh.

    A digest is fresh while ``generated_at >= now - digest_freshness_hours``.
    Repeated scheduler triggers inside that window reuse the stored record
    and never call the summarization service again.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        assembler: DigestAssembler | None,
        *,
        settings: PipelineSettings,
        tz: ZoneInfo,
        repository: DigestRepository | None = None,
    ) -> None:
        super().__init__()
        self._session_factory = session_factory
        self._assembler = assembler
        self._settings = settings
        self._tz = tz
        self._repository = repository or get_digest_repository()

    @property
    def freshness_window(self) -> timedelta:
        return timedelta(hours=self._settings.digest_freshness_hours)

    async def get_or_create(
        self,
        user: User,
        digest_type: DigestType,
        now: datetime | None = None,
    ) -> tuple[Digest, bool]:
        """Return ``(digest, is_new)`` for ``(user, digest_type)``.

        Raises:
            DigestGenerationError: No fresh digest and generation failed or
                summarization is not configured.
        """
        now = now or utcnow()
        async with self._session_factory() as session:
            existing = await self._repository.find_fresh(
                session, user.id, since=now - self.freshness_window, digest_type=digest_type,
            )
        if existing is not None:
            digest_generation_total.labels(digest_type=str(digest_type), result="reused").inc()
            self._lazy.debug(lambda: f"Reusing digest {existing.id} for {user.name}")
            return existing, False

        if self._assembler is None:
            digest_generation_total.labels(digest_type=str(digest_type), result="failed").inc()
            raise DigestGenerationError(
                "Summarization service is not configured",
                user_name=user.name,
                digest_type=digest_type,
            )

        try:
            payload = await self._assembler.assemble(user, digest_type, now)
        except DigestParseError:
            digest_generation_total.labels(digest_type=str(digest_type), result="parse_error").inc()
            raise
        except DigestGenerationError:
            digest_generation_total.labels(digest_type=str(digest_type), result="failed").inc()
            raise

        async with self._session_factory() as session:
            digest = await self._repository.create(
                session,
                Digest(
                    user_id=user.id,
                    user_name=user.name,
                    digest_type=digest_type,
                    digest_date=now.astimezone(self._tz).date(),
                    payload=payload.to_storage(),
                    generated_at=now,
                ),
            )
            await session.commit()

        digest_generation_total.labels(digest_type=str(digest_type), result="generated").inc()
        self.logger.info(
            "Digest generated",
            extra={
                "digest_id": str(digest.id),
                "user_id": str(user.id),
                "digest_type": str(digest_type),
                "overdue": payload.overdue_tasks.count,
                "today": payload.todays_tasks.count,
                "operation": "digests.get_or_create",
            },
        )
        return digest, True

    async def mark_read(self, digest_id: UUID, now: datetime | None = None) -> bool:
        """Set ``read_at`` the first time; later calls change nothing."""
        now = now or utcnow()
        async with self._session_factory() as session:
            changed = await self._repository.mark_read(session, digest_id, now)
            await session.commit()
        if changed:
            self.logger.info(
                "Digest marked read",
                extra={"digest_id": str(digest_id), "operation": "digests.mark_read"},
            )
        return changed

    async def latest_for_user(
        self,
        user: User,
        *,
        mark_read: bool = True,
        now: datetime | None = None,
    ) -> LatestDigestResponse:
        """Current digest of any type, generated on demand when none is fresh.

        Never raises for a missing digest: generation failures come back as
        ``has_digest=False`` with the next scheduled slot.
        """
        now = now or utcnow()
        next_slot = next_scheduled_slot(
            now,
            self._tz,
            morning_hour=self._settings.morning_hour,
            afternoon_hour=self._settings.afternoon_hour,
        )

        async with self._session_factory() as session:
            digest = await self._repository.find_fresh(
                session, user.id, since=now - self.freshness_window,
            )
        if digest is None:
            try:
                digest, _ = await self.get_or_create(user, digest_type_for(now, self._tz), now)
            except DigestGenerationError as exc:
                self.logger.warning(
                    "On-demand digest generation failed",
                    extra={"user_id": str(user.id), "error": exc.message},
                )
                return LatestDigestResponse(
                    has_digest=False,
                    next_scheduled=next_slot,
                    message=NO_DIGEST_MESSAGE,
                )

        is_new = digest.read_at is None
        if mark_read and is_new:
            await self.mark_read(digest.id, now)

        return LatestDigestResponse(
            has_digest=True,
            digest=DigestPayload.model_validate(digest.payload),
            digest_id=digest.id,
            digest_type=DigestType(digest.digest_type),
            generated_at=digest.generated_at,
            is_new=is_new,
            next_scheduled=next_slot,
        )
