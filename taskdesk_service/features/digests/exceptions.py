"""Digest generation errors."""

from __future__ import annotations


class DigestGenerationError(Exception):
    """Generating a digest for one user failed; nothing was persisted.

    Attributes:
        message: Human-readable error message
        user_name: User the digest was for
        digest_type: morning or afternoon
    """

    def __init__(
        self,
        message: str,
        *,
        user_name: str | None = None,
        digest_type: str | None = None,
    ) -> None:
        self.message = message
        self.user_name = user_name
        self.digest_type = digest_type
        super().__init__(message)


class DigestParseError(DigestGenerationError):
    """The summarization response did not contain a valid briefing object."""

    def __init__(
        self,
        message: str,
        *,
        raw_response: str,
        user_name: str | None = None,
        digest_type: str | None = None,
    ) -> None:
        self.raw_response = raw_response
        super().__init__(message, user_name=user_name, digest_type=digest_type)
