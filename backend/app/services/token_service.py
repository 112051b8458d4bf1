"""Single-use, expiring tokens bound to a user.

Only a SHA-256 digest of each token is stored; the raw value is returned once
from :meth:`TokenStore.issue` so it can be emailed.
"""
from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import TokenExpiredError, TokenNotFoundError
from app.models import EmailVerificationToken, PasswordResetToken, User

logger = logging.getLogger(__name__)

TokenModel = TypeVar("TokenModel", EmailVerificationToken, PasswordResetToken)


def _hash_token(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class TokenStore(Generic[TokenModel]):
    """Issue, check and consume one kind of user token."""

    def __init__(
        self,
        model: type[TokenModel],
        *,
        ttl: timedelta,
        label: str,
        not_found_message: str,
        expired_message: str,
    ) -> None:
        self.model = model
        self.ttl = ttl
        self.label = label
        self._not_found_message = not_found_message
        self._expired_message = expired_message

    async def issue(self, session: AsyncSession, user: User) -> str:
        """Replace any live token for ``user`` and return a fresh raw token."""
        await session.execute(delete(self.model).where(self.model.user_id == user.id))

        raw_token = secrets.token_urlsafe(32)
        record = self.model(
            user_id=user.id,
            token_hash=_hash_token(raw_token),
            expires_at=datetime.now(UTC) + self.ttl,
        )
        session.add(record)
        await session.commit()
        logger.info("Issued %s token for user %s", self.label, user.id)
        return raw_token

    async def _lookup(self, session: AsyncSession, token: str) -> TokenModel:
        result = await session.execute(
            select(self.model).where(self.model.token_hash == _hash_token(token))
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise TokenNotFoundError(self._not_found_message)
        return record

    @staticmethod
    def _is_expired(record: TokenModel, now: datetime | None = None) -> bool:
        return _as_utc(record.expires_at) < (now or datetime.now(UTC))

    async def validate(self, session: AsyncSession, token: str) -> None:
        """Raise if ``token`` is unknown or expired; never mutates."""
        record = await self._lookup(session, token)
        if self._is_expired(record):
            raise TokenExpiredError(self._expired_message)

    async def consume(self, session: AsyncSession, token: str) -> User:
        """Delete the token and return its owner.

        Expired tokens are deleted as well before the error is raised.
        """
        record = await self._lookup(session, token)
        if self._is_expired(record):
            await session.delete(record)
            await session.commit()
            raise TokenExpiredError(self._expired_message)

        user = await session.get(User, record.user_id)
        if user is None:  # pragma: no cover - FK cascade removes orphans
            raise TokenNotFoundError(self._not_found_message)
        await session.delete(record)
        await session.commit()
        return user

    async def purge_expired(
        self, session: AsyncSession, now: datetime | None = None
    ) -> int:
        """Bulk delete every token that expired before ``now``."""
        cutoff = now or datetime.now(UTC)
        result = await session.execute(
            delete(self.model).where(self.model.expires_at < cutoff)
        )
        await session.commit()
        removed = result.rowcount or 0
        if removed:
            logger.info("Purged %d expired %s tokens", removed, self.label)
        return removed


def verification_tokens() -> TokenStore[EmailVerificationToken]:
    settings = get_settings()
    return TokenStore(
        EmailVerificationToken,
        ttl=timedelta(hours=settings.verification_token_ttl_hours),
        label="email verification",
        not_found_message="Invalid or expired verification token.",
        expired_message="Verification token has expired. Please request a new one.",
    )


def reset_tokens() -> TokenStore[PasswordResetToken]:
    settings = get_settings()
    return TokenStore(
        PasswordResetToken,
        ttl=timedelta(minutes=settings.reset_token_ttl_minutes),
        label="password reset",
        not_found_message="Invalid or expired password reset token.",
        expired_message="Password reset token has expired.",
    )


__all__ = ["TokenStore", "reset_tokens", "verification_tokens"]
