"""Sign-in through an external identity provider."""
from __future__ import annotations

import logging
import re
from datetime import timedelta

from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidInputError
from app.core.security import create_access_token, decode_access_token, random_password
from app.integrations.google_oauth import GoogleProfile
from app.models.user import AuthProvider, User
from app.services import user_service

logger = logging.getLogger(__name__)

_STATE_PURPOSE = "oauth-state"
_STATE_TTL = timedelta(minutes=10)
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_DASH_RUN_RE = re.compile(r"-{2,}")
_USERNAME_MAX = 50


def create_state(provider: str) -> str:
    """Short-lived signed value echoed back by the provider."""
    return create_access_token(provider, expires_delta=_STATE_TTL, purpose=_STATE_PURPOSE)


def verify_state(state: str, provider: str) -> None:
    try:
        claims = decode_access_token(state)
    except JWTError as exc:
        raise InvalidInputError("Invalid OAuth state") from exc
    if claims.get("purpose") != _STATE_PURPOSE or claims.get("sub") != provider:
        raise InvalidInputError("Invalid OAuth state")


def derive_username(email: str, name: str | None) -> str:
    if name and name.strip():
        sanitized = _NON_ALNUM_RE.sub("-", name.strip().lower())
        sanitized = _DASH_RUN_RE.sub("-", sanitized).strip("-")
        if sanitized:
            return sanitized[:_USERNAME_MAX]
    return email.split("@")[0][:_USERNAME_MAX]


async def _unique_username(session: AsyncSession, base: str) -> str:
    candidate = base
    counter = 1
    while await user_service.username_exists(session, candidate):
        suffix = str(counter)
        candidate = f"{base[: _USERNAME_MAX - len(suffix)]}{suffix}"
        counter += 1
    return candidate


async def login_with_google(session: AsyncSession, profile: GoogleProfile) -> User:
    """Return the account for ``profile``, creating a verified one if needed."""
    user = await user_service.get_user_by_email(session, profile.email)
    if user is not None:
        await user_service.mark_email_verified(session, user)
        return user

    username = await _unique_username(session, derive_username(profile.email, profile.name))
    user = await user_service.create_user(
        session,
        username=username,
        email=profile.email,
        password=random_password(),
        email_verified=True,
        auth_provider=AuthProvider.GOOGLE,
    )
    logger.info("Created Google account %s for user %s", username, user.id)
    return user
