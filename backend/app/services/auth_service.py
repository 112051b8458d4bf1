"""Authentication service helpers."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import EmailNotVerifiedError
from app.core.security import create_access_token, verify_password
from app.models.user import User
from app.services import user_service

logger = logging.getLogger(__name__)


async def register_user(
    session: AsyncSession, *, username: str, email: str, password: str
) -> User:
    """Create a local account.

    When email verification is disabled the account is usable immediately.
    """
    settings = get_settings()
    logger.info("Registering new user: %s", username)
    user = await user_service.create_user(
        session,
        username=username,
        email=email,
        password=password,
        email_verified=not settings.require_email_verification,
    )
    logger.info("User registered successfully: %s", user.username)
    return user


async def authenticate_user(
    session: AsyncSession, username: str, password: str
) -> User | None:
    """Validate credentials and return a user if correct.

    ``username`` may also be the account's email address.
    """
    user = await user_service.get_user_by_username(session, username)
    if user is None and "@" in username:
        user = await user_service.get_user_by_email(session, username)
    if user is None:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    if not user.email_verified:
        logger.warning("User %s attempted login without verifying email", user.username)
        raise EmailNotVerifiedError()
    return user


async def create_access_token_for_user(user: User) -> str:
    """Generate a JWT for a user."""
    return create_access_token(str(user.id), username=user.username)
