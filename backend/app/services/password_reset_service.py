"""Password reset services."""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.services import user_service
from app.services.token_service import reset_tokens

logger = logging.getLogger(__name__)


async def create_reset_token(
    session: AsyncSession, *, email: str
) -> tuple[str, User] | None:
    """Issue a reset token for the account, or None if the email is unknown."""
    user = await user_service.get_user_by_email(session, email)
    if user is None:
        return None
    raw_token = await reset_tokens().issue(session, user)
    logger.info("Password reset token generated for user %s", user.id)
    return raw_token, user


async def validate_reset_token(session: AsyncSession, *, token: str) -> None:
    await reset_tokens().validate(session, token)


async def reset_password(
    session: AsyncSession, *, token: str, new_password: str
) -> User:
    user = await reset_tokens().consume(session, token)
    await user_service.set_password(session, user, new_password)
    logger.info("Password reset successfully for user %s", user.id)
    return user
