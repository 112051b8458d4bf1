"""Email verification flow built on the verification token store."""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidInputError, NotFoundError
from app.models.user import User
from app.services import user_service
from app.services.token_service import verification_tokens

logger = logging.getLogger(__name__)


async def issue_verification_token(session: AsyncSession, user: User) -> str:
    return await verification_tokens().issue(session, user)


async def verify_email(session: AsyncSession, *, token: str) -> tuple[User, bool]:
    """Consume ``token`` and mark its owner verified.

    Returns the user and whether this call performed the verification.
    """
    user = await verification_tokens().consume(session, token)
    newly_verified = await user_service.mark_email_verified(session, user)
    if newly_verified:
        logger.info("Email verified for user %s", user.id)
    return user, newly_verified


async def resend_verification(session: AsyncSession, *, email: str) -> tuple[User, str]:
    user = await user_service.get_user_by_email(session, email)
    if user is None:
        raise NotFoundError("No account found with that email address.")
    if user.email_verified:
        raise InvalidInputError("Account is already verified.")
    token = await issue_verification_token(session, user)
    return user, token
