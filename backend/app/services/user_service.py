"""User data access helpers."""
from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AlreadyExistsError
from app.core.security import get_password_hash
from app.models.user import AuthProvider, User


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    """Return a user by email address."""
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    """Return a user by username."""
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user(session: AsyncSession, user_id: uuid.UUID) -> User | None:
    """Return a user by ID."""
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def username_exists(session: AsyncSession, username: str) -> bool:
    return await get_user_by_username(session, username) is not None


async def create_user(
    session: AsyncSession,
    *,
    username: str,
    email: str,
    password: str,
    email_verified: bool = False,
    auth_provider: AuthProvider = AuthProvider.LOCAL,
) -> User:
    """Persist a new user with hashed password."""
    if await username_exists(session, username):
        raise AlreadyExistsError("Username already exists")
    if await get_user_by_email(session, email) is not None:
        raise AlreadyExistsError("Email already exists")

    user = User(
        username=username,
        email=email.lower(),
        hashed_password=get_password_hash(password),
        email_verified=email_verified,
        verified_at=datetime.now(UTC) if email_verified else None,
        auth_provider=auth_provider,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise AlreadyExistsError("Username or email already exists") from exc
    await session.refresh(user)
    return user


async def mark_email_verified(session: AsyncSession, user: User) -> bool:
    """Flag the user's email as verified; returns False if it already was."""
    if user.email_verified:
        return False
    user.email_verified = True
    user.verified_at = datetime.now(UTC)
    await session.commit()
    await session.refresh(user)
    return True


async def set_password(session: AsyncSession, user: User, new_password: str) -> User:
    user.hashed_password = get_password_hash(new_password)
    await session.commit()
    await session.refresh(user)
    return user
