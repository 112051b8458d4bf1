"""Test fixtures for the character guessing backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ["OPENAI_API_KEY"] = ""
os.environ["REDIS_URL"] = ""
os.environ["RECAPTCHA_ENABLED"] = "false"
os.environ["SMTP_HOST"] = ""

from app.core.config import get_settings
from app.core.security import get_password_hash
from app.db.base import Base
from app.db.session import dispose_engine, get_sessionmaker
from app.main import app
from app.models import Character, User
from app.services.auth_service import create_access_token_for_user

PLAYER_PASSWORD = "Passw0rd!"

SEED_CHARACTERS = (
    {
        "name": "Naruto Uzumaki",
        "anime": "Naruto",
        "gender": "Male",
        "hair_color": "Blonde",
        "occupation": "Ninja",
    },
    {
        "name": "Monkey D. Luffy",
        "anime": "One Piece",
        "gender": "Male",
        "hair_color": "Black",
        "occupation": "Pirate captain",
    },
)


class StaticAnswerer:
    """Answers every question with the same reply and records the calls."""

    def __init__(self, reply: str = "Yes, that's right.") -> None:
        self.reply = reply
        self.calls: list[tuple[str, str]] = []

    async def answer(self, *, question: str, character: Character) -> str:
        self.calls.append((question, character.name))
        return self.reply


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def session(reset_database: None, db_url: str) -> AsyncIterator[AsyncSession]:
    """A session on the freshly created schema, for service-level tests."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as db_session:
        yield db_session


@pytest_asyncio.fixture()
async def player(session: AsyncSession) -> User:
    user = User(
        username="player1",
        email="player1@example.com",
        hashed_password=get_password_hash(PLAYER_PASSWORD),
        email_verified=True,
    )
    session.add(user)
    await session.commit()
    return user


@pytest_asyncio.fixture()
async def characters(session: AsyncSession) -> list[Character]:
    rows = [Character(**data) for data in SEED_CHARACTERS]
    session.add_all(rows)
    await session.commit()
    return rows


@pytest.fixture()
def answerer() -> StaticAnswerer:
    return StaticAnswerer()


@pytest_asyncio.fixture()
async def app_context(
    reset_database: None, db_url: str
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client, a verified player and a seeded catalog."""
    sessionmaker = get_sessionmaker(db_url)

    async with sessionmaker() as db_session:
        user = User(
            username="player1",
            email="player1@example.com",
            hashed_password=get_password_hash(PLAYER_PASSWORD),
            email_verified=True,
        )
        db_session.add(user)
        db_session.add_all(Character(**data) for data in SEED_CHARACTERS)
        db_session.add(
            Character(name="Retired Hero", anime="Old Show", is_active=False)
        )
        await db_session.commit()

        access_token = await create_access_token_for_user(user)
        context: dict[str, object] = {
            "user_id": user.id,
            "username": user.username,
            "email": user.email,
            "password": PLAYER_PASSWORD,
            "headers": {"Authorization": f"Bearer {access_token}"},
        }

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
    app.dependency_overrides.clear()
