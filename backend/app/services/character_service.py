"""Character catalog queries."""
from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NoActiveCharactersError
from app.models import Character
from app.schemas.character import CharacterCreate

logger = logging.getLogger(__name__)

_PROFILE_FIELDS: tuple[tuple[str, str], ...] = (
    ("Name", "name"),
    ("Anime", "anime"),
    ("Gender", "gender"),
    ("Age", "age"),
    ("Hair Color", "hair_color"),
    ("Eye Color", "eye_color"),
    ("Occupation", "occupation"),
    ("Personality", "personality"),
    ("Powers/Abilities", "powers_abilities"),
    ("Backstory", "backstory"),
    ("Notable Quotes", "notable_quotes"),
    ("Relationships", "relationships"),
    ("Appearance", "appearance_description"),
    ("Type", "character_type"),
)


async def list_active_characters(session: AsyncSession) -> list[Character]:
    logger.info("Fetching all active characters")
    result = await session.execute(
        select(Character).where(Character.is_active.is_(True)).order_by(Character.name)
    )
    return list(result.scalars().all())


async def list_characters(session: AsyncSession) -> list[Character]:
    logger.info("Fetching all characters")
    result = await session.execute(select(Character).order_by(Character.name))
    return list(result.scalars().all())


async def create_character(session: AsyncSession, payload: CharacterCreate) -> Character:
    character = Character(**payload.model_dump())
    session.add(character)
    await session.commit()
    await session.refresh(character)
    return character


async def pick_random_active(session: AsyncSession) -> Character:
    """Draw one active character uniformly at random."""
    result = await session.execute(
        select(Character)
        .where(Character.is_active.is_(True))
        .order_by(func.random())
        .limit(1)
    )
    character = result.scalar_one_or_none()
    if character is None:
        raise NoActiveCharactersError()
    return character


def describe_character(character: Character) -> str:
    """Render the character's full profile; missing attributes read "Unknown"."""
    lines = []
    for label, attr in _PROFILE_FIELDS:
        value = getattr(character, attr)
        lines.append(f"{label}: {value if value else 'Unknown'}")
    return "\n".join(lines)


def reveal_label(character: Character) -> str:
    return f"{character.name} from {character.anime}"
