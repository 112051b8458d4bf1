"""Character catalog endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.rate_limit import BucketType, rate_limit
from app.models.user import User
from app.schemas.character import CharacterRead
from app.services import character_service

router = APIRouter()

_GENERAL_RATE_DEP = rate_limit(BucketType.GENERAL)


@router.get(
    "",
    response_model=list[CharacterRead],
    summary="List active characters",
    dependencies=[_GENERAL_RATE_DEP],
)
async def list_characters(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> list[CharacterRead]:
    characters = await character_service.list_active_characters(session)
    return [CharacterRead.model_validate(character) for character in characters]


@router.get(
    "/admin/all",
    response_model=list[CharacterRead],
    summary="List all characters",
    dependencies=[_GENERAL_RATE_DEP],
)
async def list_all_characters(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    _: Annotated[User, Depends(deps.get_current_user)],
) -> list[CharacterRead]:
    """Includes inactive characters."""
    characters = await character_service.list_characters(session)
    return [CharacterRead.model_validate(character) for character in characters]
