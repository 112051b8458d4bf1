"""Game play endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core.rate_limit import BucketType, rate_limit
from app.integrations.llm_client import QuestionAnswerer
from app.models.user import User
from app.schemas.game import GameRead, GuessSubmit, QuestionAnswerRead, QuestionAsk
from app.services import game_service

router = APIRouter()

_GENERAL_RATE_DEP = rate_limit(BucketType.GENERAL)
_QUESTION_RATE_DEP = rate_limit(BucketType.QUESTION)


@router.post(
    "/start",
    response_model=GameRead,
    summary="Start a new game",
    dependencies=[_GENERAL_RATE_DEP],
)
async def start_game(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> GameRead:
    """Pick a hidden character; any game in progress is forfeited."""
    return await game_service.start_game(session, current_user)


@router.post(
    "/ask",
    response_model=QuestionAnswerRead,
    summary="Ask about the hidden character",
    dependencies=[_QUESTION_RATE_DEP],
)
async def ask_question(
    payload: QuestionAsk,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
    answerer: Annotated[QuestionAnswerer, Depends(deps.get_question_answerer)],
) -> QuestionAnswerRead:
    return await game_service.ask_question(
        session, current_user, payload.question, answerer
    )


@router.post(
    "/guess",
    response_model=GameRead,
    summary="Submit a final guess",
    dependencies=[_GENERAL_RATE_DEP],
)
async def submit_guess(
    payload: GuessSubmit,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> GameRead:
    return await game_service.submit_guess(session, current_user, payload.character_name)


@router.get(
    "/current",
    response_model=GameRead,
    summary="Current game",
    dependencies=[_GENERAL_RATE_DEP],
)
async def current_game(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> GameRead:
    return await game_service.get_current_game(session, current_user)


@router.get(
    "/history",
    response_model=list[GameRead],
    summary="Game history",
    dependencies=[_GENERAL_RATE_DEP],
)
async def game_history(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> list[GameRead]:
    """All of the player's games, newest first."""
    return await game_service.get_history(session, current_user)
