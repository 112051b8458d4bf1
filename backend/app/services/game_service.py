"""Game session lifecycle: start, ask, guess, and read back.

Every mutating operation first locks the player's user row so concurrent
requests for the same player are applied one at a time. A player has at most
one ACTIVE game; starting another forfeits the previous one as LOST.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import InvalidInputError, NoActiveGameError, NotFoundError
from app.integrations.llm_client import QuestionAnswerer
from app.models import Character, Game, GameStatus, Question, User
from app.schemas.game import GameRead, QuestionAnswerRead, QuestionRead
from app.services import character_service
from app.services.name_matcher import matches

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = "I'm having trouble thinking right now. Could you ask me something else?"


async def _lock_user(session: AsyncSession, user_id: uuid.UUID) -> None:
    result = await session.execute(
        select(User.id).where(User.id == user_id).with_for_update()
    )
    if result.scalar_one_or_none() is None:
        raise NotFoundError("User not found")


async def _get_active_game(session: AsyncSession, user_id: uuid.UUID) -> Game | None:
    result = await session.execute(
        select(Game)
        .where(Game.user_id == user_id, Game.status == GameStatus.ACTIVE)
        .order_by(Game.started_at.desc())
        .limit(1)
    )
    return result.scalars().first()


async def _require_active_game(session: AsyncSession, user_id: uuid.UUID) -> Game:
    game = await _get_active_game(session, user_id)
    if game is None:
        raise NoActiveGameError()
    return game


async def _load_character(session: AsyncSession, game: Game) -> Character:
    character = await session.get(Character, game.character_id)
    if character is None:  # pragma: no cover - FK restricts deletes
        raise NotFoundError("Character not found")
    return character


def _to_read(
    game: Game,
    questions: list[Question],
    character: Character | None,
) -> GameRead:
    return GameRead(
        game_id=game.id,
        status=game.status,
        questions_count=game.questions_count,
        started_at=game.started_at,
        ended_at=game.ended_at,
        guessed_correctly=game.guessed_correctly,
        final_guess=game.final_guess,
        revealed_character=(
            character_service.reveal_label(character) if character is not None else None
        ),
        conversation_history=[
            QuestionRead(
                question=item.question_text,
                answer=item.answer_text,
                asked_at=item.asked_at,
            )
            for item in questions
        ],
    )


async def build_game_read(
    session: AsyncSession, game: Game, *, reveal: bool
) -> GameRead:
    """Serialize ``game`` with its transcript; the character only when ``reveal``."""
    result = await session.execute(
        select(Question).where(Question.game_id == game.id).order_by(Question.position)
    )
    character = await _load_character(session, game) if reveal else None
    return _to_read(game, list(result.scalars().all()), character)


async def start_game(session: AsyncSession, user: User) -> GameRead:
    logger.info("Starting new game for user %s", user.id)
    await _lock_user(session, user.id)

    character = await character_service.pick_random_active(session)
    now = datetime.now(UTC)

    previous = await _get_active_game(session, user.id)
    if previous is not None:
        previous.status = GameStatus.LOST
        previous.ended_at = now
        # the partial unique index needs the old row out of ACTIVE before the insert
        await session.flush()
        logger.info("Ended previous active game %s", previous.id)

    game = Game(
        user_id=user.id,
        character_id=character.id,
        status=GameStatus.ACTIVE,
        questions_count=0,
        started_at=now,
        ended_at=None,
        guessed_correctly=False,
        final_guess=None,
    )
    session.add(game)
    await session.commit()
    logger.info("New game %s started for user %s", game.id, user.id)
    return _to_read(game, [], None)


async def ask_question(
    session: AsyncSession,
    user: User,
    question_text: str,
    answerer: QuestionAnswerer,
    *,
    timeout: float | None = None,
) -> QuestionAnswerRead:
    """Answer a question about the active game's character and record it.

    Whatever the answering service raises, including a timeout, the player gets
    :data:`FALLBACK_ANSWER` and nothing is recorded.
    """
    question = question_text.strip()
    if not question:
        raise InvalidInputError("Question is required")

    await _lock_user(session, user.id)
    game = await _require_active_game(session, user.id)
    character = await _load_character(session, game)

    if timeout is None:
        timeout = get_settings().ai_timeout_seconds
    try:
        answer = await asyncio.wait_for(
            answerer.answer(question=question, character=character), timeout
        )
    except Exception as exc:
        game_id, current_count = game.id, game.questions_count
        await session.rollback()
        logger.warning(
            "Answering failed for game %s: %s",
            game_id,
            exc or type(exc).__name__,
            exc_info=True,
        )
        return QuestionAnswerRead(
            question=question, answer=FALLBACK_ANSWER, total_questions=current_count
        )

    game.questions_count += 1
    session.add(
        Question(
            game_id=game.id,
            position=game.questions_count,
            question_text=question,
            answer_text=answer,
            asked_at=datetime.now(UTC),
        )
    )
    await session.commit()
    logger.info("Question %d answered for game %s", game.questions_count, game.id)
    return QuestionAnswerRead(
        question=question, answer=answer, total_questions=game.questions_count
    )


async def submit_guess(session: AsyncSession, user: User, guessed_name: str) -> GameRead:
    guess = guessed_name.strip()
    if not guess:
        raise InvalidInputError("Guess is required")

    await _lock_user(session, user.id)
    game = await _require_active_game(session, user.id)
    character = await _load_character(session, game)

    is_correct = matches(character.name, guess)
    game.status = GameStatus.WON if is_correct else GameStatus.LOST
    game.guessed_correctly = is_correct
    game.final_guess = guess
    game.ended_at = datetime.now(UTC)
    await session.commit()

    logger.info("Game %s ended. Result: %s", game.id, game.status.value)
    return await build_game_read(session, game, reveal=True)


async def get_current_game(session: AsyncSession, user: User) -> GameRead:
    game = await _require_active_game(session, user.id)
    return await build_game_read(session, game, reveal=False)


async def get_history(session: AsyncSession, user: User) -> list[GameRead]:
    """All of the player's games, newest first, with characters revealed."""
    games = list(
        (
            await session.execute(
                select(Game)
                .where(Game.user_id == user.id)
                .order_by(Game.started_at.desc())
            )
        )
        .scalars()
        .all()
    )
    if not games:
        return []

    game_ids = [game.id for game in games]
    character_ids = {game.character_id for game in games}

    questions_by_game: dict[uuid.UUID, list[Question]] = {game_id: [] for game_id in game_ids}
    question_rows = await session.execute(
        select(Question)
        .where(Question.game_id.in_(game_ids))
        .order_by(Question.game_id, Question.position)
    )
    for item in question_rows.scalars():
        questions_by_game[item.game_id].append(item)

    character_rows = await session.execute(
        select(Character).where(Character.id.in_(character_ids))
    )
    characters = {character.id: character for character in character_rows.scalars()}

    return [
        _to_read(game, questions_by_game[game.id], characters.get(game.character_id))
        for game in games
    ]
