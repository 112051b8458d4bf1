"""Game session manager behaviour."""

from __future__ import annotations

import asyncio
import logging

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    InvalidInputError,
    NoActiveCharactersError,
    NoActiveGameError,
)
from app.integrations.llm_client import AnswerProviderError
from app.models import Character, Game, GameStatus, Question, User
from app.services import game_service

pytestmark = pytest.mark.asyncio


class FailingAnswerer:
    async def answer(self, *, question: str, character: Character) -> str:
        raise AnswerProviderError("provider unavailable")


class BrokenAnswerer:
    async def answer(self, *, question: str, character: Character) -> str:
        raise RuntimeError("client library error")


class SlowAnswerer:
    async def answer(self, *, question: str, character: Character) -> str:
        await asyncio.sleep(5)
        return "too late"


async def _question_rows(session: AsyncSession) -> int:
    return (await session.execute(select(func.count()).select_from(Question))).scalar_one()


async def test_start_game_hides_character(
    session: AsyncSession, player: User, characters: list[Character]
) -> None:
    game = await game_service.start_game(session, player)

    assert game.status == GameStatus.ACTIVE
    assert game.questions_count == 0
    assert game.revealed_character is None
    assert game.conversation_history == []


async def test_second_start_forfeits_previous_game(
    session: AsyncSession, player: User, characters: list[Character]
) -> None:
    first = await game_service.start_game(session, player)
    second = await game_service.start_game(session, player)

    games = {
        game.id: game
        for game in (await session.execute(select(Game))).scalars().all()
    }
    assert games[first.game_id].status == GameStatus.LOST
    assert games[first.game_id].ended_at is not None
    assert games[second.game_id].status == GameStatus.ACTIVE
    assert sum(1 for game in games.values() if game.status == GameStatus.ACTIVE) == 1


async def test_start_game_without_characters(session: AsyncSession, player: User) -> None:
    with pytest.raises(NoActiveCharactersError):
        await game_service.start_game(session, player)


async def test_ask_records_transcript_in_order(
    session: AsyncSession, player: User, characters: list[Character], answerer
) -> None:
    await game_service.start_game(session, player)
    answerer.reply = "No."

    first = await game_service.ask_question(session, player, "Is your hair black?", answerer)
    second = await game_service.ask_question(session, player, "  Are you a pirate?  ", answerer)

    assert (first.total_questions, second.total_questions) == (1, 2)
    assert second.question == "Are you a pirate?"
    assert second.answer == "No."

    current = await game_service.get_current_game(session, player)
    assert current.questions_count == 2
    assert [item.question for item in current.conversation_history] == [
        "Is your hair black?",
        "Are you a pirate?",
    ]
    assert current.revealed_character is None


async def test_ask_without_active_game_records_nothing(
    session: AsyncSession, player: User, characters: list[Character], answerer
) -> None:
    with pytest.raises(NoActiveGameError):
        await game_service.ask_question(session, player, "Hello?", answerer)
    assert await _question_rows(session) == 0


async def test_blank_question_is_rejected(
    session: AsyncSession, player: User, characters: list[Character], answerer
) -> None:
    await game_service.start_game(session, player)
    with pytest.raises(InvalidInputError):
        await game_service.ask_question(session, player, "   ", answerer)
    assert answerer.calls == []


async def test_answer_failure_returns_fallback_without_recording(
    session: AsyncSession, player: User, characters: list[Character], answerer
) -> None:
    await game_service.start_game(session, player)
    await game_service.ask_question(session, player, "Are you male?", answerer)

    result = await game_service.ask_question(
        session, player, "What is your power?", FailingAnswerer()
    )

    assert result.answer == game_service.FALLBACK_ANSWER
    assert result.total_questions == 1
    assert await _question_rows(session) == 1
    current = await game_service.get_current_game(session, player)
    assert current.questions_count == 1


async def test_unexpected_answerer_error_returns_fallback(
    session: AsyncSession,
    player: User,
    characters: list[Character],
    caplog: pytest.LogCaptureFixture,
) -> None:
    await game_service.start_game(session, player)

    with caplog.at_level(logging.WARNING, logger="app.services.game_service"):
        result = await game_service.ask_question(
            session, player, "Are you human?", BrokenAnswerer()
        )

    assert result.answer == game_service.FALLBACK_ANSWER
    assert result.total_questions == 0
    assert await _question_rows(session) == 0
    failures = [
        record for record in caplog.records if "Answering failed" in record.getMessage()
    ]
    assert failures and failures[0].exc_info is not None
    assert isinstance(failures[0].exc_info[1], RuntimeError)


async def test_answer_timeout_returns_fallback(
    session: AsyncSession, player: User, characters: list[Character]
) -> None:
    await game_service.start_game(session, player)

    result = await game_service.ask_question(
        session, player, "Do you sail?", SlowAnswerer(), timeout=0.05
    )

    assert result.answer == game_service.FALLBACK_ANSWER
    assert result.total_questions == 0
    assert await _question_rows(session) == 0


async def test_correct_guess_wins_and_reveals(
    session: AsyncSession, player: User, characters: list[Character]
) -> None:
    started = await game_service.start_game(session, player)
    game = await session.get(Game, started.game_id)
    character = await session.get(Character, game.character_id)

    result = await game_service.submit_guess(session, player, f"  {character.name}  ")

    assert result.status == GameStatus.WON
    assert result.guessed_correctly is True
    assert result.final_guess == character.name
    assert result.ended_at is not None
    assert result.revealed_character == f"{character.name} from {character.anime}"

    with pytest.raises(NoActiveGameError):
        await game_service.get_current_game(session, player)


async def test_wrong_guess_loses(
    session: AsyncSession, player: User, characters: list[Character]
) -> None:
    await game_service.start_game(session, player)

    result = await game_service.submit_guess(session, player, "Light Yagami")

    assert result.status == GameStatus.LOST
    assert result.guessed_correctly is False
    assert result.revealed_character is not None


async def test_blank_guess_keeps_game_active(
    session: AsyncSession, player: User, characters: list[Character]
) -> None:
    await game_service.start_game(session, player)
    with pytest.raises(InvalidInputError):
        await game_service.submit_guess(session, player, " ")
    current = await game_service.get_current_game(session, player)
    assert current.status == GameStatus.ACTIVE


async def test_history_is_newest_first_and_revealed(
    session: AsyncSession, player: User, characters: list[Character], answerer
) -> None:
    first = await game_service.start_game(session, player)
    await game_service.ask_question(session, player, "Are you human?", answerer)
    second = await game_service.start_game(session, player)

    history = await game_service.get_history(session, player)

    assert [game.game_id for game in history] == [second.game_id, first.game_id]
    assert all(game.revealed_character for game in history)
    assert len(history[1].conversation_history) == 1
    assert history[0].status == GameStatus.ACTIVE


async def test_history_empty_for_new_player(session: AsyncSession, player: User) -> None:
    assert await game_service.get_history(session, player) == []
