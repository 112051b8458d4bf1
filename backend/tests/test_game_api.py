"""Game endpoints."""

from __future__ import annotations

import uuid
from typing import Any

import pytest
from httpx import AsyncClient

from app.api.deps import get_question_answerer
from app.db.session import get_sessionmaker
from app.main import app
from app.models import Character, Game
from app.services.game_service import FALLBACK_ANSWER

pytestmark = pytest.mark.asyncio


async def _hidden_character(db_url: str, game_id: str) -> Character:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        game = await session.get(Game, uuid.UUID(game_id))
        assert game is not None
        character = await session.get(Character, game.character_id)
        assert character is not None
        return character


async def test_game_requires_authentication(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.post("/api/v1/game/start")
    assert response.status_code == 401


async def test_full_game_round(
    app_context: dict[str, Any], answerer, db_url: str
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    headers = app_context["headers"]
    app.dependency_overrides[get_question_answerer] = lambda: answerer

    start = await client.post("/api/v1/game/start", headers=headers)
    assert start.status_code == 200
    game = start.json()
    assert game["status"] == "ACTIVE"
    assert game["revealed_character"] is None
    assert game["questions_count"] == 0

    ask = await client.post(
        "/api/v1/game/ask", json={"question": "Are you human?"}, headers=headers
    )
    assert ask.status_code == 200
    assert ask.json() == {
        "question": "Are you human?",
        "answer": answerer.reply,
        "total_questions": 1,
    }

    current = await client.get("/api/v1/game/current", headers=headers)
    assert current.status_code == 200
    assert current.json()["conversation_history"][0]["answer"] == answerer.reply
    assert current.json()["revealed_character"] is None

    character = await _hidden_character(db_url, game["game_id"])
    guess = await client.post(
        "/api/v1/game/guess",
        json={"character_name": character.name.lower()},
        headers=headers,
    )
    assert guess.status_code == 200
    result = guess.json()
    assert result["status"] == "WON"
    assert result["guessed_correctly"] is True
    assert result["revealed_character"] == f"{character.name} from {character.anime}"
    assert len(result["conversation_history"]) == 1

    after = await client.get("/api/v1/game/current", headers=headers)
    assert after.status_code == 404


async def test_ask_without_game_is_not_found(
    app_context: dict[str, Any], answerer
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    app.dependency_overrides[get_question_answerer] = lambda: answerer

    response = await client.post(
        "/api/v1/game/ask", json={"question": "Anyone there?"}, headers=app_context["headers"]
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "No active game found. Please start a new game."
    assert answerer.calls == []


async def test_blank_question_is_bad_request(
    app_context: dict[str, Any], answerer
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    headers = app_context["headers"]
    app.dependency_overrides[get_question_answerer] = lambda: answerer
    await client.post("/api/v1/game/start", headers=headers)

    response = await client.post("/api/v1/game/ask", json={"question": "  "}, headers=headers)

    assert response.status_code == 400


async def test_unconfigured_answerer_returns_fallback(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    headers = app_context["headers"]
    await client.post("/api/v1/game/start", headers=headers)

    response = await client.post(
        "/api/v1/game/ask", json={"question": "Are you a ninja?"}, headers=headers
    )

    assert response.status_code == 200
    assert response.json()["answer"] == FALLBACK_ANSWER
    assert response.json()["total_questions"] == 0


async def test_history_lists_finished_and_active_games(
    app_context: dict[str, Any],
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    headers = app_context["headers"]

    first = (await client.post("/api/v1/game/start", headers=headers)).json()
    await client.post(
        "/api/v1/game/guess", json={"character_name": "Nobody Special"}, headers=headers
    )
    second = (await client.post("/api/v1/game/start", headers=headers)).json()

    history = await client.get("/api/v1/game/history", headers=headers)

    assert history.status_code == 200
    games = history.json()
    assert [game["game_id"] for game in games] == [second["game_id"], first["game_id"]]
    assert games[1]["status"] == "LOST"
    assert games[1]["final_guess"] == "Nobody Special"
    assert all(game["revealed_character"] for game in games)


async def test_restart_forfeits_active_game(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    headers = app_context["headers"]

    first = (await client.post("/api/v1/game/start", headers=headers)).json()
    second = (await client.post("/api/v1/game/start", headers=headers)).json()

    current = (await client.get("/api/v1/game/current", headers=headers)).json()
    assert current["game_id"] == second["game_id"]
    history = (await client.get("/api/v1/game/history", headers=headers)).json()
    forfeited = next(game for game in history if game["game_id"] == first["game_id"])
    assert forfeited["status"] == "LOST"
    assert forfeited["ended_at"] is not None
