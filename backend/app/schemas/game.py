"""Game request and response schemas."""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.game import GameStatus


class QuestionAsk(BaseModel):
    """A free-text question about the hidden character."""

    question: str = Field(max_length=1000)


class GuessSubmit(BaseModel):
    """The player's final guess."""

    character_name: str = Field(max_length=100)


class QuestionRead(BaseModel):
    question: str
    answer: str
    asked_at: datetime


class QuestionAnswerRead(BaseModel):
    """Result of asking a question."""

    question: str
    answer: str
    total_questions: int


class GameRead(BaseModel):
    """Serialized game; ``revealed_character`` is null while the game is hidden."""

    game_id: uuid.UUID
    status: GameStatus
    questions_count: int
    started_at: datetime
    ended_at: datetime | None = None
    guessed_correctly: bool
    final_guess: str | None = None
    revealed_character: str | None = None
    conversation_history: list[QuestionRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
