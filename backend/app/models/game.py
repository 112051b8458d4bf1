"""Game session and transcript models."""
from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import utcnow


class GameStatus(str, enum.Enum):
    """Lifecycle of a single play-through."""

    ACTIVE = "ACTIVE"
    WON = "WON"
    LOST = "LOST"


class Game(Base):
    """One play-through from character selection to a final guess."""

    __tablename__ = "games"
    __table_args__ = (
        Index("ix_games_user", "user_id"),
        Index(
            "ux_games_user_active",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    character_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("characters.id", ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[GameStatus] = mapped_column(
        Enum(GameStatus, name="game_status"),
        default=GameStatus.ACTIVE,
        nullable=False,
    )
    questions_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    guessed_correctly: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    final_guess: Mapped[str | None] = mapped_column(String(100))


class Question(Base):
    """A question/answer pair appended to a game's transcript."""

    __tablename__ = "questions"
    __table_args__ = (
        UniqueConstraint("game_id", "position", name="uq_questions_game_position"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    game_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("games.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    answer_text: Mapped[str] = mapped_column(Text, nullable=False)
    asked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
