"""Character catalog model."""
from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import TimestampMixin


class Character(TimestampMixin, Base):
    """A character that can be drawn as the hidden answer of a game."""

    __tablename__ = "characters"
    __table_args__ = (Index("ix_characters_active", "is_active"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    anime: Mapped[str] = mapped_column(String(200), nullable=False)
    gender: Mapped[str | None] = mapped_column(String(20))
    age: Mapped[str | None] = mapped_column(String(50))
    hair_color: Mapped[str | None] = mapped_column(String(50))
    eye_color: Mapped[str | None] = mapped_column(String(50))
    occupation: Mapped[str | None] = mapped_column(String(200))
    personality: Mapped[str | None] = mapped_column(Text)
    powers_abilities: Mapped[str | None] = mapped_column(Text)
    backstory: Mapped[str | None] = mapped_column(Text)
    notable_quotes: Mapped[str | None] = mapped_column(Text)
    relationships: Mapped[str | None] = mapped_column(Text)
    appearance_description: Mapped[str | None] = mapped_column(Text)
    # protagonist, antagonist, supporting
    character_type: Mapped[str | None] = mapped_column(String(50))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
