"""Character schemas."""
from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field


class CharacterBase(BaseModel):
    """Descriptive attributes shared by create and read models."""

    name: str = Field(min_length=1, max_length=100)
    anime: str = Field(min_length=1, max_length=200)
    gender: str | None = Field(default=None, max_length=20)
    age: str | None = Field(default=None, max_length=50)
    hair_color: str | None = Field(default=None, max_length=50)
    eye_color: str | None = Field(default=None, max_length=50)
    occupation: str | None = Field(default=None, max_length=200)
    personality: str | None = None
    powers_abilities: str | None = None
    backstory: str | None = None
    notable_quotes: str | None = None
    relationships: str | None = None
    appearance_description: str | None = None
    character_type: str | None = Field(default=None, max_length=50)
    is_active: bool = True


class CharacterCreate(CharacterBase):
    """Payload for seeding a character."""


class CharacterRead(CharacterBase):
    """Serialized character."""

    id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)
