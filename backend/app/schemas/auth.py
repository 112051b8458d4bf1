"""Authentication schemas."""
from __future__ import annotations

import uuid

from pydantic import BaseModel, EmailStr, Field


class Token(BaseModel):
    """Response body for access tokens."""

    access_token: str
    token_type: str = "bearer"


class AuthResponse(Token):
    """Login response carrying the token and who it belongs to."""

    user_id: uuid.UUID
    username: str
    email: str


class LoginRequest(BaseModel):
    """Login payload; ``username`` may also be the account email."""

    username: str
    password: str


class RegisterRequest(BaseModel):
    """Self-service registration payload."""

    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8)
    recaptcha_token: str | None = None


class EmailRequest(BaseModel):
    """Body for endpoints keyed only by an email address."""

    email: EmailStr


class PasswordResetConfirm(BaseModel):
    """Payload to finalize a password reset."""

    token: str
    new_password: str = Field(min_length=8)


class MessageResponse(BaseModel):
    message: str


class ContactRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    message: str = Field(min_length=1, max_length=5000)
    recaptcha_token: str | None = None
