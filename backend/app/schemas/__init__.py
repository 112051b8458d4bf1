"""Schema exports."""

from app.schemas.auth import (
    AuthResponse,
    ContactRequest,
    EmailRequest,
    LoginRequest,
    MessageResponse,
    PasswordResetConfirm,
    RegisterRequest,
    Token,
)
from app.schemas.character import CharacterCreate, CharacterRead
from app.schemas.game import (
    GameRead,
    GuessSubmit,
    QuestionAnswerRead,
    QuestionAsk,
    QuestionRead,
)

__all__ = [
    "AuthResponse",
    "CharacterCreate",
    "CharacterRead",
    "ContactRequest",
    "EmailRequest",
    "GameRead",
    "GuessSubmit",
    "LoginRequest",
    "MessageResponse",
    "PasswordResetConfirm",
    "QuestionAnswerRead",
    "QuestionAsk",
    "QuestionRead",
    "RegisterRequest",
    "Token",
]
