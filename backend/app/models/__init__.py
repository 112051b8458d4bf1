"""ORM models package export."""

from app.models.character import Character
from app.models.game import Game, GameStatus, Question
from app.models.tokens import EmailVerificationToken, PasswordResetToken
from app.models.user import AuthProvider, User

__all__ = [
    "AuthProvider",
    "Character",
    "EmailVerificationToken",
    "Game",
    "GameStatus",
    "PasswordResetToken",
    "Question",
    "User",
]
