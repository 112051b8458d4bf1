"""Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; a single exception handler in
``app.main`` turns them into ``{"detail": ...}`` responses.
"""

from __future__ import annotations

from fastapi import status


class GuessGameError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(GuessGameError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class NoActiveGameError(NotFoundError):
    default_message = "No active game found. Please start a new game."


class NoActiveCharactersError(NotFoundError):
    default_message = "No active characters found"


class TokenNotFoundError(GuessGameError):
    default_message = "Invalid or expired token."


class TokenExpiredError(GuessGameError):
    default_message = "Token has expired."


class AlreadyExistsError(GuessGameError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InvalidInputError(GuessGameError):
    default_message = "Invalid input"


class EmailNotVerifiedError(GuessGameError):
    default_message = "Please verify your email before signing in."


class RecaptchaFailedError(GuessGameError):
    default_message = (
        "reCAPTCHA verification failed. Please refresh the page and try again."
    )


__all__ = [
    "AlreadyExistsError",
    "EmailNotVerifiedError",
    "GuessGameError",
    "InvalidInputError",
    "NoActiveCharactersError",
    "NoActiveGameError",
    "NotFoundError",
    "RecaptchaFailedError",
    "TokenExpiredError",
    "TokenNotFoundError",
]
