"""Integration shortcuts."""

from .google_oauth import GoogleOAuthClient, GoogleOAuthError, GoogleProfile
from .llm_client import (
    AnswerProviderError,
    ChatCompletionAnswerer,
    QuestionAnswerer,
    UnavailableAnswerer,
    build_question_answerer,
)
from .recaptcha_client import RecaptchaClient

__all__ = [
    "AnswerProviderError",
    "ChatCompletionAnswerer",
    "GoogleOAuthClient",
    "GoogleOAuthError",
    "GoogleProfile",
    "QuestionAnswerer",
    "RecaptchaClient",
    "UnavailableAnswerer",
    "build_question_answerer",
]
