"""Chat-completion client that answers questions in character."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

import httpx
from jinja2 import Environment, FileSystemLoader

from app.core.config import Settings
from app.models import Character
from app.services.character_service import describe_character

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
_PROMPT_ENV = Environment(loader=FileSystemLoader(_TEMPLATE_DIR), autoescape=False)


class AnswerProviderError(RuntimeError):
    """Raised when the answering service cannot produce an answer."""


class QuestionAnswerer(Protocol):
    """Turns a character profile and a free-text question into an answer."""

    async def answer(self, *, question: str, character: Character) -> str:
        ...


def build_system_prompt(character: Character) -> str:
    template = _PROMPT_ENV.get_template("character_prompt.txt")
    return template.render(
        name=character.name,
        anime=character.anime,
        profile=describe_character(character),
    )


class ChatCompletionAnswerer:
    """OpenAI-compatible ``/chat/completions`` client."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str,
        model: str,
        timeout: float,
        temperature: float = 0.7,
        max_tokens: int = 200,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._transport = transport

    def _payload(self, question: str, character: Character) -> dict[str, Any]:
        return {
            "model": self._model,
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
            "messages": [
                {"role": "system", "content": build_system_prompt(character)},
                {"role": "user", "content": question},
            ],
        }

    async def answer(self, *, question: str, character: Character) -> str:
        logger.info("Processing question for character %s", character.id)
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    "/chat/completions",
                    json=self._payload(question, character),
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as exc:
            raise AnswerProviderError(f"Answer request failed: {exc}") from exc
        except ValueError as exc:
            raise AnswerProviderError("Answer response was not valid JSON") from exc

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AnswerProviderError("Answer response had an unexpected shape") from exc
        if not isinstance(content, str) or not content.strip():
            raise AnswerProviderError("Answer response was empty")
        return content.strip()


class UnavailableAnswerer:
    """Stand-in used when no API key is configured."""

    async def answer(self, *, question: str, character: Character) -> str:
        raise AnswerProviderError("No answering service is configured")


def build_question_answerer(settings: Settings) -> QuestionAnswerer:
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; questions will get the fallback answer")
        return UnavailableAnswerer()
    return ChatCompletionAnswerer(
        settings.openai_api_key,
        base_url=settings.openai_base_url,
        model=settings.openai_model,
        timeout=settings.ai_timeout_seconds,
        temperature=settings.ai_temperature,
        max_tokens=settings.ai_max_tokens,
    )


__all__ = [
    "AnswerProviderError",
    "ChatCompletionAnswerer",
    "QuestionAnswerer",
    "UnavailableAnswerer",
    "build_question_answerer",
    "build_system_prompt",
]
