"""Google reCAPTCHA v3 verification."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class RecaptchaClient:
    """Checks a client token's success flag, score and action."""

    def __init__(
        self,
        secret_key: str | None,
        *,
        enabled: bool,
        threshold: float = 0.5,
        verify_url: str = RECAPTCHA_VERIFY_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._enabled = enabled
        self._threshold = threshold
        self._verify_url = verify_url
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "RecaptchaClient":
        return cls(
            settings.recaptcha_secret_key,
            enabled=settings.recaptcha_enabled,
            threshold=settings.recaptcha_threshold,
        )

    async def _siteverify(self, token: str) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=5, transport=self._transport) as client:
            response = await client.post(
                self._verify_url,
                data={"secret": self._secret_key or "", "response": token},
            )
            response.raise_for_status()
            return response.json()

    async def verify(self, token: str | None, action: str | None = None) -> bool:
        """Return True when the token passes; ``action=None`` skips the action check."""
        if not self._enabled:
            logger.info("reCAPTCHA verification skipped (disabled)")
            return True
        if not self._secret_key or not self._secret_key.strip():
            logger.error("reCAPTCHA is enabled but RECAPTCHA_SECRET_KEY is not configured")
            return False
        if not token:
            logger.warning("reCAPTCHA token is missing")
            return False

        try:
            body = await self._siteverify(token)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("reCAPTCHA verification failed with exception: %s", exc)
            return False

        success = bool(body.get("success"))
        score = float(body.get("score") or 0.0)
        response_action = body.get("action", "")
        logger.info(
            "reCAPTCHA verification - success: %s, score: %s, action: %s, expected: %s",
            success,
            score,
            response_action,
            action,
        )
        if not success:
            logger.warning(
                "reCAPTCHA verification failed: error codes %s", body.get("error-codes")
            )
            return False
        if score < self._threshold:
            logger.warning(
                "reCAPTCHA score %s is below threshold %s", score, self._threshold
            )
            return False
        if action is not None and action != response_action:
            logger.warning(
                "reCAPTCHA action mismatch. Expected: %s, got: %s", action, response_action
            )
            return False
        return True


__all__ = ["RECAPTCHA_VERIFY_URL", "RecaptchaClient"]
