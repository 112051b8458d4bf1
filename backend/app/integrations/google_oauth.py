"""Google OAuth2 authorization-code flow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx

from app.core.config import Settings

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


@dataclass(slots=True)
class GoogleProfile:
    """Subset of the OpenID userinfo payload we rely on."""

    subject: str
    email: str
    name: str | None


class GoogleOAuthError(RuntimeError):
    """Raised when the code exchange or profile lookup fails."""


class GoogleOAuthClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleOAuthClient":
        if not settings.google_oauth_enabled:
            raise GoogleOAuthError("Google sign-in is not configured")
        return cls(
            settings.google_client_id or "",
            settings.google_client_secret or "",
            settings.google_redirect_uri or "",
        )

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> GoogleProfile:
        """Exchange ``code`` for an access token and load the user's profile."""
        try:
            async with httpx.AsyncClient(timeout=10, transport=self._transport) as client:
                token_response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                        "redirect_uri": self._redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
                token_response.raise_for_status()
                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise GoogleOAuthError("Token response did not include an access token")

                userinfo_response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                userinfo_response.raise_for_status()
                payload: dict[str, Any] = userinfo_response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise GoogleOAuthError(f"Google sign-in failed: {exc}") from exc

        email = payload.get("email")
        if not email:
            raise GoogleOAuthError("OAuth2 provider did not return an email address.")
        return GoogleProfile(
            subject=str(payload.get("sub", "")),
            email=email,
            name=payload.get("name"),
        )


__all__ = ["GoogleOAuthClient", "GoogleOAuthError", "GoogleProfile"]
