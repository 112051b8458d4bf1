"""Registration, verification, login and password reset over HTTP."""

from __future__ import annotations

from typing import Any

import pytest
from httpx import AsyncClient

from app.core.config import get_settings
from app.integrations.google_oauth import GoogleOAuthClient, GoogleProfile
from app.services import notification_service

pytestmark = pytest.mark.asyncio


@pytest.fixture()
def outbox(monkeypatch: pytest.MonkeyPatch) -> dict[str, list[dict[str, Any]]]:
    """Capture outgoing emails instead of scheduling them."""
    sent: dict[str, list[dict[str, Any]]] = {"verification": [], "reset": [], "welcome": []}

    def _capture(kind: str):
        def _send(background_tasks, **kwargs: Any) -> None:
            sent[kind].append(kwargs)

        return _send

    monkeypatch.setattr(
        notification_service, "send_verification_email", _capture("verification")
    )
    monkeypatch.setattr(notification_service, "send_password_reset_email", _capture("reset"))
    monkeypatch.setattr(notification_service, "send_welcome_email", _capture("welcome"))
    return sent


async def _register(client: AsyncClient, **overrides: str):
    payload = {
        "username": "newplayer",
        "email": "newplayer@example.com",
        "password": "SecretPass1",
    }
    payload.update(overrides)
    return await client.post("/api/v1/auth/register", json=payload)


async def test_register_verify_and_login(app_context: dict[str, Any], outbox) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]

    register_resp = await _register(client)
    assert register_resp.status_code == 201
    assert "verify" in register_resp.json()["message"]
    assert len(outbox["verification"]) == 1
    token = outbox["verification"][0]["token"]

    blocked = await client.post(
        "/api/v1/auth/login",
        json={"username": "newplayer", "password": "SecretPass1"},
    )
    assert blocked.status_code == 400
    assert "verify" in blocked.json()["detail"]

    verify_resp = await client.get("/api/v1/auth/verify-email", params={"token": token})
    assert verify_resp.status_code == 200
    assert outbox["welcome"][0]["username"] == "newplayer"

    reused = await client.get("/api/v1/auth/verify-email", params={"token": token})
    assert reused.status_code == 400

    login_resp = await client.post(
        "/api/v1/auth/login",
        json={"username": "newplayer@example.com", "password": "SecretPass1"},
    )
    assert login_resp.status_code == 200
    body = login_resp.json()
    assert body["access_token"]
    assert body["token_type"] == "bearer"
    assert body["username"] == "newplayer"
    assert body["email"] == "newplayer@example.com"


async def test_duplicate_registration_conflicts(app_context: dict[str, Any], outbox) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]

    same_username = await _register(client, username=app_context["username"])
    assert same_username.status_code == 409
    assert same_username.json()["detail"] == "Username already exists"

    same_email = await _register(client, email=app_context["email"])
    assert same_email.status_code == 409
    assert same_email.json()["detail"] == "Email already exists"


async def test_register_validates_payload(app_context: dict[str, Any], outbox) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await _register(client, password="short")
    assert response.status_code == 422


async def test_login_with_bad_password(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.post(
        "/api/v1/auth/login",
        json={"username": app_context["username"], "password": "wrong-password"},
    )
    assert response.status_code == 401


async def test_token_endpoint_accepts_form(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.post(
        "/api/v1/auth/token",
        data={"username": app_context["username"], "password": app_context["password"]},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    assert response.json()["access_token"]


async def test_resend_verification(app_context: dict[str, Any], outbox) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    await _register(client)

    resent = await client.post(
        "/api/v1/auth/resend-verification", json={"email": "newplayer@example.com"}
    )
    assert resent.status_code == 200
    assert len(outbox["verification"]) == 2

    stale = outbox["verification"][0]["token"]
    assert (
        await client.get("/api/v1/auth/verify-email", params={"token": stale})
    ).status_code == 400

    already = await client.post(
        "/api/v1/auth/resend-verification", json={"email": app_context["email"]}
    )
    assert already.status_code == 400

    unknown = await client.post(
        "/api/v1/auth/resend-verification", json={"email": "ghost@example.com"}
    )
    assert unknown.status_code == 404


async def test_password_reset_flow(app_context: dict[str, Any], outbox) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]

    known = await client.post(
        "/api/v1/auth/password-reset/request", json={"email": app_context["email"]}
    )
    unknown = await client.post(
        "/api/v1/auth/password-reset/request", json={"email": "ghost@example.com"}
    )
    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert len(outbox["reset"]) == 1
    token = outbox["reset"][0]["token"]

    valid = await client.get(
        "/api/v1/auth/password-reset/validate", params={"token": token}
    )
    assert valid.status_code == 200

    confirm = await client.post(
        "/api/v1/auth/password-reset/confirm",
        json={"token": token, "new_password": "Another1Pass"},
    )
    assert confirm.status_code == 200

    replay = await client.post(
        "/api/v1/auth/password-reset/confirm",
        json={"token": token, "new_password": "Another1Pass"},
    )
    assert replay.status_code == 400

    old_login = await client.post(
        "/api/v1/auth/login",
        json={"username": app_context["username"], "password": app_context["password"]},
    )
    assert old_login.status_code == 401
    new_login = await client.post(
        "/api/v1/auth/login",
        json={"username": app_context["username"], "password": "Another1Pass"},
    )
    assert new_login.status_code == 200


async def test_google_sign_in_unconfigured(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.get("/api/v1/auth/oauth2/google/authorize")
    assert response.status_code == 503


async def test_google_sign_in_creates_verified_account(
    app_context: dict[str, Any], monkeypatch: pytest.MonkeyPatch
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "client-id")
    monkeypatch.setenv("GOOGLE_CLIENT_SECRET", "client-secret")
    monkeypatch.setenv(
        "GOOGLE_REDIRECT_URI", "http://test/api/v1/auth/oauth2/google/callback"
    )
    get_settings.cache_clear()

    async def _fake_profile(self: GoogleOAuthClient, code: str) -> GoogleProfile:
        return GoogleProfile(subject="42", email="fan@example.com", name="Anime Fan")

    monkeypatch.setattr(GoogleOAuthClient, "fetch_profile", _fake_profile)

    authorize = await client.get("/api/v1/auth/oauth2/google/authorize")
    assert authorize.status_code == 307
    location = authorize.headers["location"]
    assert location.startswith("https://accounts.google.com/")
    state = location.split("state=")[1].split("&")[0]

    forged = await client.get(
        "/api/v1/auth/oauth2/google/callback",
        params={"code": "abc", "state": "forged"},
    )
    assert forged.status_code == 400

    callback = await client.get(
        "/api/v1/auth/oauth2/google/callback", params={"code": "abc", "state": state}
    )
    assert callback.status_code == 307
    redirect_to = callback.headers["location"]
    assert redirect_to.startswith(f"{get_settings().frontend_url}/oauth/callback?token=")

    token = redirect_to.split("token=")[1]
    history = await client.get(
        "/api/v1/game/history", headers={"Authorization": f"Bearer {token}"}
    )
    assert history.status_code == 200
    assert history.json() == []
