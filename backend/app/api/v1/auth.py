"""Authentication endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    HTTPException,
    Query,
    status,
)
from fastapi.responses import RedirectResponse
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session, get_recaptcha_client
from app.core.config import get_settings
from app.core.exceptions import RecaptchaFailedError
from app.core.rate_limit import BucketType, rate_limit
from app.integrations.google_oauth import GoogleOAuthClient, GoogleOAuthError
from app.integrations.recaptcha_client import RecaptchaClient
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    EmailRequest,
    LoginRequest,
    MessageResponse,
    PasswordResetConfirm,
    RegisterRequest,
    Token,
)
from app.services import (
    email_verification_service,
    notification_service,
    oauth_service,
    password_reset_service,
)
from app.services.auth_service import (
    authenticate_user,
    create_access_token_for_user,
    register_user,
)

router = APIRouter()

_AUTH_RATE_DEP = rate_limit(BucketType.AUTH)

_GOOGLE = "google"


def _invalid_credentials() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Incorrect username or password",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _google_client() -> GoogleOAuthClient:
    try:
        return GoogleOAuthClient.from_settings(get_settings())
    except GoogleOAuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc


async def _auth_response(user: User) -> AuthResponse:
    access_token = await create_access_token_for_user(user)
    return AuthResponse(
        access_token=access_token,
        user_id=user.id,
        username=user.username,
        email=user.email,
    )


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a player account",
    dependencies=[_AUTH_RATE_DEP],
)
async def register(
    payload: RegisterRequest,
    session: Annotated[AsyncSession, Depends(get_db_session)],
    background_tasks: BackgroundTasks,
    recaptcha: Annotated[RecaptchaClient, Depends(get_recaptcha_client)],
) -> MessageResponse:
    if not await recaptcha.verify(payload.recaptcha_token, action="register"):
        raise RecaptchaFailedError()

    user = await register_user(
        session,
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )
    if user.email_verified:
        return MessageResponse(message="Registration successful. You can now sign in.")

    token = await email_verification_service.issue_verification_token(session, user)
    notification_service.send_verification_email(
        background_tasks, email=user.email, username=user.username, token=token
    )
    return MessageResponse(
        message="Registration successful. Please check your email to verify your account."
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Sign in with username or email",
    dependencies=[_AUTH_RATE_DEP],
)
async def login(
    payload: LoginRequest,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> AuthResponse:
    user = await authenticate_user(session, payload.username, payload.password)
    if not user:
        raise _invalid_credentials()
    return await _auth_response(user)


@router.post(
    "/token",
    response_model=Token,
    summary="Obtain access token",
    dependencies=[_AUTH_RATE_DEP],
)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> Token:
    """OAuth2 password flow used by the interactive docs."""
    user = await authenticate_user(session, form_data.username, form_data.password)
    if not user:
        raise _invalid_credentials()
    return Token(access_token=await create_access_token_for_user(user))


@router.get(
    "/verify-email",
    response_model=MessageResponse,
    summary="Verify an email address",
    dependencies=[_AUTH_RATE_DEP],
)
async def verify_email(
    token: Annotated[str, Query(min_length=1)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    user, newly_verified = await email_verification_service.verify_email(
        session, token=token
    )
    if newly_verified:
        notification_service.send_welcome_email(
            background_tasks, email=user.email, username=user.username
        )
    return MessageResponse(message="Email verified successfully. You can now sign in.")


@router.post(
    "/resend-verification",
    response_model=MessageResponse,
    summary="Send a new verification email",
    dependencies=[_AUTH_RATE_DEP],
)
async def resend_verification(
    payload: EmailRequest,
    session: Annotated[AsyncSession, Depends(get_db_session)],
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    user, token = await email_verification_service.resend_verification(
        session, email=payload.email
    )
    notification_service.send_verification_email(
        background_tasks, email=user.email, username=user.username, token=token
    )
    return MessageResponse(message="Verification email sent.")


@router.post(
    "/password-reset/request",
    response_model=MessageResponse,
    summary="Request password reset",
    dependencies=[_AUTH_RATE_DEP],
)
async def password_reset_request(
    payload: EmailRequest,
    session: Annotated[AsyncSession, Depends(get_db_session)],
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    token_info = await password_reset_service.create_reset_token(
        session, email=payload.email
    )
    if token_info is not None:
        raw_token, user = token_info
        notification_service.send_password_reset_email(
            background_tasks, email=user.email, token=raw_token
        )
    return MessageResponse(
        message="If an account exists with that email, a password reset link has been sent."
    )


@router.get(
    "/password-reset/validate",
    response_model=MessageResponse,
    summary="Check a password reset token",
    dependencies=[_AUTH_RATE_DEP],
)
async def password_reset_validate(
    token: Annotated[str, Query(min_length=1)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> MessageResponse:
    await password_reset_service.validate_reset_token(session, token=token)
    return MessageResponse(message="Token is valid.")


@router.post(
    "/password-reset/confirm",
    response_model=MessageResponse,
    summary="Confirm password reset",
    dependencies=[_AUTH_RATE_DEP],
)
async def password_reset_confirm(
    payload: PasswordResetConfirm,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> MessageResponse:
    await password_reset_service.reset_password(
        session, token=payload.token, new_password=payload.new_password
    )
    return MessageResponse(message="Password has been reset successfully.")


@router.get(
    "/oauth2/google/authorize",
    summary="Start Google sign-in",
    dependencies=[_AUTH_RATE_DEP],
)
async def google_authorize() -> RedirectResponse:
    client = _google_client()
    state = oauth_service.create_state(_GOOGLE)
    return RedirectResponse(client.authorization_url(state))


@router.get(
    "/oauth2/google/callback",
    summary="Finish Google sign-in",
    dependencies=[_AUTH_RATE_DEP],
)
async def google_callback(
    code: Annotated[str, Query(min_length=1)],
    state: Annotated[str, Query(min_length=1)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> RedirectResponse:
    client = _google_client()
    oauth_service.verify_state(state, _GOOGLE)
    try:
        profile = await client.fetch_profile(code)
    except GoogleOAuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc

    user = await oauth_service.login_with_google(session, profile)
    access_token = await create_access_token_for_user(user)
    redirect_to = notification_service.frontend_link(
        "/oauth/callback", token=access_token
    )
    return RedirectResponse(redirect_to)
