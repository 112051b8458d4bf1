"""Contact form endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends

from app.api import deps
from app.core.exceptions import RecaptchaFailedError
from app.core.rate_limit import BucketType, rate_limit
from app.integrations.recaptcha_client import RecaptchaClient
from app.schemas.auth import ContactRequest, MessageResponse
from app.services import notification_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=MessageResponse,
    summary="Send a message to the site owners",
    dependencies=[rate_limit(BucketType.GENERAL)],
)
async def submit_contact(
    payload: ContactRequest,
    background_tasks: BackgroundTasks,
    recaptcha: Annotated[RecaptchaClient, Depends(deps.get_recaptcha_client)],
) -> MessageResponse:
    if not await recaptcha.verify(payload.recaptcha_token, action="contact"):
        raise RecaptchaFailedError()
    notification_service.send_contact_email(
        background_tasks,
        name=payload.name.strip(),
        email=payload.email,
        message=payload.message.strip(),
    )
    logger.info("Contact form submitted by %s", payload.name.strip())
    return MessageResponse(message="Thanks for reaching out! We'll get back to you soon.")
