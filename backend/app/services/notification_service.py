"""Transactional email built from Jinja templates and sent in the background."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Any, Iterable
from urllib.parse import urlencode

from fastapi import BackgroundTasks
from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.core.config import get_settings

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
_ENV = Environment(
    loader=FileSystemLoader(_TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


def render_template(name: str, **context: Any) -> str:
    settings = get_settings()
    context.setdefault("app_name", settings.app_name)
    return _ENV.get_template(name).render(**context)


def frontend_link(path: str, **params: str) -> str:
    base = get_settings().frontend_url.rstrip("/")
    query = f"?{urlencode(params)}" if params else ""
    return f"{base}{path}{query}"


def schedule_email(
    background_tasks: BackgroundTasks,
    *,
    recipients: Iterable[str],
    subject: str,
    html_body: str,
) -> None:
    """Queue an email to be delivered asynchronously."""
    recipients_list = [addr for addr in recipients if addr]
    if not recipients_list:
        logger.debug("No recipients provided for email; skipping")
        return
    if not get_settings().smtp_enabled:
        logger.info("Email sending skipped (SMTP disabled): %s to %s", subject, recipients_list)
        return
    background_tasks.add_task(_send_email, recipients_list, subject, html_body)


def build_verification_email(*, username: str, token: str) -> tuple[str, str]:
    settings = get_settings()
    subject = f"Verify Your Email - {settings.app_name}"
    body = render_template(
        "verify_email.html",
        username=username,
        verify_url=frontend_link("/verify-email", token=token),
        ttl_hours=settings.verification_token_ttl_hours,
    )
    return subject, body


def build_password_reset_email(*, token: str) -> tuple[str, str]:
    settings = get_settings()
    subject = f"Reset Your Password - {settings.app_name}"
    body = render_template(
        "password_reset.html",
        reset_url=frontend_link("/reset-password", token=token),
        ttl_minutes=settings.reset_token_ttl_minutes,
    )
    return subject, body


def build_welcome_email(*, username: str) -> tuple[str, str]:
    settings = get_settings()
    subject = f"Welcome to {settings.app_name}!"
    body = render_template(
        "welcome.html", username=username, game_url=frontend_link("/game")
    )
    return subject, body


def build_contact_email(*, name: str, email: str, message: str) -> tuple[str, str]:
    subject = f"New Contact Form Submission - {get_settings().app_name}"
    body = render_template("contact.html", name=name, email=email, message=message)
    return subject, body


def send_verification_email(
    background_tasks: BackgroundTasks, *, email: str, username: str, token: str
) -> None:
    subject, body = build_verification_email(username=username, token=token)
    schedule_email(background_tasks, recipients=[email], subject=subject, html_body=body)


def send_password_reset_email(
    background_tasks: BackgroundTasks, *, email: str, token: str
) -> None:
    subject, body = build_password_reset_email(token=token)
    schedule_email(background_tasks, recipients=[email], subject=subject, html_body=body)


def send_welcome_email(
    background_tasks: BackgroundTasks, *, email: str, username: str
) -> None:
    subject, body = build_welcome_email(username=username)
    schedule_email(background_tasks, recipients=[email], subject=subject, html_body=body)


def send_contact_email(
    background_tasks: BackgroundTasks, *, name: str, email: str, message: str
) -> None:
    settings = get_settings()
    inbox = settings.contact_recipient or settings.smtp_from
    if not inbox:
        logger.warning("Contact form submitted but no contact inbox is configured")
        return
    subject, body = build_contact_email(name=name, email=email, message=message)
    schedule_email(background_tasks, recipients=[inbox], subject=subject, html_body=body)


def _send_email(recipients: list[str], subject: str, html_body: str) -> None:
    settings = get_settings()
    if not settings.smtp_enabled:
        logger.info("SMTP settings missing; skipping email delivery to %s", recipients)
        return

    message = EmailMessage()
    message["Subject"] = subject
    message["To"] = ", ".join(recipients)
    message["From"] = (
        settings.smtp_from or settings.smtp_username or "no-reply@guessgame.local"
    )
    message.set_content("This message contains HTML content.")
    message.add_alternative(html_body, subtype="html")

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
            if settings.smtp_username and settings.smtp_password:
                try:
                    smtp.starttls()
                except smtplib.SMTPException:
                    logger.debug("SMTP server does not support STARTTLS")
                smtp.login(settings.smtp_username, settings.smtp_password)
            smtp.send_message(message)
        logger.info("Email sent successfully: %s to %s", subject, recipients)
    except (smtplib.SMTPException, OSError) as exc:  # pragma: no cover - network dependent
        logger.exception("Failed to send email to %s: %s", recipients, exc)
