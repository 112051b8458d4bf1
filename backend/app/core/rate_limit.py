"""Per-bucket request throttling backed by fastapi-limiter.

Counters live in Redis. Until ``FastAPILimiter.init`` has run (no
``REDIS_URL``, or in tests) the dependencies let every request through.
"""

from __future__ import annotations

import enum
import logging
import math

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from jose import JWTError

from app.core.config import get_settings
from app.core.security import decode_access_token

logger = logging.getLogger(__name__)

_SECONDS_MAP = {
    "second": 1,
    "seconds": 1,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


class BucketType(str, enum.Enum):
    QUESTION = "question"
    AUTH = "auth"
    GENERAL = "general"


_FALLBACKS: dict[BucketType, tuple[int, int]] = {
    BucketType.QUESTION: (20, 60),
    BucketType.AUTH: (5, 60),
    BucketType.GENERAL: (100, 3600),
}


def parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    """Parse ``"<count>/<unit>"`` into ``(times, seconds)``."""
    try:
        count_str, window_str = value.split("/", 1)
        count = int(count_str.strip())
    except (AttributeError, ValueError):
        return fallback
    if count <= 0:
        return fallback
    seconds = _SECONDS_MAP.get(window_str.strip().lower(), fallback[1])
    return count, seconds


def bucket_limit(bucket_type: BucketType) -> tuple[int, int]:
    settings = get_settings()
    configured = {
        BucketType.QUESTION: settings.rate_limit_question,
        BucketType.AUTH: settings.rate_limit_auth,
        BucketType.GENERAL: settings.rate_limit_general,
    }[bucket_type]
    return parse_rate(configured, fallback=_FALLBACKS[bucket_type])


def client_key(request: Request) -> str:
    """User id from a valid bearer token, otherwise the client IP."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            subject = decode_access_token(token).get("sub")
        except JWTError:
            subject = None
        if subject:
            return f"user:{subject}"

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _identifier_for(bucket_type: BucketType):
    async def _identifier(request: Request) -> str:
        return f"{bucket_type.value}:{client_key(request)}"

    return _identifier


async def _too_many_requests(request: Request, response: Response, pexpire: int) -> None:
    retry_after = max(1, math.ceil(pexpire / 1000))
    logger.warning("Rate limit exceeded for %s %s", request.method, request.url.path)
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=f"Too many requests. Try again in {retry_after} seconds.",
        headers={"Retry-After": str(retry_after)},
    )


def rate_limit(bucket_type: BucketType):
    """Route dependency enforcing the limit configured for ``bucket_type``."""
    times, seconds = bucket_limit(bucket_type)
    limiter = RateLimiter(
        times=times,
        seconds=seconds,
        identifier=_identifier_for(bucket_type),
        callback=_too_many_requests,
    )

    async def _dependency(request: Request, response: Response) -> None:
        if FastAPILimiter.redis is None:
            return None
        await limiter(request, response)

    return Depends(_dependency)


__all__ = ["BucketType", "bucket_limit", "client_key", "parse_rate", "rate_limit"]
