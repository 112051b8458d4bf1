"""Logging filters that scrub sensitive content."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"(Authorization: Bearer\s+[\w\.-]+"
    r"|(?:access_token|password|new_password|token)\"\s*:\s*\"[^\"]+\")",
    re.IGNORECASE,
)
# verification and reset links carry the raw token in the query string
_TOKEN_QUERY_PATTERN = re.compile(r"([?&](?:token|code|state)=)[^&\s\"']+", re.IGNORECASE)


def redact(message: str) -> str:
    message = _SENSITIVE_PATTERN.sub("**REDACTED**", message)
    return _TOKEN_QUERY_PATTERN.sub(r"\1**REDACTED**", message)


class SensitiveFilter(logging.Filter):
    """Replace sensitive tokens in log messages with a redaction marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if isinstance(record.args, tuple) and record.args:
            record.args = tuple(
                redact(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True


__all__ = ["SensitiveFilter", "redact"]
