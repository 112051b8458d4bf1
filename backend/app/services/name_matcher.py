"""Guess validation against a character's canonical name.

A guess is accepted when it is the full name, when it shares a significant
token with the name (so "luffy" matches "Monkey D. Luffy"), or when it is a
substring of the name. Single-character tokens such as middle initials never
count on their own. There is no typo tolerance.
"""

from __future__ import annotations

import re

_TOKEN_SPLIT_RE = re.compile(r"[\s.]+")


def _significant_tokens(value: str) -> set[str]:
    return {part for part in _TOKEN_SPLIT_RE.split(value) if len(part) > 1}


def matches(actual_name: str, guess: str) -> bool:
    """Return True when ``guess`` identifies ``actual_name``."""
    normalized_actual = actual_name.strip().lower()
    normalized_guess = guess.strip().lower()

    if not normalized_guess:
        return False

    if normalized_actual == normalized_guess:
        return True

    if _significant_tokens(normalized_guess) & _significant_tokens(normalized_actual):
        return True

    # single letters would match almost any name
    if len(normalized_guess) > 1 and normalized_guess in normalized_actual:
        return True

    return False


__all__ = ["matches"]
