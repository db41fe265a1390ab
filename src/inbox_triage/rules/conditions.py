from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Optional, Pattern

from inbox_triage.rules.core import Condition

LOGGER = logging.getLogger(__name__)


def norm(s: str | None) -> str:
    """Normalize text for matching (None-safe, lowercased)."""
    return (s or "").lower()


@lru_cache(maxsize=256)
def try_compile(pattern: str) -> Optional[Pattern[str]]:
    """Compile a case-insensitive pattern, or None if it is malformed."""
    try:
        return re.compile(pattern, flags=re.IGNORECASE)
    except re.error as exc:
        LOGGER.debug("Ignoring malformed rule pattern %r: %s", pattern, exc)
        return None


def evaluate(haystack: str | None, needle: str | None, condition: Condition) -> bool:
    """Match one rule value against text. Never raises for a known condition."""
    if condition is Condition.REGEX:
        compiled = try_compile(needle or "")
        return compiled is not None and compiled.search(haystack or "") is not None

    text = norm(haystack)
    value = norm(needle)
    if condition is Condition.CONTAINS:
        return value in text
    if condition is Condition.EQUALS:
        return text == value
    if condition is Condition.STARTS_WITH:
        return text.startswith(value)
    if condition is Condition.ENDS_WITH:
        return text.endswith(value)
    return False
