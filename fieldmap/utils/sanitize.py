"""Utilities for keeping raw cell values readable in logs."""

import re
from typing import Any

_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_for_logging(value: Any, max_length: int = 80) -> str:
    """
    Render a raw value on a single line for logging.

    Args:
        value: Cell value or column name
        max_length: Maximum length before truncation

    Returns:
        Single-line string, truncated with "..." when longer than max_length
    """
    if value is None:
        return ""

    text = _WHITESPACE_RE.sub(" ", str(value)).strip()
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text
