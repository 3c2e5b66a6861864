"""
One-line error messages for logs and the command line.
"""
from __future__ import annotations

from typing import Any


def sanitize_error_message(exc: Any, fallback: str, *, limit: int = 200) -> str:
    """
    Collapse `exc` into ``"<fallback>: <message>"`` on a single line.

    Whitespace runs (newlines included) become single spaces and messages
    longer than `limit` characters are cut with ``...``. An exception without
    text is reported by its class name.
    """
    fallback = fallback or "An error occurred"
    if exc is None:
        return fallback

    text = " ".join(str(exc).split())
    if not text:
        if not isinstance(exc, BaseException):
            return fallback
        text = type(exc).__name__
    if len(text) > limit:
        text = text[: max(limit - 3, 0)].rstrip() + "..."
    return f"{fallback}: {text}"
