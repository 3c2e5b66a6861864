"""
Logging for xmpkit: one emoji-tagged line per record, stamped with the
engine session token that was active when the record was emitted.
"""
import json
import logging
import os
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Final

# Between INFO (20) and WARNING (30)
SUCCESS_LEVEL: Final[int] = 25
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")

LEVEL_EMOJI: Final[dict[int, str]] = {
    logging.DEBUG: "🔍",
    logging.INFO: "ℹ️",
    SUCCESS_LEVEL: "✅",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "🔥",
}

PREFIX: Final[str] = "🏷️ xmpkit"
ROOT_LOGGER: Final[str] = "xmpkit"

# Label of the session token active in the current context (empty outside a session scope).
session_id_var: ContextVar[str] = ContextVar("session_id", default="")


class CorrelationFilter(logging.Filter):
    """Copy the active session token label onto `record.session_id`."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = session_id_var.get()
        return True


class EmojiFormatter(logging.Formatter):
    """``🏷️ xmpkit [✅] xmpkit.handle [3f2a9c1e#1]: message``"""

    def __init__(self) -> None:
        super().__init__(f"{PREFIX} [%(emoji)s] %(name)s%(session_part)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        record.emoji = LEVEL_EMOJI.get(record.levelno, "🏷️")
        sid = str(getattr(record, "session_id", "") or "").strip()
        record.session_part = f" [{sid}]" if sid else ""
        return super().format(record)


def _debug_enabled() -> bool:
    return os.getenv("XMPKIT_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")


def _logger_name(name: str) -> str:
    if name.startswith("__main__"):
        return f"{ROOT_LOGGER}.main"
    head, _, rest = name.partition(".")
    if rest and head in ("xmpkit", "xmpkit_shared"):
        return f"{ROOT_LOGGER}.{rest}"
    return f"{ROOT_LOGGER}.{name}"


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Get a logger under the ``xmpkit.`` hierarchy.

    ``xmpkit.handle`` and ``xmpkit_shared.log`` become ``xmpkit.handle`` and
    ``xmpkit.log``. The first call attaches a console handler with the emoji
    formatter and stops propagation; ``XMPKIT_DEBUG`` lowers the level to DEBUG.
    """
    logger = logging.getLogger(_logger_name(name))
    if not any(isinstance(f, CorrelationFilter) for f in logger.filters):
        logger.addFilter(CorrelationFilter())

    if level is not None:
        logger.setLevel(level)
    elif not logger.handlers:
        logger.setLevel(logging.DEBUG if _debug_enabled() else logging.INFO)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(EmojiFormatter())
        logger.addHandler(handler)
        logger.propagate = False

    return logger


def log_success(logger: logging.Logger, message: str) -> None:
    logger.log(SUCCESS_LEVEL, message)


def log_structured(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Emit one JSON object: ``{"message", "timestamp", "context"}``."""
    payload = {
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "context": context,
    }
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
