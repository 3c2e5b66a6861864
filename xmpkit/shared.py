"""Package-facing alias for shared utilities."""

from __future__ import annotations

from xmpkit_shared import (
    ErrorCode,
    FileKind,
    Result,
    classify_file,
    get_logger,
    get_version,
    log_structured,
    log_success,
    sanitize_error_message,
    session_id_var,
    timer,
)

__all__ = [
    "Result",
    "ErrorCode",
    "get_logger",
    "log_success",
    "log_structured",
    "session_id_var",
    "classify_file",
    "FileKind",
    "sanitize_error_message",
    "get_version",
    "timer",
]
