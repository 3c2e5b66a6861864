"""Shared utilities for xmpkit."""
from .errors import sanitize_error_message
from .log import get_logger, log_structured, log_success, session_id_var
from .result import Result
from .time import Elapsed, timer
from .types import ErrorCode, FileKind, classify_file
from .version import get_version

__all__ = [
    "Result",
    "get_logger",
    "log_success",
    "Elapsed",
    "timer",
    "FileKind",
    "ErrorCode",
    "classify_file",
    "log_structured",
    "session_id_var",
    "sanitize_error_message",
    "get_version",
]
