"""
Typed failures raised by xmpkit.

Library callers catch these; the CLI maps them to `ErrorCode` values.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from .shared import ErrorCode

if TYPE_CHECKING:
    from .handle import OpenAttempt


class XmpError(Exception):
    """Base class for every xmpkit failure."""

    code: ErrorCode = ErrorCode.ENGINE_ERROR


class XmpFileNotFoundError(XmpError, FileNotFoundError):
    """Path is missing, None, unreadable or unwritable (pre-flight check)."""

    code = ErrorCode.FILE_NOT_FOUND

    def __init__(self, message: str, path: Any = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class XmpIOError(XmpError, OSError):
    """Opening failed with the primary and, if given, the fallback flags."""

    code = ErrorCode.OPEN_FAILED

    def __init__(self, message: str, path: Any = None, attempts: "Sequence[OpenAttempt]" = ()):
        super().__init__(message)
        self.path = path
        self.attempts = tuple(attempts)

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class MalformedPacketError(XmpError, ValueError):
    """A raw packet is not well-formed XML."""

    code = ErrorCode.MALFORMED_PACKET


class IllegalStateError(XmpError, RuntimeError):
    """Operation invoked on a handle or session in the wrong state."""

    code = ErrorCode.ILLEGAL_STATE


class UnknownFlagError(XmpError, ValueError):
    """Flag name not present in the namespace table."""

    code = ErrorCode.UNKNOWN_FLAG


class EngineError(XmpError, RuntimeError):
    """The metadata engine rejected an operation."""

    code = ErrorCode.ENGINE_ERROR
