"""
Result values for the command line.

Each CLI command returns a `Result[str]`; `main` prints `data` or `error`
and exits with `exit_code`. Library code raises instead.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .errors import sanitize_error_message
from .types import ErrorCode

T = TypeVar("T")

OK = "OK"


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of one CLI command.

        def print_metadata(path: str) -> Result[str]:
            try:
                packet = read_from_file(path)
            except XmpError as exc:
                return Result.from_exception(exc, "Error")
            return Result.Ok(packet["xmp_data"])
    """

    data: T | None = None
    error: str | None = None
    code: str = OK
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.code == OK

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    @classmethod
    def Ok(cls, data: T, **meta: Any) -> Result[T]:
        return cls(data=data, meta=meta)

    @classmethod
    def Err(cls, code: Any, error: str, **meta: Any) -> Result[T]:
        # Accepts ErrorCode, any other Enum, or a plain string
        return cls(error=error, code=str(getattr(code, "value", code)), meta=meta)

    @classmethod
    def from_exception(cls, exc: BaseException, fallback: str, **meta: Any) -> Result[T]:
        """Err with the exception's own `code` when it carries an ErrorCode, else ENGINE_ERROR."""
        code = getattr(exc, "code", None)
        if not isinstance(code, ErrorCode):
            code = ErrorCode.ENGINE_ERROR
        return cls.Err(code, sanitize_error_message(exc, fallback), **meta)

    def unwrap(self) -> T:
        if not self.ok or self.data is None:
            raise ValueError(f"[{self.code}] {self.error}")
        return self.data

    def unwrap_or(self, default: T) -> T:
        return default if (not self.ok or self.data is None) else self.data
