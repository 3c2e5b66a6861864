"""
Typed property values and their XMP text rendering.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Union

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1


class XmpValueType(str, Enum):
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    INT64 = "int64"
    FLOAT = "float"
    DATE = "date"


@dataclass(frozen=True)
class XmpValue:
    """A property value with an explicit XMP type.

    `format()` produces the text stored in the packet:
    bool -> ``True``/``False``, float -> ``%.6f``, date -> ISO-8601 with offset.
    """

    value: Any
    type: Union[XmpValueType, str] = XmpValueType.STRING

    def __post_init__(self) -> None:
        try:
            resolved = XmpValueType(str(getattr(self.type, "value", self.type)).lower())
        except ValueError:
            raise ValueError(f"Invalid type: {self.type}") from None
        object.__setattr__(self, "type", resolved)

    def format(self) -> str:
        kind = self.type
        if kind is XmpValueType.STRING:
            return str(self.value)
        if kind is XmpValueType.BOOL:
            return "True" if _checked_bool(self.value) else "False"
        if kind is XmpValueType.INT:
            return str(_checked_int(self.value, INT32_MIN, INT32_MAX, "int"))
        if kind is XmpValueType.INT64:
            return str(_checked_int(self.value, INT64_MIN, INT64_MAX, "int64"))
        if kind is XmpValueType.FLOAT:
            return "%.6f" % float(self.value)
        return _format_date(self.value)


_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


def _checked_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def _checked_int(value: Any, low: int, high: int, label: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Not an integer for {label}: {value!r}") from None
    if number < low or number > high:
        raise ValueError(f"Value out of range for {label}: {number}")
    return number


def _format_date(value: Any) -> str:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise ValueError(f"Not an ISO-8601 date: {value!r}") from None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    raise ValueError(f"Not a date: {value!r}")


def format_value(value: Union[str, XmpValue]) -> str:
    """Text for a property update; plain strings pass through."""
    if isinstance(value, XmpValue):
        return value.format()
    if isinstance(value, str):
        return value
    raise TypeError(f"Property values must be str or XmpValue, got {type(value).__name__}")
