"""
File-handle state machine.

A `MetadataHandle` owns at most one engine handle and moves through
CLOSED -> OPENING -> OPEN -> CLOSING -> CLOSED. Opening tries the primary
flags, then the fallback flags once. Updates stay in memory until `write()`;
closing without writing discards them.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .adapters.engines import LocalizedText, PacketInfo, PropertyValue, UpdatePolicy
from .errors import IllegalStateError, XmpIOError
from .flags import FileFormat, FlagNamespace, FlagSet, OpenFlag, handler_flags, names_of
from .fs import check_file
from .packet import PacketIdentity, normalize_packet
from .session import EngineSession
from .shared import get_logger, log_structured, log_success, sanitize_error_message, timer
from .values import XmpValue, format_value

logger = get_logger(__name__)


class HandleState(str, Enum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"
    CLOSING = "closing"


def _require_open_flags(label: str, flags: Any) -> None:
    if not isinstance(flags, FlagSet) or flags.namespace is not FlagNamespace.OPEN_FLAGS:
        raise TypeError(f"{label} must be an open_flags FlagSet, got {flags!r}")


@dataclass(frozen=True)
class OpenSpec:
    path: Union[str, os.PathLike]
    primary_flags: FlagSet
    fallback_flags: Optional[FlagSet] = None

    def __post_init__(self) -> None:
        _require_open_flags("primary_flags", self.primary_flags)
        if self.fallback_flags is not None:
            _require_open_flags("fallback_flags", self.fallback_flags)

    @property
    def candidates(self) -> List[FlagSet]:
        if self.fallback_flags is None:
            return [self.primary_flags]
        return [self.primary_flags, self.fallback_flags]


@dataclass(frozen=True)
class OpenAttempt:
    flags: FlagSet
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class FileInfo:
    format: int
    format_name: Optional[str]
    handler_flags: FlagSet
    open_flags: FlagSet

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format_name,
            "format_orig": self.format,
            "handler_flags": names_of(self.handler_flags.names),
            "handler_flags_orig": self.handler_flags.mask,
            "open_flags": names_of(self.open_flags.names),
            "open_flags_orig": self.open_flags.mask,
        }


class MetadataHandle:
    def __init__(self, session: EngineSession, spec: OpenSpec):
        self.session = session
        self.spec = spec
        self.state = HandleState.CLOSED
        self.open_attempts: List[OpenAttempt] = []
        self.active_flags: Optional[FlagSet] = None
        self.dirty = False
        self._raw: Any = None
        self._file_info: Optional[FileInfo] = None
        self._packet_info: Optional[PacketInfo] = None

    def __repr__(self) -> str:
        return f"MetadataHandle({os.fspath(self.spec.path)!r}, state={self.state.value})"

    def __enter__(self) -> "MetadataHandle":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def path(self) -> str:
        return os.fspath(self.spec.path)

    @property
    def is_open(self) -> bool:
        return self.state is HandleState.OPEN

    @property
    def for_update(self) -> bool:
        flags = self.active_flags or self.spec.primary_flags
        return OpenFlag.OPEN_FOR_UPDATE in flags

    # ---- lifecycle -----------------------------------------------------------

    def open(self) -> "MetadataHandle":
        if self.state is HandleState.OPEN:
            return self
        if self.state is not HandleState.CLOSED:
            raise IllegalStateError(f"Cannot open a handle in state {self.state.value}")

        check_file(
            self.spec.path,
            need_to_read=True,
            need_to_write=OpenFlag.OPEN_FOR_UPDATE in self.spec.primary_flags,
        )
        if not self.session.is_initialized():
            raise IllegalStateError("open() requires an initialized engine session")

        engine = self.session.engine
        self.open_attempts = []
        for flags in self.spec.candidates:
            self.state = HandleState.OPENING
            try:
                raw = engine.open_file(self.path, flags.mask)
            except OSError as exc:
                self.state = HandleState.CLOSED
                self._record_attempt(OpenAttempt(flags, False, sanitize_error_message(exc, "open failed")))
                continue
            except Exception:
                self.state = HandleState.CLOSED
                raise
            self._raw = raw
            self.active_flags = flags
            self.dirty = False
            self.state = HandleState.OPEN
            self._record_attempt(OpenAttempt(flags, True))
            return self

        tried = " or ".join(attempt.flags.describe() for attempt in self.open_attempts)
        raise XmpIOError(f"Failed to open file {self.path} with {tried}", self.path, self.open_attempts)

    def _record_attempt(self, attempt: OpenAttempt) -> None:
        self.open_attempts.append(attempt)
        log_structured(
            logger,
            logging.DEBUG if attempt.ok else logging.INFO,
            "open_attempt",
            path=self.path,
            flags=names_of(attempt.flags.names),
            ok=attempt.ok,
            error=attempt.error,
        )

    def write(self) -> None:
        self._require_open("write")
        self._require_update("write")
        with timer(f"xmp write {os.path.basename(self.path)}", logger) as elapsed:
            self.session.engine.write_file(self._raw)
        self.dirty = False
        log_success(logger, f"Wrote XMP packet to {self.path} ({elapsed.ms} ms)")

    def close(self) -> None:
        if self.state is HandleState.CLOSED:
            return
        self.state = HandleState.CLOSING
        if self.dirty:
            logger.warning("Closing %s without write(); pending XMP changes are discarded", self.path)
        try:
            self.session.engine.close_file(self._raw)
        except Exception as exc:
            logger.error("Failed to close %s: %s", self.path, sanitize_error_message(exc, "close failed"))
        finally:
            self._raw = None
            self.dirty = False
            self.active_flags = None
            self._file_info = None
            self._packet_info = None
            self.state = HandleState.CLOSED

    # ---- reads ---------------------------------------------------------------

    def read_packet(self) -> PacketIdentity:
        self._require_open("read_packet")
        return normalize_packet(self.session.engine.read_raw_packet(self._raw))

    def read_property(self, namespace_uri: str, name: str) -> PropertyValue:
        self._require_open("read_property")
        return self.session.engine.read_property(self._raw, namespace_uri, name)

    def read_localized_property(
        self,
        schema_ns: str,
        alt_text_name: str,
        generic_lang: str,
        specific_lang: str,
    ) -> LocalizedText:
        self._require_open("read_localized_property")
        return self.session.engine.read_localized_property(
            self._raw, schema_ns, alt_text_name, generic_lang, specific_lang
        )

    def file_info(self) -> FileInfo:
        self._require_open("file_info")
        if self._file_info is None:
            raw = self.session.engine.read_file_info(self._raw)
            self._file_info = FileInfo(
                format=raw.format,
                format_name=FileFormat.name_for(raw.format),
                handler_flags=handler_flags(raw.handler_flags),
                open_flags=FlagSet(FlagNamespace.OPEN_FLAGS, raw.open_flags),
            )
        return self._file_info

    def packet_info(self) -> PacketInfo:
        self._require_open("packet_info")
        if self._packet_info is None:
            self._packet_info = self.session.engine.read_packet_info(self._raw)
        return self._packet_info

    # ---- updates -------------------------------------------------------------

    def update_whole_packet(self, xml: Optional[str], policy: UpdatePolicy = UpdatePolicy.UPSERT) -> None:
        self._require_mutation("update_whole_packet")
        self.session.engine.update_packet(self._raw, xml, UpdatePolicy(policy))
        self.dirty = True

    def update_property(self, namespace_uri: str, name: str, value: Union[str, XmpValue]) -> None:
        self._require_mutation("update_property")
        self.session.engine.update_property(self._raw, namespace_uri, name, format_value(value))
        self.dirty = True

    def update_localized_property(
        self,
        schema_ns: str,
        alt_text_name: str,
        generic_lang: str,
        specific_lang: str,
        value: Union[str, XmpValue],
        options: int = 0,
    ) -> None:
        self._require_mutation("update_localized_property")
        self.session.engine.update_localized_property(
            self._raw, schema_ns, alt_text_name, generic_lang, specific_lang, format_value(value), options
        )
        self.dirty = True

    # ---- guards --------------------------------------------------------------

    def _require_open(self, operation: str) -> None:
        if self.state is not HandleState.OPEN:
            raise IllegalStateError(f"{operation}() requires an open handle (state: {self.state.value})")

    def _require_update(self, operation: str) -> None:
        if not self.for_update:
            raise IllegalStateError(f"{operation}() requires a handle opened with open_for_update")

    def _require_mutation(self, operation: str) -> None:
        self._require_open(operation)
        self._require_update(operation)
