"""
Engine interface.

An engine owns the metadata toolkit state (initialize/terminate) and the
per-file handles it hands out. Handles are opaque to callers; flags cross the
boundary as plain integer masks.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional


class UpdatePolicy(str, Enum):
    """How new packet content meets the existing packet."""

    UPSERT = "upsert"
    OVERRIDE = "override"


@dataclass(frozen=True)
class RawFileInfo:
    format: int
    handler_flags: int
    open_flags: int


@dataclass(frozen=True)
class PacketInfo:
    char_form: int = 0
    has_wrapper: bool = False
    length: int = -1
    offset: int = -1
    pad: int = 0
    pad_size: int = 0
    writeable: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PropertyValue:
    exists: bool
    value: Optional[str] = None
    options: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LocalizedText:
    exists: bool
    actual_lang: Optional[str] = None
    value: Optional[str] = None
    options: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class XmpEngine(ABC):
    name = "abstract"

    @abstractmethod
    def initialize(self, plugin_dir: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def terminate(self) -> None:
        ...

    @abstractmethod
    def is_initialized(self) -> bool:
        ...

    @abstractmethod
    def open_file(self, path: str, flags: int) -> Any:
        """Open `path` with the given open-flag mask. Raises OSError on failure."""

    @abstractmethod
    def close_file(self, handle: Any) -> None:
        """Release the handle. Unwritten changes are discarded."""

    @abstractmethod
    def write_file(self, handle: Any) -> None:
        ...

    @abstractmethod
    def read_raw_packet(self, handle: Any) -> Optional[str]:
        ...

    @abstractmethod
    def read_file_info(self, handle: Any) -> RawFileInfo:
        ...

    @abstractmethod
    def read_packet_info(self, handle: Any) -> PacketInfo:
        ...

    @abstractmethod
    def read_property(self, handle: Any, namespace_uri: str, name: str) -> PropertyValue:
        ...

    @abstractmethod
    def update_property(self, handle: Any, namespace_uri: str, name: str, value: str) -> None:
        ...

    @abstractmethod
    def read_localized_property(
        self,
        handle: Any,
        schema_ns: str,
        alt_text_name: str,
        generic_lang: str,
        specific_lang: str,
    ) -> LocalizedText:
        ...

    @abstractmethod
    def update_localized_property(
        self,
        handle: Any,
        schema_ns: str,
        alt_text_name: str,
        generic_lang: str,
        specific_lang: str,
        value: str,
        options: int = 0,
    ) -> None:
        ...

    @abstractmethod
    def update_packet(self, handle: Any, xml: Optional[str], policy: UpdatePolicy) -> None:
        ...

    @abstractmethod
    def register_namespace(self, uri: str, suggested_prefix: str) -> str:
        """Register `uri`; returns the prefix actually in use."""
