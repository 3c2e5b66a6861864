"""
Exempi-backed engine through python-xmp-toolkit (`libxmp`).

Install with ``pip install xmpkit[exempi]`` and select with
``XMPKIT_ENGINE=libxmp``. Files are opened through the low-level
`libxmp.exempi` calls so the caller's open-flag mask reaches Exempi as is.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from libxmp import XMPError, XMPMeta, exempi

from ...errors import EngineError
from ...shared import get_logger
from .base import LocalizedText, PacketInfo, PropertyValue, RawFileInfo, UpdatePolicy, XmpEngine
from .rdf import XmpDocument

logger = get_logger(__name__)

_CLOSE_NO_OPTION = 0


@dataclass
class LibxmpFile:
    path: str
    open_flags: int
    xfptr: Any
    meta: Optional[XMPMeta] = None
    modified: bool = False
    closed: bool = False


class LibxmpEngine(XmpEngine):
    name = "libxmp"

    def __init__(self):
        self._initialized = False

    def initialize(self, plugin_dir: Optional[str] = None) -> None:
        if plugin_dir:
            logger.debug("Exempi ships its own handlers; ignoring plugin directory %s", plugin_dir)
        try:
            exempi.init()
        except XMPError as exc:
            raise EngineError(f"Failed to initialize Exempi: {exc}") from exc
        self._initialized = True

    def terminate(self) -> None:
        if not self._initialized:
            return
        self._initialized = False
        exempi.terminate()

    def is_initialized(self) -> bool:
        return self._initialized

    def register_namespace(self, uri: str, suggested_prefix: str) -> str:
        if not self._initialized:
            raise EngineError("Engine is not initialized")
        prefix = XMPMeta().register_namespace(uri, suggested_prefix)
        if prefix is None:
            raise EngineError(f"Cannot register namespace {uri}")
        return prefix.rstrip(":")

    def open_file(self, path: str, flags: int) -> LibxmpFile:
        if not self._initialized:
            raise EngineError("Engine is not initialized")
        xfptr = exempi.files_new()
        try:
            exempi.files_open(xfptr, str(path), flags)
        except XMPError as exc:
            exempi.files_free(xfptr)
            raise OSError(f"Failed to open file {path}: {exc}") from exc
        return LibxmpFile(path=str(path), open_flags=flags, xfptr=xfptr)

    def close_file(self, handle: LibxmpFile) -> None:
        if handle.closed:
            return
        handle.closed = True
        try:
            exempi.files_close(handle.xfptr, _CLOSE_NO_OPTION)
        finally:
            exempi.files_free(handle.xfptr)
            handle.meta = None

    def write_file(self, handle: LibxmpFile) -> None:
        meta = self._meta(handle)
        if not exempi.files_can_put_xmp(handle.xfptr, meta.xmpptr):
            raise EngineError(f"Can't update XMP in {handle.path}")
        try:
            exempi.files_put_xmp(handle.xfptr, meta.xmpptr)
        except XMPError as exc:
            raise EngineError(f"XMP SDK error: {exc}") from exc
        handle.modified = False

    def read_raw_packet(self, handle: LibxmpFile) -> Optional[str]:
        meta = self._meta(handle, create=False)
        return meta.serialize_to_unicode() if meta is not None else None

    def read_file_info(self, handle: LibxmpFile) -> RawFileInfo:
        _, open_flags, file_format, handler_flags = exempi.files_get_file_info(handle.xfptr)
        return RawFileInfo(format=int(file_format), handler_flags=int(handler_flags), open_flags=int(open_flags))

    def read_packet_info(self, handle: LibxmpFile) -> PacketInfo:
        # Exempi does not expose the packet position through python-xmp-toolkit.
        meta = self._meta(handle, create=False)
        return PacketInfo(has_wrapper=meta is not None)

    def read_property(self, handle: LibxmpFile, namespace_uri: str, name: str) -> PropertyValue:
        meta = self._meta(handle, create=False)
        if meta is None or not meta.does_property_exist(namespace_uri, name):
            return PropertyValue(exists=False)
        return PropertyValue(exists=True, value=meta.get_property(namespace_uri, name))

    def read_localized_property(
        self,
        handle: LibxmpFile,
        schema_ns: str,
        alt_text_name: str,
        generic_lang: str,
        specific_lang: str,
    ) -> LocalizedText:
        meta = self._meta(handle, create=False)
        if meta is None:
            return LocalizedText(exists=False)
        value = meta.get_localized_text(schema_ns, alt_text_name, generic_lang or None, specific_lang)
        if value is None:
            return LocalizedText(exists=False)
        # python-xmp-toolkit does not report which language matched
        return LocalizedText(exists=True, actual_lang=None, value=value)

    def update_property(self, handle: LibxmpFile, namespace_uri: str, name: str, value: str) -> None:
        if self._meta(handle).set_property(namespace_uri, name, value) is False:
            raise EngineError(f"Failed to set XMP property {name}")
        handle.modified = True

    def update_localized_property(
        self,
        handle: LibxmpFile,
        schema_ns: str,
        alt_text_name: str,
        generic_lang: str,
        specific_lang: str,
        value: str,
        options: int = 0,
    ) -> None:
        meta = self._meta(handle)
        if meta.set_localized_text(schema_ns, alt_text_name, generic_lang or None, specific_lang, value) is False:
            raise EngineError(f"Failed to set localized property {alt_text_name}")
        handle.modified = True

    def update_packet(self, handle: LibxmpFile, xml: Optional[str], policy: UpdatePolicy) -> None:
        if policy is UpdatePolicy.OVERRIDE:
            merged = xml
        elif xml is None:
            return
        else:
            current = self._meta(handle).serialize_to_unicode()
            document = XmpDocument.from_xml(current)
            document.merge(XmpDocument.from_xml(xml))
            merged = document.to_xml()

        meta = XMPMeta()
        if merged:
            try:
                meta.parse_from_str(merged)
            except XMPError as exc:
                raise EngineError(f"Can't update XMP new Data: {exc}") from exc
        handle.meta = meta
        handle.modified = True

    def _meta(self, handle: LibxmpFile, create: bool = True) -> Optional[XMPMeta]:
        if handle.closed:
            raise EngineError(f"{handle.path} is closed")
        if handle.meta is None:
            try:
                xmpptr = exempi.files_get_new_xmp(handle.xfptr)
            except XMPError:
                xmpptr = None
            if xmpptr is not None:
                handle.meta = XMPMeta(_xmp_internal_ref=xmpptr)
            elif create:
                handle.meta = XMPMeta()
        return handle.meta
