"""
Pure-Python engine: finds ``xpacket``-wrapped packets by byte scanning.

Embedded packets are rewritten in place inside the bytes they already
occupy (trailing padding absorbs growth). Whole-file ``.xmp`` sidecars are
served by a smart handler that may grow and is rewritten atomically.
"""
from __future__ import annotations

import os
import re
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from PIL import Image

from ...config import SIDECAR_PADDING
from ...errors import EngineError
from ...flags import HANDLER_FLAGS, OPEN_FLAGS, FileFormat, HandlerFlag, OpenFlag
from ...namespaces import DEFAULT_PREFIXES
from ...shared import classify_file, get_logger
from .base import LocalizedText, PacketInfo, PropertyValue, RawFileInfo, UpdatePolicy, XmpEngine
from .rdf import XPACKET_BEGIN, XPACKET_END_W, XmpDocument, make_padding

logger = get_logger(__name__)

_BEGIN_MARKER = b"<?xpacket begin="
_END_RE = re.compile(rb"<\?xpacket\s+end=['\"]([rw])['\"]\s*\?>")

_OPEN_FOR_UPDATE = OPEN_FLAGS.value_for(OpenFlag.OPEN_FOR_UPDATE)
_OPEN_USE_SMART_HANDLER = OPEN_FLAGS.value_for(OpenFlag.OPEN_USE_SMART_HANDLER)

SCANNER_HANDLER_FLAGS = HANDLER_FLAGS.bitmask_for(
    HandlerFlag.PREFERS_IN_PLACE,
    HandlerFlag.ALLOWS_ONLY_XMP,
    HandlerFlag.RETURNS_RAW_PACKET,
)
SIDECAR_HANDLER_FLAGS = HANDLER_FLAGS.bitmask_for(
    HandlerFlag.CAN_INJECT_XMP,
    HandlerFlag.CAN_EXPAND,
    HandlerFlag.CAN_REWRITE,
    HandlerFlag.ALLOWS_ONLY_XMP,
    HandlerFlag.RETURNS_RAW_PACKET,
    HandlerFlag.ALLOWS_SAFE_UPDATE,
)

_PIL_FORMATS = {
    "JPEG": FileFormat.JPEG,
    "MPO": FileFormat.JPEG,
    "PNG": FileFormat.PNG,
    "TIFF": FileFormat.TIFF,
    "GIF": FileFormat.GIF,
    "JPEG2000": FileFormat.JPEG2K,
    "PSD": FileFormat.PHOTOSHOP,
    "EPS": FileFormat.EPS,
}

_EXTENSION_FORMATS = {
    ".pdf": FileFormat.PDF,
    ".xmp": FileFormat.XML,
    ".xml": FileFormat.XML,
    ".svg": FileFormat.SVG,
    ".html": FileFormat.HTML,
    ".htm": FileFormat.HTML,
    ".txt": FileFormat.TEXT,
    ".eps": FileFormat.EPS,
    ".ps": FileFormat.POSTSCRIPT,
    ".ai": FileFormat.ILLUSTRATOR,
    ".indd": FileFormat.INDESIGN,
    ".psd": FileFormat.PHOTOSHOP,
    ".mp4": FileFormat.MPEG4,
    ".mov": FileFormat.MOV,
    ".avi": FileFormat.AVI,
    ".flv": FileFormat.FLV,
    ".mxf": FileFormat.MXF,
    ".mpg": FileFormat.MPEG,
    ".mpeg": FileFormat.MPEG,
    ".wav": FileFormat.WAV,
    ".mp3": FileFormat.MP3,
    ".aif": FileFormat.AIFF,
    ".aiff": FileFormat.AIFF,
    ".heic": FileFormat.HEIF,
    ".heif": FileFormat.HEIF,
}


@dataclass
class ScannedFile:
    path: Path
    open_flags: int
    format: int
    handler_flags: int
    sidecar: bool
    raw_packet: Optional[str] = None
    offset: int = -1
    length: int = -1
    pad_size: int = 0
    has_wrapper: bool = False
    writeable: bool = False
    document: Optional[XmpDocument] = None
    modified: bool = False
    closed: bool = False


def detect_format(path: Path, data: bytes) -> int:
    if data.startswith(b"%PDF-"):
        return FileFormat.PDF
    suffix = path.suffix.lower()
    if suffix in (".xmp", ".xml"):
        return FileFormat.XML

    kind = classify_file(path.name)
    if kind in ("image", "unknown"):
        try:
            with Image.open(path) as img:
                pil_format = img.format or ""
        except (OSError, ValueError) as exc:
            logger.debug("Pillow could not identify %s: %s", path.name, exc)
        else:
            if pil_format in _PIL_FORMATS:
                return _PIL_FORMATS[pil_format]
            logger.debug("Pillow format %s has no XMP format code", pil_format)

    return _EXTENSION_FORMATS.get(suffix, FileFormat.UNKNOWN)


def scan_packet(data: bytes) -> Optional[Dict[str, Any]]:
    """Locate the first wrapped UTF-8 packet in `data`."""
    start = data.find(_BEGIN_MARKER)
    if start < 0:
        return None
    end = _END_RE.search(data, start)
    if end is None:
        return None
    try:
        raw = data[start:end.end()].decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Skipping packet at offset %d: not UTF-8", start)
        return None
    body = data[start:end.start()]
    return {
        "raw": raw,
        "offset": start,
        "length": end.end() - start,
        "pad_size": len(body) - len(body.rstrip(b" \t\r\n")),
        "writeable": end.group(1) == b"w",
    }


class PacketScannerEngine(XmpEngine):
    name = "scanner"

    def __init__(self, sidecar_padding: int = SIDECAR_PADDING):
        self.sidecar_padding = max(0, int(sidecar_padding))
        self.plugin_dir: Optional[str] = None
        self._initialized = False
        self._prefixes: Dict[str, str] = {}

    # ---- lifecycle -----------------------------------------------------------

    def initialize(self, plugin_dir: Optional[str] = None) -> None:
        self.plugin_dir = plugin_dir or None
        if self.plugin_dir and not os.path.isdir(self.plugin_dir):
            logger.debug("Plugin directory %s not found; packet scanning does not need it", self.plugin_dir)
        self._initialized = True

    def terminate(self) -> None:
        self._initialized = False
        self._prefixes.clear()

    def is_initialized(self) -> bool:
        return self._initialized

    def register_namespace(self, uri: str, suggested_prefix: str) -> str:
        if not self._initialized:
            raise EngineError("Engine is not initialized")
        existing = self._prefixes.get(uri) or DEFAULT_PREFIXES.get(uri)
        if existing:
            return existing

        taken = set(self._prefixes.values()) | set(DEFAULT_PREFIXES.values())
        prefix = suggested_prefix.rstrip(":")
        n = 1
        while prefix in taken:
            prefix = f"{suggested_prefix.rstrip(':')}_{n}_"
            n += 1
        self._prefixes[uri] = prefix
        return prefix

    # ---- files ---------------------------------------------------------------

    def open_file(self, path: str, flags: int) -> ScannedFile:
        if not self._initialized:
            raise EngineError("Engine is not initialized")
        file_path = Path(path)
        sidecar = file_path.suffix.lower() == ".xmp"

        if flags & _OPEN_USE_SMART_HANDLER and not sidecar:
            raise OSError(f"No smart handler available for {file_path.name}")
        if flags & _OPEN_FOR_UPDATE and not os.access(file_path, os.W_OK):
            raise PermissionError(f"File is not writable: {file_path}")

        data = file_path.read_bytes()
        fmt = detect_format(file_path, data)

        if sidecar:
            handle = ScannedFile(file_path, flags, fmt, SIDECAR_HANDLER_FLAGS, sidecar=True)
            if data.strip():
                try:
                    text = data.decode("utf-8-sig")
                except UnicodeDecodeError as exc:
                    raise OSError(f"Sidecar {file_path.name} is not UTF-8") from exc
                found = scan_packet(data)
                handle.raw_packet = text
                handle.offset = 0
                handle.length = len(data)
                handle.has_wrapper = found is not None
                handle.pad_size = found["pad_size"] if found else 0
                handle.writeable = True
            return handle

        handle = ScannedFile(file_path, flags, fmt, SCANNER_HANDLER_FLAGS, sidecar=False)
        found = scan_packet(data)
        if found is not None:
            handle.raw_packet = found["raw"]
            handle.offset = found["offset"]
            handle.length = found["length"]
            handle.pad_size = found["pad_size"]
            handle.has_wrapper = True
            handle.writeable = found["writeable"]
        return handle

    def close_file(self, handle: ScannedFile) -> None:
        if handle.modified:
            logger.debug("Discarding unwritten changes to %s", handle.path.name)
        handle.document = None
        handle.modified = False
        handle.closed = True

    def write_file(self, handle: ScannedFile) -> None:
        self._require_update(handle)
        if not handle.modified or handle.document is None:
            return
        if handle.sidecar:
            self._rewrite_sidecar(handle)
        else:
            self._rewrite_in_place(handle)
        handle.modified = False

    def _rewrite_in_place(self, handle: ScannedFile) -> None:
        if handle.offset < 0:
            raise EngineError(f"{handle.path.name} has no XMP packet to update in place")
        if not handle.writeable:
            raise EngineError(f"XMP packet in {handle.path.name} is read-only")

        head = f"{XPACKET_BEGIN}\n{handle.document.to_xml()}\n".encode("utf-8")
        tail = XPACKET_END_W.encode("ascii")
        pad = handle.length - len(head) - len(tail)
        if pad < 0:
            raise EngineError(
                f"Updated packet needs {-pad} more bytes than {handle.path.name} reserves"
            )
        packet = head + make_padding(pad).encode("ascii") + tail
        with open(handle.path, "r+b") as fh:
            fh.seek(handle.offset)
            fh.write(packet)
        handle.raw_packet = packet.decode("utf-8")
        handle.pad_size = pad

    def _rewrite_sidecar(self, handle: ScannedFile) -> None:
        data = handle.document.to_packet(padding=self.sidecar_padding).encode("utf-8")
        fd = None
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=str(handle.path.parent), prefix=".xmpkit_", suffix=".xmp")
            with os.fdopen(fd, "wb") as out:
                fd = None
                out.write(data)
            if handle.path.exists():
                os.chmod(tmp_path, stat.S_IMODE(handle.path.stat().st_mode))
            Path(tmp_path).replace(handle.path)
            tmp_path = None
        finally:
            if fd is not None:
                os.close(fd)
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)
        handle.raw_packet = data.decode("utf-8")
        handle.offset = 0
        handle.length = len(data)
        handle.pad_size = self.sidecar_padding
        handle.has_wrapper = True
        handle.writeable = True

    # ---- reads ---------------------------------------------------------------

    def read_raw_packet(self, handle: ScannedFile) -> Optional[str]:
        if handle.modified and handle.document is not None:
            return handle.document.to_packet()
        return handle.raw_packet

    def read_file_info(self, handle: ScannedFile) -> RawFileInfo:
        return RawFileInfo(format=int(handle.format), handler_flags=handle.handler_flags, open_flags=handle.open_flags)

    def read_packet_info(self, handle: ScannedFile) -> PacketInfo:
        if handle.raw_packet is None:
            return PacketInfo()
        return PacketInfo(
            char_form=0,
            has_wrapper=handle.has_wrapper,
            length=handle.length,
            offset=handle.offset,
            pad=0,
            pad_size=handle.pad_size,
            writeable=handle.writeable,
        )

    def read_property(self, handle: ScannedFile, namespace_uri: str, name: str) -> PropertyValue:
        document = self._document(handle)
        if document is None:
            return PropertyValue(exists=False)
        return document.get_property(namespace_uri, name)

    def read_localized_property(
        self,
        handle: ScannedFile,
        schema_ns: str,
        alt_text_name: str,
        generic_lang: str,
        specific_lang: str,
    ) -> LocalizedText:
        document = self._document(handle)
        if document is None:
            return LocalizedText(exists=False)
        return document.get_localized(schema_ns, alt_text_name, generic_lang, specific_lang)

    # ---- updates -------------------------------------------------------------

    def update_property(self, handle: ScannedFile, namespace_uri: str, name: str, value: str) -> None:
        self._document(handle, for_update=True).set_property(namespace_uri, name, value)
        handle.modified = True

    def update_localized_property(
        self,
        handle: ScannedFile,
        schema_ns: str,
        alt_text_name: str,
        generic_lang: str,
        specific_lang: str,
        value: str,
        options: int = 0,
    ) -> None:
        document = self._document(handle, for_update=True)
        document.set_localized(schema_ns, alt_text_name, generic_lang, specific_lang, value, options)
        handle.modified = True

    def update_packet(self, handle: ScannedFile, xml: Optional[str], policy: UpdatePolicy) -> None:
        self._require_update(handle)
        if policy is UpdatePolicy.OVERRIDE:
            handle.document = XmpDocument.from_xml(xml, self._prefixes)
        elif xml is None:
            return
        else:
            self._document(handle, for_update=True).merge(XmpDocument.from_xml(xml, self._prefixes))
        handle.modified = True

    # ---- helpers -------------------------------------------------------------

    def _require_update(self, handle: ScannedFile) -> None:
        if handle.closed:
            raise EngineError(f"{handle.path.name} is closed")
        if not handle.open_flags & _OPEN_FOR_UPDATE:
            raise EngineError(f"{handle.path.name} was not opened for update")

    def _document(self, handle: ScannedFile, for_update: bool = False) -> Optional[XmpDocument]:
        if for_update:
            self._require_update(handle)
        if handle.document is None:
            if handle.raw_packet is not None:
                handle.document = XmpDocument.from_xml(handle.raw_packet, self._prefixes)
            elif handle.sidecar and for_update:
                handle.document = XmpDocument.empty(self._prefixes)
            elif for_update:
                raise EngineError(f"{handle.path.name} has no XMP packet and packet scanning cannot inject one")
        return handle.document
