"""
Error codes and file kinds shared by the library and the CLI.
"""
import os
from enum import Enum
from typing import Final, Literal

FileKind = Literal["image", "video", "audio", "document", "sidecar", "unknown"]


class ErrorCode(str, Enum):
    """Codes carried by `XmpError` subclasses and CLI results."""

    # Client / validation
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_XML = "INVALID_XML"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    UNKNOWN_FLAG = "UNKNOWN_FLAG"

    # File handle lifecycle
    OPEN_FAILED = "OPEN_FAILED"
    ILLEGAL_STATE = "ILLEGAL_STATE"
    WRITE_FAILED = "WRITE_FAILED"

    # Engine / parsing
    ENGINE_ERROR = "ENGINE_ERROR"
    MALFORMED_PACKET = "MALFORMED_PACKET"

# Extensions by kind; scanner format detection falls back to these
EXTENSIONS: Final[dict[FileKind, frozenset[str]]] = {
    "image": frozenset({".png", ".jpg", ".jpeg", ".tif", ".tiff", ".gif", ".webp", ".psd"}),
    "video": frozenset({".mp4", ".mov", ".avi", ".mkv", ".flv", ".mxf"}),
    "audio": frozenset({".wav", ".mp3", ".aif", ".aiff", ".flac"}),
    "document": frozenset({".pdf", ".ai", ".eps", ".ps", ".indd", ".svg"}),
    "sidecar": frozenset({".xmp"}),
}

_KIND_BY_EXT: Final[dict[str, FileKind]] = {ext: kind for kind, exts in EXTENSIONS.items() for ext in exts}


def classify_file(filename: str) -> FileKind:
    """Kind of `filename` from its extension (case-insensitive), ``"unknown"`` otherwise."""
    return _KIND_BY_EXT.get(os.path.splitext(filename)[1].lower(), "unknown")
