"""
xmpkit: read and update XMP packets embedded in files.

    from xmpkit import read_from_file, write_to_file
    from xmpkit.namespaces import XMP_NS_DC

    write_to_file("doc.pdf", {XMP_NS_DC: {"format": "application/pdf"}})
    print(read_from_file("doc.pdf")["xmp_data"])
"""
from .adapters.engines import LocalizedText, PacketInfo, PropertyValue, UpdatePolicy, XmpEngine
from .errors import (
    EngineError,
    IllegalStateError,
    MalformedPacketError,
    UnknownFlagError,
    XmpError,
    XmpFileNotFoundError,
    XmpIOError,
)
from .facade import open_xmp_file, read_from_file, write_to_file
from .flags import (
    CHAR_FORM,
    HANDLER_FLAGS,
    OPEN_FLAGS,
    CharFormFlag,
    FileFormat,
    FlagNamespace,
    FlagSet,
    HandlerFlag,
    OpenFlag,
)
from .handle import FileInfo, HandleState, MetadataHandle, OpenAttempt, OpenSpec
from .packet import PacketIdentity, normalize_packet
from .session import EngineSession, SessionToken, get_default_session
from .values import XmpValue, XmpValueType

__all__ = [
    "read_from_file",
    "write_to_file",
    "open_xmp_file",
    "EngineSession",
    "SessionToken",
    "get_default_session",
    "MetadataHandle",
    "OpenSpec",
    "OpenAttempt",
    "HandleState",
    "FileInfo",
    "PacketInfo",
    "PropertyValue",
    "LocalizedText",
    "UpdatePolicy",
    "XmpEngine",
    "PacketIdentity",
    "normalize_packet",
    "XmpValue",
    "XmpValueType",
    "FlagNamespace",
    "FlagSet",
    "OpenFlag",
    "HandlerFlag",
    "CharFormFlag",
    "FileFormat",
    "OPEN_FLAGS",
    "HANDLER_FLAGS",
    "CHAR_FORM",
    "XmpError",
    "XmpFileNotFoundError",
    "XmpIOError",
    "MalformedPacketError",
    "IllegalStateError",
    "UnknownFlagError",
    "EngineError",
]
