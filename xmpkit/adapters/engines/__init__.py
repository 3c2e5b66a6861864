"""Metadata engines."""
from __future__ import annotations

from ...errors import EngineError
from .base import LocalizedText, PacketInfo, PropertyValue, RawFileInfo, UpdatePolicy, XmpEngine
from .scanner import PacketScannerEngine

__all__ = [
    "XmpEngine",
    "UpdatePolicy",
    "RawFileInfo",
    "PacketInfo",
    "PropertyValue",
    "LocalizedText",
    "PacketScannerEngine",
    "build_engine",
]

ENGINE_NAMES = ("scanner", "libxmp")


def build_engine(name: str) -> XmpEngine:
    """Instantiate the engine registered under `name`."""
    key = (name or "scanner").strip().lower()
    if key == "scanner":
        return PacketScannerEngine()
    if key == "libxmp":
        try:
            from .libxmp_engine import LibxmpEngine
        except Exception as exc:
            raise EngineError(
                f"libxmp engine unavailable ({exc}); install python-xmp-toolkit and Exempi"
            ) from exc
        return LibxmpEngine()
    raise EngineError(f"Unknown engine {name!r}; expected one of {', '.join(ENGINE_NAMES)}")
