"""
Configuration for xmpkit.

Every value can be overridden through the environment; overrides are read
once at import time.
"""
import os
import platform
import sys
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parent


def _env_raw(*names: str, default: str | None = None) -> str | None:
    for name in names:
        if not name:
            continue
        val = os.getenv(name)
        if val is not None and str(val).strip() != "":
            return str(val).strip()
    return default


def _env_int(default: int, *names: str, min_value: int | None = None, max_value: int | None = None) -> int:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid integer for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _default_plugins_path(system: str | None = None, machine: str | None = None) -> str:
    """Platform-specific location of the bundled PDF handler plugin."""
    system = (system or sys.platform).lower()
    machine = (machine or platform.machine()).lower()
    base = PACKAGE_ROOT / "plugins" / "PDF_Handler"

    if system.startswith("darwin"):
        return str(base / "macintosh" / "universal")
    if system.startswith("linux"):
        if machine in ("x86_64", "amd64"):
            return str(base / "i80386linux" / "i80386linux_x64")
        if machine in ("i386", "i486", "i586", "i686"):
            return str(base / "i80386linux" / "i80386linux")
        logger.warning("Unsupported Linux architecture for PLUGINS_PATH: %s. PDF handler might not work.", machine)
        return ""
    logger.warning("Unsupported platform for PLUGINS_PATH: %s. PDF handler might not work.", system)
    return ""


def resolve_plugins_path() -> str:
    """Plugin directory: `XMP_TOOLKIT_PLUGINS_PATH` first, then the platform default."""
    env_path = _env_raw("XMP_TOOLKIT_PLUGINS_PATH", "XMPKIT_PLUGINS_PATH")
    if env_path:
        return env_path
    return _default_plugins_path()


PLUGINS_PATH = resolve_plugins_path()

# Engine backing every session: "scanner" (pure Python) or "libxmp" (Exempi via python-xmp-toolkit)
ENGINE_NAME = (_env_raw("XMPKIT_ENGINE", default="scanner") or "scanner").lower()

# Padding (bytes) reserved after the XML when a sidecar packet is rewritten from scratch
SIDECAR_PADDING = _env_int(2048, "XMPKIT_SIDECAR_PADDING", min_value=0, max_value=1024 * 1024)
