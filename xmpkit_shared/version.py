"""Version lookup for `xmpkit version`."""
from __future__ import annotations

import re
from importlib import metadata
from pathlib import Path

_DIST_NAME = "xmpkit"
_UNKNOWN = "0.0.0"
_VERSION_LINE = re.compile(r'^version\s*=\s*"([^"]+)"', re.MULTILINE)


def _find_pyproject_version() -> str:
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    try:
        match = _VERSION_LINE.search(pyproject.read_text(encoding="utf-8"))
    except OSError:
        return _UNKNOWN
    return match.group(1).strip() if match else _UNKNOWN


def get_version() -> str:
    # A source checkout wins over an installed distribution.
    version = _find_pyproject_version()
    if version != _UNKNOWN:
        return version
    try:
        return metadata.version(_DIST_NAME)
    except metadata.PackageNotFoundError:
        return _UNKNOWN
