"""Pre-flight file checks run before the engine is touched."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from .errors import XmpFileNotFoundError


def check_file(path: Any, need_to_read: bool = True, need_to_write: bool = False) -> Path:
    if path is None:
        raise XmpFileNotFoundError("File path cannot be None", path)
    file_path = Path(path)
    if not file_path.exists():
        raise XmpFileNotFoundError(f"File not found: {file_path}", path)
    if need_to_read and not os.access(file_path, os.R_OK):
        raise XmpFileNotFoundError(f"File exists but is not readable: {file_path}", path)
    if need_to_write and not os.access(file_path, os.W_OK):
        raise XmpFileNotFoundError(f"File exists but is not writable: {file_path}", path)
    return file_path
