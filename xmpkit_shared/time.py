"""
Elapsed-time measurement for engine calls.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from .log import get_logger

_logger = get_logger(__name__)


@dataclass
class Elapsed:
    label: str
    seconds: float = 0.0

    @property
    def ms(self) -> int:
        return int(round(self.seconds * 1000))


@contextmanager
def timer(label: str, logger: logging.Logger | None = None, level: int = logging.DEBUG) -> Iterator[Elapsed]:
    """
    Measure the block and log ``"<label> took 0.012s"``.

    Usage:
        with timer("xmp write", logger) as elapsed:
            engine.write_file(handle)
        log_success(logger, f"Wrote packet ({elapsed.ms} ms)")
    """
    elapsed = Elapsed(label)
    start = time.perf_counter()
    try:
        yield elapsed
    finally:
        elapsed.seconds = time.perf_counter() - start
        (logger or _logger).log(level, "%s took %.3fs", label, elapsed.seconds)
