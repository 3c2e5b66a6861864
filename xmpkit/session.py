"""
Reference-counted engine session.

The engine is initialized when the first token is acquired and terminated
when the last one is released, so nested scopes share a single engine
lifetime. Sessions are not thread-safe; the underlying engines are not
reentrant and callers serialize access themselves.
"""
from __future__ import annotations

import itertools
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Set

from . import config
from .adapters.engines import XmpEngine, build_engine
from .errors import IllegalStateError
from .shared import get_logger, sanitize_error_message, session_id_var

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionToken:
    session_id: str
    serial: int

    @property
    def label(self) -> str:
        return f"{self.session_id}#{self.serial}"


class EngineSession:
    def __init__(
        self,
        engine: Optional[XmpEngine] = None,
        plugin_path: Optional[str] = None,
        session_id: Optional[str] = None,
    ):
        self.engine = engine if engine is not None else build_engine(config.ENGINE_NAME)
        self.default_plugin_path = plugin_path
        self.plugin_path: Optional[str] = None
        self.id = session_id or uuid.uuid4().hex[:8]
        self._serials = itertools.count(1)
        self._live: Set[int] = set()

    @property
    def ref_count(self) -> int:
        return len(self._live)

    def is_initialized(self) -> bool:
        return bool(self._live) and self.engine.is_initialized()

    def acquire(self, plugin_path: Optional[str] = None) -> SessionToken:
        """Take a reference; the first one initializes the engine."""
        if not self._live:
            path = plugin_path or self.default_plugin_path or config.PLUGINS_PATH or None
            self.engine.initialize(path)
            self.plugin_path = path
            logger.debug("Engine %s initialized (plugins: %s)", self.engine.name, path or "-")
        elif plugin_path and plugin_path != self.plugin_path:
            logger.debug("Engine already initialized with %s; ignoring %s", self.plugin_path, plugin_path)

        token = SessionToken(self.id, next(self._serials))
        self._live.add(token.serial)
        return token

    def release(self, token: SessionToken) -> None:
        """Drop a reference; the last one terminates the engine."""
        if token.session_id != self.id or token.serial not in self._live:
            logger.warning("Ignoring release of inactive session token %s", token.label)
            return
        self._live.discard(token.serial)
        if self._live:
            return
        try:
            self.engine.terminate()
        except Exception as exc:
            logger.error("Engine termination failed: %s", sanitize_error_message(exc, "terminate failed"))
        finally:
            self.plugin_path = None
        logger.debug("Engine %s terminated", self.engine.name)

    @contextmanager
    def scope(self, plugin_path: Optional[str] = None) -> Iterator[SessionToken]:
        token = self.acquire(plugin_path)
        ctx = session_id_var.set(token.label)
        try:
            yield token
        finally:
            session_id_var.reset(ctx)
            self.release(token)

    def register_namespace(self, uri: str, suggested_prefix: str) -> str:
        if not self.is_initialized():
            raise IllegalStateError("register_namespace requires an initialized engine session")
        prefix = self.engine.register_namespace(uri, suggested_prefix)
        if prefix != suggested_prefix:
            logger.info("Namespace %s registered with prefix %r (suggested %r)", uri, prefix, suggested_prefix)
        return prefix


_default_session: Optional[EngineSession] = None


def get_default_session() -> EngineSession:
    """Process-wide session used when callers do not pass one."""
    global _default_session
    if _default_session is None:
        _default_session = EngineSession()
    return _default_session


def reset_default_session() -> None:
    global _default_session
    _default_session = None
