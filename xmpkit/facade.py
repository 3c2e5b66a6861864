"""
One-call helpers over sessions and handles.

`read_from_file` and `write_to_file` run a complete session scope around a
single handle; `open_xmp_file` hands the open handle to the caller and writes
it back on exit when it was opened for update.
"""
from __future__ import annotations

import os
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Union

from .adapters.engines import UpdatePolicy
from .flags import OPEN_FLAGS, FlagNamespace, FlagSet, OpenFlag
from .fs import check_file
from .handle import MetadataHandle, OpenSpec
from .session import EngineSession, get_default_session
from .shared import get_logger, sanitize_error_message
from .values import XmpValue

logger = get_logger(__name__)

READ_FLAGS = OPEN_FLAGS.flag_set(OpenFlag.OPEN_FOR_READ, OpenFlag.OPEN_USE_SMART_HANDLER)
READ_FALLBACK_FLAGS = OPEN_FLAGS.flag_set(OpenFlag.OPEN_FOR_READ, OpenFlag.OPEN_USE_PACKET_SCANNING)
UPDATE_FLAGS = OPEN_FLAGS.flag_set(OpenFlag.OPEN_FOR_UPDATE, OpenFlag.OPEN_USE_SMART_HANDLER)
UPDATE_FALLBACK_FLAGS = OPEN_FLAGS.flag_set(OpenFlag.OPEN_FOR_UPDATE, OpenFlag.OPEN_USE_PACKET_SCANNING)

PathLike = Union[str, os.PathLike]
OpenFlagsArg = Union[FlagSet, int, str, Enum, Iterable[Union[str, Enum]]]
PropertyMap = Mapping[str, Mapping[str, Union[str, XmpValue]]]


def coerce_open_flags(value: Optional[OpenFlagsArg]) -> Optional[FlagSet]:
    """Accept a FlagSet, a raw mask, one flag name or several."""
    if value is None or isinstance(value, FlagSet):
        return value
    if isinstance(value, int) and not isinstance(value, (bool, Enum)):
        return FlagSet(FlagNamespace.OPEN_FLAGS, value)
    if isinstance(value, (str, Enum)):
        return OPEN_FLAGS.flag_set(value)
    return OPEN_FLAGS.flag_set(*value)


def read_from_file(
    path: PathLike,
    *,
    session: Optional[EngineSession] = None,
    plugin_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Read and normalize the XMP packet of `path`.

    Returns a dict with ``begin``, ``packet_id``, ``xmp_data``,
    ``xmp_data_orig``, ``handler_flags``, ``handler_flags_orig``, ``format``
    and ``format_orig``. Packet fields are None when the file has no packet.
    """
    check_file(path, need_to_read=True, need_to_write=False)
    session = session or get_default_session()

    with session.scope(plugin_path):
        with MetadataHandle(session, OpenSpec(path, READ_FLAGS, READ_FALLBACK_FLAGS)) as handle:
            identity = handle.read_packet()
            info = handle.file_info().to_dict()

    result = identity.to_dict()
    result.update(
        handler_flags=info["handler_flags"],
        handler_flags_orig=info["handler_flags_orig"],
        format=info["format"],
        format_orig=info["format_orig"],
    )
    return result


def write_to_file(
    path: PathLike,
    data: Union[str, PropertyMap, None],
    *,
    policy: UpdatePolicy = UpdatePolicy.UPSERT,
    session: Optional[EngineSession] = None,
    plugin_path: Optional[str] = None,
) -> None:
    """
    Write `data` into the XMP packet of `path`.

    `data` is packet XML, None (an empty packet under OVERRIDE) or a mapping
    ``{namespace_uri: {property: value}}`` of simple properties.
    """
    check_file(path, need_to_read=True, need_to_write=True)
    policy = UpdatePolicy(policy)
    if data is not None and not isinstance(data, (str, Mapping)):
        raise TypeError(f"XMP data must be str, mapping or None, got {type(data).__name__}")
    session = session or get_default_session()

    with session.scope(plugin_path):
        with MetadataHandle(session, OpenSpec(path, UPDATE_FLAGS, UPDATE_FALLBACK_FLAGS)) as handle:
            if isinstance(data, Mapping):
                if policy is UpdatePolicy.OVERRIDE:
                    handle.update_whole_packet(None, UpdatePolicy.OVERRIDE)
                for namespace_uri, properties in data.items():
                    for name, value in properties.items():
                        handle.update_property(namespace_uri, name, value)
            else:
                handle.update_whole_packet(data, policy)
            handle.write()


@contextmanager
def open_xmp_file(
    path: PathLike,
    open_flags: OpenFlagsArg = READ_FLAGS,
    fallback_flags: Optional[OpenFlagsArg] = None,
    *,
    session: Optional[EngineSession] = None,
    plugin_path: Optional[str] = None,
    auto_write: bool = True,
) -> Iterator[MetadataHandle]:
    """
    Open `path` inside a session scope and yield the handle.

    On exit a handle opened for update is written (also when the block
    raised; that write failure is only logged), then closed, then the
    session reference is released.
    """
    session = session or get_default_session()
    spec = OpenSpec(path, coerce_open_flags(open_flags), coerce_open_flags(fallback_flags))
    check_file(path, need_to_read=True, need_to_write=OpenFlag.OPEN_FOR_UPDATE in spec.primary_flags)

    with session.scope(plugin_path):
        handle = MetadataHandle(session, spec)
        handle.open()
        try:
            yield handle
        except Exception:
            if auto_write and handle.is_open and handle.for_update:
                try:
                    handle.write()
                except Exception as exc:
                    logger.error(
                        "Write on exit failed for %s: %s", handle.path, sanitize_error_message(exc, "write failed")
                    )
            raise
        else:
            if auto_write and handle.is_open and handle.for_update:
                handle.write()
        finally:
            handle.close()
