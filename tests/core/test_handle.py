"""
Tests for xmpkit.handle: open fallback, state machine and the write/discard contract.
"""
from __future__ import annotations

import json
import os

import pytest

from xmpkit.adapters.engines import UpdatePolicy
from xmpkit.errors import IllegalStateError, XmpFileNotFoundError, XmpIOError
from xmpkit.facade import READ_FALLBACK_FLAGS, READ_FLAGS, UPDATE_FALLBACK_FLAGS, UPDATE_FLAGS
from xmpkit.flags import FileFormat, HandlerFlag, handler_flags, open_flags
from xmpkit.handle import HandleState, MetadataHandle, OpenSpec
from xmpkit.namespaces import XMP_NS_DC, XMP_NS_XMP
from xmpkit.values import XmpValue


def _handle(session, path, primary=UPDATE_FLAGS, fallback=UPDATE_FALLBACK_FLAGS):
    return MetadataHandle(session, OpenSpec(path, primary, fallback))


# ─── opening ───────────────────────────────────────────────────────────────


def test_open_spec_requires_open_flag_sets(pdf_file):
    with pytest.raises(TypeError):
        OpenSpec(pdf_file, 0x21)
    with pytest.raises(TypeError):
        OpenSpec(pdf_file, READ_FLAGS, handler_flags(0x1))


def test_fallback_used_when_smart_handler_missing(session, pdf_file, xmpkit_logs):
    with session.scope():
        handle = _handle(session, pdf_file, READ_FLAGS, READ_FALLBACK_FLAGS).open()
        try:
            assert handle.state is HandleState.OPEN
            assert handle.active_flags == READ_FALLBACK_FLAGS
            assert [a.ok for a in handle.open_attempts] == [False, True]
            assert "No smart handler" in handle.open_attempts[0].error
        finally:
            handle.close()

    entries = [json.loads(r.getMessage()) for r in xmpkit_logs.records if r.getMessage().startswith("{")]
    attempts = [e for e in entries if e["message"] == "open_attempt"]
    assert [e["context"]["ok"] for e in attempts] == [False, True]
    assert attempts[1]["context"]["flags"] == ["open_for_read", "open_use_packet_scanning"]


def test_primary_succeeds_for_sidecar(session, sidecar_file):
    with session.scope():
        with _handle(session, sidecar_file) as handle:
            assert handle.active_flags == UPDATE_FLAGS
            assert len(handle.open_attempts) == 1


def test_both_attempts_fail(session, pdf_file):
    with session.scope():
        handle = _handle(session, pdf_file, READ_FLAGS, open_flags("open_for_read", "open_use_smart_handler"))
        with pytest.raises(XmpIOError) as excinfo:
            handle.open()
    assert handle.state is HandleState.CLOSED
    err = excinfo.value
    assert str(err).startswith(f"Failed to open file {pdf_file} with open_flags(0x00000021")
    assert " or open_flags(0x00000021" in str(err)
    assert len(err.attempts) == 2 and not any(a.ok for a in err.attempts)


def test_no_fallback_fails_after_one_attempt(session, pdf_file):
    with session.scope():
        handle = _handle(session, pdf_file, READ_FLAGS, None)
        with pytest.raises(XmpIOError):
            handle.open()
    assert len(handle.open_attempts) == 1


def test_open_missing_file(session, tmp_path):
    with session.scope():
        with pytest.raises(XmpFileNotFoundError, match="File not found"):
            _handle(session, tmp_path / "missing.pdf").open()


def test_open_for_update_checks_write_access(session, pdf_file):
    os.chmod(pdf_file, 0o444)
    try:
        if os.access(pdf_file, os.W_OK):
            pytest.skip("running with privileges that ignore file modes")
        with session.scope():
            with pytest.raises(XmpFileNotFoundError, match="not writable"):
                _handle(session, pdf_file).open()
    finally:
        os.chmod(pdf_file, 0o644)


def test_open_requires_initialized_session(session, pdf_file):
    with pytest.raises(IllegalStateError):
        _handle(session, pdf_file).open()


def test_open_twice_is_noop(session, sidecar_file):
    with session.scope():
        handle = _handle(session, sidecar_file).open()
        assert handle.open() is handle
        assert len(handle.open_attempts) == 1
        handle.close()
        handle.close()
        assert handle.state is HandleState.CLOSED


# ─── reads ─────────────────────────────────────────────────────────────────


def test_reads_require_open_handle(session, pdf_file):
    handle = _handle(session, pdf_file)
    for call in (handle.read_packet, handle.file_info, handle.packet_info):
        with pytest.raises(IllegalStateError):
            call()


def test_file_info_for_scanned_pdf(session, pdf_file):
    with session.scope():
        with _handle(session, pdf_file, READ_FLAGS, READ_FALLBACK_FLAGS) as handle:
            info = handle.file_info()
            assert handle.file_info() is info
    assert info.format == FileFormat.PDF
    data = info.to_dict()
    assert data["format"] == "PDF"
    assert data["format_orig"] == 0x50444620
    assert "prefers_in_place" in data["handler_flags"]
    assert HandlerFlag.CAN_EXPAND not in info.handler_flags
    assert data["open_flags"] == ["open_for_read", "open_use_packet_scanning"]
    assert data["open_flags_orig"] == 0x41


def test_packet_info_is_cached_for_handle_lifetime(session, pdf_file):
    with session.scope():
        with _handle(session, pdf_file) as handle:
            before = handle.packet_info()
            assert before.has_wrapper and before.writeable
            assert before.offset > 0 and before.length > 2000
            handle.update_property(XMP_NS_XMP, "CreatorTool", "x" * 50)
            handle.write()
            assert handle.packet_info() is before


def test_read_property(session, pdf_file):
    with session.scope():
        with _handle(session, pdf_file, READ_FLAGS, READ_FALLBACK_FLAGS) as handle:
            found = handle.read_property(XMP_NS_XMP, "CreatorTool")
            missing = handle.read_property(XMP_NS_DC, "format")
    assert found.exists and found.value == "xmpkit tests"
    assert not missing.exists and missing.value is None


def test_localized_fallbacks(session, titled_pdf):
    with session.scope():
        with _handle(session, titled_pdf, READ_FLAGS, READ_FALLBACK_FLAGS) as handle:
            exact = handle.read_localized_property(XMP_NS_DC, "title", "fr", "fr-FR")
            generic = handle.read_localized_property(XMP_NS_DC, "title", "fr", "fr-CA")
            default = handle.read_localized_property(XMP_NS_DC, "title", "de", "de-DE")
            missing = handle.read_localized_property(XMP_NS_DC, "description", "", "x-default")
    assert (exact.actual_lang, exact.value) == ("fr-FR", "Titre")
    assert (generic.actual_lang, generic.value) == ("fr-FR", "Titre")
    assert (default.actual_lang, default.value) == ("x-default", "Default title")
    assert not missing.exists


# ─── updates ───────────────────────────────────────────────────────────────


def test_mutations_require_update_intent(session, pdf_file):
    with session.scope():
        with _handle(session, pdf_file, READ_FLAGS, READ_FALLBACK_FLAGS) as handle:
            with pytest.raises(IllegalStateError, match="open_for_update"):
                handle.update_property(XMP_NS_DC, "format", "application/pdf")
            with pytest.raises(IllegalStateError):
                handle.write()


def test_update_then_write_persists(session, pdf_file):
    size = pdf_file.stat().st_size
    with session.scope():
        with _handle(session, pdf_file) as handle:
            handle.update_property(XMP_NS_DC, "format", "application/pdf")
            handle.update_property(XMP_NS_XMP, "Rating", XmpValue(4, "int"))
            assert handle.dirty
            handle.write()
            assert not handle.dirty
    assert pdf_file.stat().st_size == size

    with session.scope():
        with _handle(session, pdf_file, READ_FLAGS, READ_FALLBACK_FLAGS) as handle:
            assert handle.read_property(XMP_NS_DC, "format").value == "application/pdf"
            assert handle.read_property(XMP_NS_XMP, "Rating").value == "4"


def test_close_without_write_discards_changes(session, pdf_file, xmpkit_logs):
    original = pdf_file.read_bytes()
    with session.scope():
        handle = _handle(session, pdf_file).open()
        handle.update_property(XMP_NS_DC, "format", "application/pdf")
        assert handle.read_packet().canonical_xml.count("application/pdf") == 1
        handle.close()
    assert pdf_file.read_bytes() == original
    assert "pending XMP changes are discarded" in xmpkit_logs.text


def test_update_localized_sets_default(session, pdf_file):
    with session.scope():
        with _handle(session, pdf_file) as handle:
            handle.update_localized_property(XMP_NS_DC, "title", "en", "en-US", "Hello")
            handle.write()
            text = handle.read_localized_property(XMP_NS_DC, "title", "", "x-default")
    assert text.value == "Hello"


def test_whole_packet_override(session, pdf_file):
    with session.scope():
        with _handle(session, pdf_file) as handle:
            handle.update_whole_packet(None, UpdatePolicy.OVERRIDE)
            handle.write()
            packet = handle.read_packet()
    assert "CreatorTool" not in packet.canonical_xml
    assert packet.packet_id == "W5M0MpCehiHzreSzNTczkc9d"


def test_closed_handle_rejects_updates(session, sidecar_file):
    with session.scope():
        handle = _handle(session, sidecar_file).open()
        handle.close()
        with pytest.raises(IllegalStateError):
            handle.update_property(XMP_NS_DC, "format", "x")
