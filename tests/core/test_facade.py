"""
End-to-end tests for read_from_file / write_to_file / open_xmp_file.
"""
from __future__ import annotations

import pytest

from conftest import make_packet
from xmpkit import facade
from xmpkit.adapters.engines import PacketScannerEngine, UpdatePolicy
from xmpkit.errors import EngineError, XmpFileNotFoundError, XmpIOError
from xmpkit.flags import FlagNamespace, FlagSet, OpenFlag
from xmpkit.namespaces import XMP_NS_DC, XMP_NS_XMP
from xmpkit.session import EngineSession
from xmpkit.values import XmpValue

TITLE_RDF = """<x:xmpmeta xmlns:x="adobe:ns:meta/">
 <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
  <rdf:Description rdf:about="" xmlns:dc="http://purl.org/dc/elements/1.1/">
   <dc:title>Hello</dc:title>
  </rdf:Description>
 </rdf:RDF>
</x:xmpmeta>"""


# ─── read_from_file ────────────────────────────────────────────────────────


def test_read_pdf(session, pdf_file):
    result = facade.read_from_file(pdf_file, session=session)
    assert result["format"] == "PDF"
    assert result["format_orig"] == 0x50444620
    assert result["packet_id"] == "W5M0MpCehiHzreSzNTczkc9d"
    assert result["begin"] == "\ufeff"
    assert result["xmp_data_orig"].startswith("<?xpacket begin=")
    assert result["xmp_data"].startswith("<x:xmpmeta")
    assert "returns_raw_packet" in result["handler_flags"]
    assert isinstance(result["handler_flags_orig"], int)
    assert session.ref_count == 0


def test_read_jpeg(session, jpeg_file):
    result = facade.read_from_file(jpeg_file, session=session)
    assert result["format"] == "JPEG"
    assert "xmpkit tests" in result["xmp_data"]


def test_read_file_without_packet(session, bare_pdf):
    result = facade.read_from_file(bare_pdf, session=session)
    assert result["xmp_data"] is None
    assert result["xmp_data_orig"] is None
    assert result["packet_id"] is None
    assert result["format"] == "PDF"


def test_read_missing_file(session, tmp_path):
    with pytest.raises(XmpFileNotFoundError):
        facade.read_from_file(tmp_path / "nope.pdf", session=session)
    with pytest.raises(XmpFileNotFoundError, match="cannot be None"):
        facade.read_from_file(None, session=session)


# ─── write_to_file ─────────────────────────────────────────────────────────


def test_upsert_title_then_read_back(session, pdf_file):
    facade.write_to_file(pdf_file, TITLE_RDF, session=session)
    result = facade.read_from_file(pdf_file, session=session)
    assert "<dc:title>Hello</dc:title>" in result["xmp_data"]
    assert "<xmp:CreatorTool>xmpkit tests</xmp:CreatorTool>" in result["xmp_data"]


def test_override_replaces_packet(session, pdf_file):
    facade.write_to_file(pdf_file, TITLE_RDF, policy=UpdatePolicy.OVERRIDE, session=session)
    xml = facade.read_from_file(pdf_file, session=session)["xmp_data"]
    assert "<dc:title>Hello</dc:title>" in xml
    assert "CreatorTool" not in xml


def test_override_with_none_empties_packet(session, pdf_file):
    facade.write_to_file(pdf_file, None, policy="override", session=session)
    xml = facade.read_from_file(pdf_file, session=session)["xmp_data"]
    assert "rdf:RDF" in xml
    assert "Description" not in xml


def test_upsert_with_none_is_noop(session, pdf_file):
    before = pdf_file.read_bytes()
    facade.write_to_file(pdf_file, None, session=session)
    assert pdf_file.read_bytes() == before


def test_write_property_mapping(session, jpeg_file):
    facade.write_to_file(jpeg_file, {XMP_NS_DC: {"format": "image/jpeg"}}, session=session)
    xml = facade.read_from_file(jpeg_file, session=session)["xmp_data"]
    assert "<dc:format>image/jpeg</dc:format>" in xml
    assert "CreatorTool" in xml


def test_write_property_mapping_with_override(session, sidecar_file):
    facade.write_to_file(
        sidecar_file,
        {XMP_NS_DC: {"format": "image/jpeg"}},
        policy=UpdatePolicy.OVERRIDE,
        session=session,
    )
    xml = facade.read_from_file(sidecar_file, session=session)["xmp_data"]
    assert "<dc:format>image/jpeg</dc:format>" in xml
    assert "CreatorTool" not in xml


def test_write_rejects_other_data_types(session, pdf_file):
    with pytest.raises(TypeError):
        facade.write_to_file(pdf_file, 42, session=session)


def test_write_without_packet_fails(session, bare_pdf):
    with pytest.raises(EngineError) as excinfo:
        facade.write_to_file(bare_pdf, TITLE_RDF, session=session)
    assert "no XMP packet" in str(excinfo.value)
    assert session.ref_count == 0


def test_sidecar_can_grow(session, tmp_path):
    sidecar = tmp_path / "grow.xmp"
    sidecar.write_text(make_packet(padding=0), encoding="utf-8")
    long_value = "y" * 5000
    facade.write_to_file(sidecar, {XMP_NS_XMP: {"Label": long_value}}, session=session)
    assert long_value in facade.read_from_file(sidecar, session=session)["xmp_data"]
    assert not list(tmp_path.glob(".xmpkit_*"))


def test_embedded_packet_cannot_outgrow_padding(session, jpeg_file):
    before = jpeg_file.read_bytes()
    with pytest.raises(EngineError, match="more bytes"):
        facade.write_to_file(jpeg_file, {XMP_NS_XMP: {"Label": "z" * 10000}}, session=session)
    assert jpeg_file.read_bytes() == before


# ─── open_xmp_file ─────────────────────────────────────────────────────────


def test_coerce_open_flags():
    assert facade.coerce_open_flags(None) is None
    assert facade.coerce_open_flags(0x41) == FlagSet(FlagNamespace.OPEN_FLAGS, 0x41)
    assert facade.coerce_open_flags("open_for_read").mask == 0x1
    assert facade.coerce_open_flags(["open_for_update", OpenFlag.OPEN_USE_PACKET_SCANNING]).mask == 0x42
    assert facade.coerce_open_flags(facade.READ_FLAGS) is facade.READ_FLAGS


def test_open_xmp_file_writes_on_exit(session, pdf_file):
    with facade.open_xmp_file(
        pdf_file, facade.UPDATE_FLAGS, facade.UPDATE_FALLBACK_FLAGS, session=session
    ) as handle:
        handle.update_property(XMP_NS_DC, "format", "application/pdf")
    assert not handle.is_open
    assert session.ref_count == 0
    assert "application/pdf" in facade.read_from_file(pdf_file, session=session)["xmp_data"]


def test_open_xmp_file_writes_even_when_block_raises(session, pdf_file):
    with pytest.raises(RuntimeError):
        with facade.open_xmp_file(pdf_file, ["open_for_update", "open_use_packet_scanning"], session=session) as h:
            h.update_property(XMP_NS_DC, "format", "application/pdf")
            raise RuntimeError("caller failed")
    assert "application/pdf" in facade.read_from_file(pdf_file, session=session)["xmp_data"]


def test_open_xmp_file_without_auto_write_discards(session, pdf_file):
    before = pdf_file.read_bytes()
    with facade.open_xmp_file(
        pdf_file, facade.UPDATE_FALLBACK_FLAGS, session=session, auto_write=False
    ) as handle:
        handle.update_property(XMP_NS_DC, "format", "application/pdf")
    assert pdf_file.read_bytes() == before


def test_open_xmp_file_read_only(session, pdf_file):
    with facade.open_xmp_file(pdf_file, fallback_flags=facade.READ_FALLBACK_FLAGS, session=session) as handle:
        assert not handle.for_update
        assert handle.read_property(XMP_NS_XMP, "CreatorTool").value == "xmpkit tests"


def test_open_xmp_file_open_failure_releases_session(session, pdf_file):
    with pytest.raises(XmpIOError):
        with facade.open_xmp_file(pdf_file, facade.READ_FLAGS, session=session):
            pass
    assert session.ref_count == 0


class _InitCountingEngine(PacketScannerEngine):
    name = "init-counting"

    def __init__(self):
        super().__init__()
        self.init_calls = 0

    def initialize(self, plugin_dir=None):
        self.init_calls += 1
        super().initialize(plugin_dir)


@pytest.mark.parametrize("flags", [facade.READ_FLAGS, facade.UPDATE_FLAGS], ids=["read", "update"])
def test_open_xmp_file_missing_path_never_initializes_engine(tmp_path, flags):
    engine = _InitCountingEngine()
    counted = EngineSession(engine, session_id="pre")
    with pytest.raises(XmpFileNotFoundError):
        with facade.open_xmp_file(tmp_path / "absent.pdf", flags, session=counted):
            pass
    assert engine.init_calls == 0
    assert counted.ref_count == 0

def test_typed_title_through_packet_scanning_fallback(session, pdf_file):
    with facade.open_xmp_file(pdf_file, facade.UPDATE_FLAGS, facade.UPDATE_FALLBACK_FLAGS, session=session) as h:
        assert h.active_flags == facade.UPDATE_FALLBACK_FLAGS
        h.update_property(XMP_NS_DC, "title", XmpValue("Hello", "string"))
    assert "<dc:title>Hello</dc:title>" in facade.read_from_file(pdf_file, session=session)["xmp_data"]


def test_localized_read_falls_back_to_default(session, tmp_path):
    only_default = TITLE_RDF.replace(
        "<dc:title>Hello</dc:title>",
        '<dc:title><rdf:Alt><rdf:li xml:lang="x-default">Hello</rdf:li></rdf:Alt></dc:title>',
    )
    sidecar = tmp_path / "default.xmp"
    sidecar.write_text(make_packet(only_default, padding=0), encoding="utf-8")
    with facade.open_xmp_file(sidecar, session=session) as h:
        text = h.read_localized_property(XMP_NS_DC, "title", "en", "en-us")
    assert text.exists
    assert text.actual_lang == "x-default"
    assert text.value == "Hello"
