import io
import logging
import struct
import sys

import pytest

from repo_root import REPO_ROOT

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from xmpkit.adapters.engines import PacketScannerEngine  # noqa: E402
from xmpkit.session import EngineSession  # noqa: E402

XPACKET_BEGIN = '<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>'

BASE_RDF = """<x:xmpmeta xmlns:x="adobe:ns:meta/">
 <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
  <rdf:Description rdf:about="" xmlns:xmp="http://ns.adobe.com/xap/1.0/">
   <xmp:CreatorTool>xmpkit tests</xmp:CreatorTool>
  </rdf:Description>
 </rdf:RDF>
</x:xmpmeta>"""

TITLED_RDF = """<x:xmpmeta xmlns:x="adobe:ns:meta/">
 <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
  <rdf:Description rdf:about="" xmlns:dc="http://purl.org/dc/elements/1.1/">
   <dc:title>
    <rdf:Alt>
     <rdf:li xml:lang="x-default">Default title</rdf:li>
     <rdf:li xml:lang="fr-FR">Titre</rdf:li>
    </rdf:Alt>
   </dc:title>
  </rdf:Description>
 </rdf:RDF>
</x:xmpmeta>"""


def make_packet(body: str = BASE_RDF, padding: int = 2048, end: str = "w") -> str:
    pad = (" " * 99 + "\n") * (padding // 100)
    return f'{XPACKET_BEGIN}\n{body}\n{pad}<?xpacket end="{end}"?>'


def make_pdf_bytes(packet: str | None) -> bytes:
    head = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog /Metadata 2 0 R >>\nendobj\n"
    if packet is None:
        return head + b"trailer\n<< /Root 1 0 R >>\n%%EOF\n"
    stream = packet.encode("utf-8")
    meta = (
        b"2 0 obj\n<< /Type /Metadata /Subtype /XML /Length "
        + str(len(stream)).encode("ascii")
        + b" >>\nstream\n"
        + stream
        + b"\nendstream\nendobj\n"
    )
    return head + meta + b"trailer\n<< /Root 1 0 R >>\n%%EOF\n"


def make_jpeg_bytes(packet: str) -> bytes:
    from PIL import Image

    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 10, 10)).save(buf, "JPEG")
    data = buf.getvalue()
    payload = b"http://ns.adobe.com/xap/1.0/\x00" + packet.encode("utf-8")
    segment = b"\xff\xe1" + struct.pack(">H", len(payload) + 2) + payload
    return data[:2] + segment + data[2:]


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "doc.pdf"
    path.write_bytes(make_pdf_bytes(make_packet()))
    return path


@pytest.fixture
def titled_pdf(tmp_path):
    path = tmp_path / "titled.pdf"
    path.write_bytes(make_pdf_bytes(make_packet(TITLED_RDF)))
    return path


@pytest.fixture
def bare_pdf(tmp_path):
    path = tmp_path / "bare.pdf"
    path.write_bytes(make_pdf_bytes(None))
    return path


@pytest.fixture
def jpeg_file(tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(make_jpeg_bytes(make_packet()))
    return path


@pytest.fixture
def sidecar_file(tmp_path):
    path = tmp_path / "photo.xmp"
    path.write_text(make_packet(padding=0), encoding="utf-8")
    return path


@pytest.fixture
def session():
    return EngineSession(PacketScannerEngine(), session_id="test")


@pytest.fixture
def xmpkit_logs(caplog):
    """Route the non-propagating xmpkit loggers into caplog."""
    loggers = [
        logging.getLogger(name)
        for name in list(logging.root.manager.loggerDict)
        if name.startswith("xmpkit.")
    ]
    for logger in loggers:
        logger.addHandler(caplog.handler)
        caplog.set_level(logging.DEBUG, logger=logger.name)
    try:
        yield caplog
    finally:
        for logger in loggers:
            logger.removeHandler(caplog.handler)
