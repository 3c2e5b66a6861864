"""
Packet normalization.

A raw XMP packet is RDF/XML optionally wrapped in ``<?xpacket ...?>``
processing instructions. `normalize_packet` pulls the packet identity out of
the ``begin`` instruction and produces the canonical XML without any wrapper.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Dict, Optional

from lxml import etree

from .errors import MalformedPacketError

_SECURE_XML_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)
_PI_ATTR_RE = re.compile(r'(\w+)="([^"]*)"')
# Text input is already decoded; a declared encoding would be applied a second time.
_XML_DECL_RE = re.compile(r"^\ufeff?<\?xml\s.*?\?>", re.DOTALL)


@dataclass(frozen=True)
class PacketIdentity:
    begin_marker: Optional[str]
    packet_id: Optional[str]
    canonical_xml: Optional[str]
    raw_xml: Optional[str]

    @property
    def is_empty(self) -> bool:
        return self.canonical_xml is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "begin": self.begin_marker,
            "packet_id": self.packet_id,
            "xmp_data": self.canonical_xml,
            "xmp_data_orig": self.raw_xml,
        }


def parse_xml(data: Any) -> etree._ElementTree:
    """Parse XML text or bytes with entity resolution and network access disabled."""
    if isinstance(data, str):
        data = _XML_DECL_RE.sub("", data, count=1).encode("utf-8")
    return etree.parse(BytesIO(data), _SECURE_XML_PARSER)


def pi_attributes(content: Optional[str]) -> Dict[str, str]:
    return dict(_PI_ATTR_RE.findall(content or ""))


def _drop_node(node: Any) -> None:
    """Remove `node` from its parent, keeping its tail text in place."""
    parent = node.getparent()
    if parent is None:
        return
    tail = node.tail
    if tail:
        previous = node.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(node)


def normalize_packet(raw: Optional[str]) -> PacketIdentity:
    if not raw:
        return PacketIdentity(None, None, None, raw)

    try:
        tree = parse_xml(raw)
    except etree.XMLSyntaxError as exc:
        raise MalformedPacketError(f"XMP packet is not well-formed: {exc}") from exc

    pis = tree.xpath("//processing-instruction('xpacket')")
    begin_pi = next((pi for pi in pis if (pi.text or "").startswith("begin=")), None)
    attrs = pi_attributes(begin_pi.text if begin_pi is not None else None)

    # Top-level instructions are siblings of the root and vanish on serialization.
    for pi in pis:
        _drop_node(pi)

    root = tree.getroot()
    canonical = etree.tostring(root, encoding="unicode", with_tail=False)
    return PacketIdentity(
        begin_marker=attrs.get("begin"),
        packet_id=attrs.get("id"),
        canonical_xml=canonical,
        raw_xml=raw,
    )
