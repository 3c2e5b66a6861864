"""
In-memory XMP data model on top of lxml.

`XmpDocument` wraps an ``x:xmpmeta`` tree and implements the property
operations the pure-Python engine needs: simple properties (element or
attribute form), alt-text arrays with language fallback, upsert merging and
packet serialization with an ``xpacket`` wrapper and padding.
"""
from __future__ import annotations

import copy
from typing import Dict, Iterator, List, Optional, Tuple

from lxml import etree

from ...errors import EngineError
from ...namespaces import DEFAULT_PREFIXES, XMP_NS_RDF, XMP_NS_X, XMP_NS_XML
from ...packet import parse_xml
from .base import LocalizedText, PropertyValue

_RDF = "{%s}" % XMP_NS_RDF
_X = "{%s}" % XMP_NS_X
XML_LANG = "{%s}lang" % XMP_NS_XML
X_DEFAULT = "x-default"

XPACKET_BEGIN = '<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>'
XPACKET_END_W = '<?xpacket end="w"?>'

# Property option bits (kXMP_Prop*)
PROP_VALUE_IS_URI = 0x0000_0002
PROP_HAS_QUALIFIERS = 0x0000_0010
PROP_HAS_LANG = 0x0000_0040
PROP_VALUE_IS_STRUCT = 0x0000_0100
PROP_VALUE_IS_ARRAY = 0x0000_0200
PROP_ARRAY_IS_ORDERED = 0x0000_0400
PROP_ARRAY_IS_ALTERNATE = 0x0000_0800
PROP_ARRAY_IS_ALT_TEXT = 0x0000_1000

_CONTAINER_TAGS = tuple(_RDF + name for name in ("Alt", "Bag", "Seq"))


def make_padding(size: int) -> str:
    """Whitespace padding of exactly `size` bytes, in 100-byte lines."""
    if size <= 0:
        return ""
    line = " " * 99 + "\n"
    full, rest = divmod(size, len(line))
    return line * full + " " * rest


def _elements(node: etree._Element) -> Iterator[etree._Element]:
    for child in node:
        if isinstance(child.tag, str):
            yield child


def _container(prop: etree._Element) -> Optional[etree._Element]:
    for child in _elements(prop):
        if child.tag in _CONTAINER_TAGS:
            return child
    return None


def _lang_of(item: etree._Element) -> str:
    return (item.get(XML_LANG) or "").lower()


class XmpDocument:
    def __init__(self, root: etree._Element, prefixes: Optional[Dict[str, str]] = None):
        self.root = root
        self.prefixes: Dict[str, str] = prefixes if prefixes is not None else {}
        rdf = root if root.tag == _RDF + "RDF" else root.find(_RDF + "RDF")
        if rdf is None:
            raise EngineError("XMP packet has no rdf:RDF element")
        self.rdf = rdf

    @classmethod
    def empty(cls, prefixes: Optional[Dict[str, str]] = None) -> "XmpDocument":
        root = etree.Element(_X + "xmpmeta", nsmap={"x": XMP_NS_X})
        etree.SubElement(root, _RDF + "RDF", nsmap={"rdf": XMP_NS_RDF})
        return cls(root, prefixes)

    @classmethod
    def from_xml(cls, xml: Optional[str], prefixes: Optional[Dict[str, str]] = None) -> "XmpDocument":
        if not xml or not xml.strip():
            return cls.empty(prefixes)
        try:
            root = parse_xml(xml).getroot()
        except etree.XMLSyntaxError as exc:
            raise EngineError(f"Invalid XMP data: {exc}") from exc
        if root.tag == _RDF + "RDF":
            meta = etree.Element(_X + "xmpmeta", nsmap={"x": XMP_NS_X})
            meta.append(root)
            root = meta
        return cls(root, prefixes)

    # ---- lookup ------------------------------------------------------------

    def descriptions(self) -> List[etree._Element]:
        return self.rdf.findall(_RDF + "Description")

    def _find(self, uri: str, name: str) -> Tuple[Optional[etree._Element], Optional[etree._Element], bool]:
        """(description, property element, is_attribute) for the first match."""
        qname = "{%s}%s" % (uri, name)
        for desc in self.descriptions():
            if desc.get(qname) is not None:
                return desc, None, True
            element = desc.find(qname)
            if element is not None:
                return desc, element, False
        return None, None, False

    def prefix_for(self, uri: str) -> str:
        prefix = self.prefixes.get(uri) or DEFAULT_PREFIXES.get(uri)
        in_scope = self.rdf.nsmap
        if prefix and in_scope.get(prefix) in (None, uri):
            return prefix
        n = 1
        while in_scope.get(f"ns{n}") not in (None, uri):
            n += 1
        return f"ns{n}"

    def _description_for(self, uri: str, prefix: Optional[str] = None) -> etree._Element:
        descriptions = self.descriptions()
        for desc in descriptions:
            if uri in desc.nsmap.values():
                return desc
        about = descriptions[0].get(_RDF + "about", "") if descriptions else ""
        desc = etree.SubElement(self.rdf, _RDF + "Description", nsmap={prefix or self.prefix_for(uri): uri})
        desc.set(_RDF + "about", about)
        return desc

    # ---- simple properties ---------------------------------------------------

    def get_property(self, uri: str, name: str) -> PropertyValue:
        desc, element, is_attr = self._find(uri, name)
        if desc is None:
            return PropertyValue(exists=False)
        if is_attr:
            return PropertyValue(exists=True, value=desc.get("{%s}%s" % (uri, name)), options=0)

        resource = element.get(_RDF + "resource")
        if resource is not None:
            return PropertyValue(exists=True, value=resource, options=PROP_VALUE_IS_URI)

        container = _container(element)
        if container is not None:
            options = PROP_VALUE_IS_ARRAY
            kind = etree.QName(container).localname
            if kind in ("Seq", "Alt"):
                options |= PROP_ARRAY_IS_ORDERED
            if kind == "Alt":
                options |= PROP_ARRAY_IS_ALTERNATE
                items = container.findall(_RDF + "li")
                if items and all(item.get(XML_LANG) for item in items):
                    options |= PROP_ARRAY_IS_ALT_TEXT
            return PropertyValue(exists=True, value=None, options=options)

        if element.get(_RDF + "parseType") == "Resource" or element.find(_RDF + "Description") is not None:
            return PropertyValue(exists=True, value=None, options=PROP_VALUE_IS_STRUCT)

        options = PROP_HAS_QUALIFIERS | PROP_HAS_LANG if element.get(XML_LANG) else 0
        return PropertyValue(exists=True, value=element.text or "", options=options)

    def set_property(self, uri: str, name: str, value: str) -> None:
        qname = "{%s}%s" % (uri, name)
        desc, element, is_attr = self._find(uri, name)
        if is_attr:
            desc.set(qname, value)
            return
        if element is None:
            element = etree.SubElement(self._description_for(uri), qname)
        else:
            for child in list(element):
                element.remove(child)
            element.attrib.clear()
        element.text = value

    def remove_property(self, uri: str, name: str) -> None:
        qname = "{%s}%s" % (uri, name)
        for desc in self.descriptions():
            if qname in desc.attrib:
                del desc.attrib[qname]
            for element in desc.findall(qname):
                desc.remove(element)

    # ---- alt-text ------------------------------------------------------------

    def get_localized(self, uri: str, name: str, generic_lang: str, specific_lang: str) -> LocalizedText:
        _, element, is_attr = self._find(uri, name)
        if element is None or is_attr:
            return LocalizedText(exists=False)
        alt = element.find(_RDF + "Alt")
        if alt is None:
            return LocalizedText(exists=False)

        items = alt.findall(_RDF + "li")
        item = _choose_item(items, generic_lang, specific_lang)
        if item is None:
            return LocalizedText(exists=False)
        return LocalizedText(
            exists=True,
            actual_lang=item.get(XML_LANG),
            value=item.text or "",
            options=PROP_HAS_QUALIFIERS | PROP_HAS_LANG,
        )

    def set_localized(
        self,
        uri: str,
        name: str,
        generic_lang: str,
        specific_lang: str,
        value: str,
        options: int = 0,
    ) -> None:
        qname = "{%s}%s" % (uri, name)
        _, element, is_attr = self._find(uri, name)
        if is_attr:
            raise EngineError(f"{name} is a simple property, not an alt-text array")
        if element is None:
            element = etree.SubElement(self._description_for(uri), qname)
            alt = etree.SubElement(element, _RDF + "Alt")
        else:
            alt = element.find(_RDF + "Alt")
            if alt is None:
                if len(element) or (element.text or "").strip():
                    raise EngineError(f"{name} is not an alt-text array")
                alt = etree.SubElement(element, _RDF + "Alt")

        lang = specific_lang or generic_lang or X_DEFAULT
        items = alt.findall(_RDF + "li")
        default = next((item for item in items if _lang_of(item) == X_DEFAULT), None)
        if default is None:
            default = etree.Element(_RDF + "li")
            default.set(XML_LANG, X_DEFAULT)
            default.text = value
            alt.insert(0, default)
        if lang.lower() == X_DEFAULT:
            default.text = value
            return

        target = next((item for item in items if _lang_of(item) == lang.lower()), None)
        previous = target.text if target is not None else None
        if target is None:
            target = etree.SubElement(alt, _RDF + "li")
            target.set(XML_LANG, lang)
        target.text = value

        # x-default follows the language it mirrored, or the first one added next to it
        if (previous is not None and default.text == previous) or len(items) == 1:
            default.text = value

    # ---- whole-packet --------------------------------------------------------

    def merge(self, other: "XmpDocument") -> None:
        """Upsert every top-level property of `other` into this document."""
        for desc in other.descriptions():
            for key, val in desc.attrib.items():
                qname = etree.QName(key)
                if qname.namespace in (XMP_NS_RDF, XMP_NS_XML, None):
                    continue
                self.remove_property(qname.namespace, qname.localname)
                prefix = next((p for p, u in desc.nsmap.items() if u == qname.namespace and p), None)
                target = self._description_for(qname.namespace, prefix)
                target.set(key, val)
            for prop in _elements(desc):
                qname = etree.QName(prop)
                self.remove_property(qname.namespace, qname.localname)
                target = self._description_for(qname.namespace, prop.prefix)
                target.append(copy.deepcopy(prop))

    def to_xml(self) -> str:
        return etree.tostring(self.root, encoding="unicode", with_tail=False)

    def to_packet(self, padding: int = 0, writeable: bool = True) -> str:
        end = XPACKET_END_W if writeable else '<?xpacket end="r"?>'
        return f"{XPACKET_BEGIN}\n{self.to_xml()}\n{make_padding(padding)}{end}"


def _choose_item(items: List[etree._Element], generic_lang: str, specific_lang: str) -> Optional[etree._Element]:
    specific = (specific_lang or "").lower()
    generic = (generic_lang or "").lower()
    if specific:
        for item in items:
            if _lang_of(item) == specific:
                return item
    if generic:
        for item in items:
            lang = _lang_of(item)
            if lang == generic or lang.startswith(generic + "-"):
                return item
    for item in items:
        if _lang_of(item) == X_DEFAULT:
            return item
    return items[0] if items else None
