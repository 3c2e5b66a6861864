"""Well-known XMP schema namespace URIs."""

XMP_NS_XMP = "http://ns.adobe.com/xap/1.0/"

XMP_NS_XMP_RIGHTS = "http://ns.adobe.com/xap/1.0/rights/"
XMP_NS_XMP_MM = "http://ns.adobe.com/xap/1.0/mm/"
XMP_NS_XMP_BJ = "http://ns.adobe.com/xap/1.0/bj/"

XMP_NS_PDF = "http://ns.adobe.com/pdf/1.3/"
XMP_NS_PHOTOSHOP = "http://ns.adobe.com/photoshop/1.0/"
XMP_NS_PSALBUM = "http://ns.adobe.com/album/1.0/"
XMP_NS_EXIF = "http://ns.adobe.com/exif/1.0/"
XMP_NS_EXIF_AUX = "http://ns.adobe.com/exif/1.0/aux/"
XMP_NS_TIFF = "http://ns.adobe.com/tiff/1.0/"
XMP_NS_PNG = "http://ns.adobe.com/png/1.0/"
XMP_NS_SWF = "http://ns.adobe.com/swf/1.0/"
XMP_NS_JPEG = "http://ns.adobe.com/jpeg/1.0/"
XMP_NS_JP2K = "http://ns.adobe.com/jp2k/1.0/"
XMP_NS_CAMERA_RAW = "http://ns.adobe.com/camera-raw-settings/1.0/"
XMP_NS_DM = "http://ns.adobe.com/xmp/1.0/DynamicMedia/"
XMP_NS_SCRIPT = "http://ns.adobe.com/xmp/1.0/Script/"
XMP_NS_ASF = "http://ns.adobe.com/asf/1.0/"
XMP_NS_WAV = "http://ns.adobe.com/xmp/wav/1.0/"
XMP_NS_BWF = "http://ns.adobe.com/bwf/bext/1.0/"
XMP_NS_AESCART = "http://ns.adobe.com/aes/cart/"
XMP_NS_RIFFINFO = "http://ns.adobe.com/riff/info/"
XMP_NS_IXML = "http://ns.adobe.com/ixml/1.0/"
XMP_NS_XMP_NOTE = "http://ns.adobe.com/xmp/note/"

XMP_NS_ADOBE_STOCK_PHOTO = "http://ns.adobe.com/StockPhoto/1.0/"
XMP_NS_CREATOR_ATOM = "http://ns.adobe.com/creatorAtom/1.0/"

XMP_NS_EXIF_EX = "http://cipa.jp/exif/1.0/"

# Structure field namespaces
XMP_NS_XMP_IDENTIFIER_QUAL = "http://ns.adobe.com/xmp/Identifier/qual/1.0/"
XMP_NS_XMP_DIMENSIONS = "http://ns.adobe.com/xap/1.0/sType/Dimensions#"
XMP_NS_XMP_TEXT = "http://ns.adobe.com/xap/1.0/t/"
XMP_NS_XMP_PAGED_FILE = "http://ns.adobe.com/xap/1.0/t/pg/"
XMP_NS_XMP_GRAPHICS = "http://ns.adobe.com/xap/1.0/g/"
XMP_NS_XMP_IMAGE = "http://ns.adobe.com/xap/1.0/g/img/"
XMP_NS_XMP_FONT = "http://ns.adobe.com/xap/1.0/sType/Font#"
XMP_NS_XMP_RESOURCE_EVENT = "http://ns.adobe.com/xap/1.0/sType/ResourceEvent#"
XMP_NS_XMP_RESOURCE_REF = "http://ns.adobe.com/xap/1.0/sType/ResourceRef#"
XMP_NS_XMP_ST_VERSION = "http://ns.adobe.com/xap/1.0/sType/Version#"
XMP_NS_XMP_ST_JOB = "http://ns.adobe.com/xap/1.0/sType/Job#"
XMP_NS_XMP_MANIFEST_ITEM = "http://ns.adobe.com/xap/1.0/sType/ManifestItem#"

# Deprecated aliases
XMP_NS_XMP_T = XMP_NS_XMP_TEXT
XMP_NS_XMP_T_PG = XMP_NS_XMP_PAGED_FILE
XMP_NS_XMP_G_IMG = XMP_NS_XMP_IMAGE

XMP_NS_DC = "http://purl.org/dc/elements/1.1/"

XMP_NS_IPTC_CORE = "http://iptc.org/std/Iptc4xmpCore/1.0/xmlns/"
XMP_NS_IPTC_EXT = "http://iptc.org/std/Iptc4xmpExt/2008-02-29/"

XMP_NS_DICOM = "http://ns.adobe.com/DICOM/"

XMP_NS_PLUS = "http://ns.useplus.org/ldf/xmp/1.0/"

XMP_NS_PDFA_SCHEMA = "http://www.aiim.org/pdfa/ns/schema#"
XMP_NS_PDFA_PROPERTY = "http://www.aiim.org/pdfa/ns/property#"
XMP_NS_PDFA_TYPE = "http://www.aiim.org/pdfa/ns/type#"
XMP_NS_PDFA_FIELD = "http://www.aiim.org/pdfa/ns/field#"
XMP_NS_PDFA_ID = "http://www.aiim.org/pdfa/ns/id/"
XMP_NS_PDFA_EXTENSION = "http://www.aiim.org/pdfa/ns/extension/"

XMP_NS_PDFUA_ID = "http://www.aiim.org/pdfua/ns/id/"

XMP_NS_PDFX = "http://ns.adobe.com/pdfx/1.3/"
XMP_NS_PDFX_ID = "http://www.npes.org/pdfx/ns/id/"

XMP_NS_RDF = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
XMP_NS_XML = "http://www.w3.org/XML/1998/namespace"
XMP_NS_X = "adobe:ns:meta/"

# Prefixes used when a namespace is written without an explicit registration.
DEFAULT_PREFIXES = {
    XMP_NS_XMP: "xmp",
    XMP_NS_XMP_RIGHTS: "xmpRights",
    XMP_NS_XMP_MM: "xmpMM",
    XMP_NS_XMP_BJ: "xmpBJ",
    XMP_NS_PDF: "pdf",
    XMP_NS_PHOTOSHOP: "photoshop",
    XMP_NS_EXIF: "exif",
    XMP_NS_EXIF_AUX: "aux",
    XMP_NS_TIFF: "tiff",
    XMP_NS_CAMERA_RAW: "crs",
    XMP_NS_DM: "xmpDM",
    XMP_NS_XMP_NOTE: "xmpNote",
    XMP_NS_EXIF_EX: "exifEX",
    XMP_NS_DC: "dc",
    XMP_NS_IPTC_CORE: "Iptc4xmpCore",
    XMP_NS_IPTC_EXT: "Iptc4xmpExt",
    XMP_NS_PLUS: "plus",
    XMP_NS_PDFA_SCHEMA: "pdfaSchema",
    XMP_NS_PDFA_PROPERTY: "pdfaProperty",
    XMP_NS_PDFA_TYPE: "pdfaType",
    XMP_NS_PDFA_FIELD: "pdfaField",
    XMP_NS_PDFA_ID: "pdfaid",
    XMP_NS_PDFA_EXTENSION: "pdfaExtension",
    XMP_NS_PDFUA_ID: "pdfuaid",
    XMP_NS_PDFX: "pdfx",
    XMP_NS_PDFX_ID: "pdfxid",
    XMP_NS_RDF: "rdf",
    XMP_NS_X: "x",
}
