"""
Named bitmask tables for the three flag namespaces reported by the engine.

Each namespace gets a string enum of flag names and a `FlagRegistry` holding
its declaration-ordered (name, bit) table. Values follow the Adobe XMP SDK
(`XMP_Const.h`): kXMPFiles_Open*, kXMPFiles_Can*/Allows*/..., kXMP_Char*.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import reduce
from typing import Generic, Iterable, Optional, Sequence, TypeVar, Union

from .errors import UnknownFlagError


class FlagNamespace(str, Enum):
    OPEN_FLAGS = "open_flags"
    HANDLER_FLAGS = "handler_flags"
    CHAR_FORM = "char_form"


class OpenFlag(str, Enum):
    """Caller-requested open behaviour (kXMPFiles_Open*)."""

    OPEN_FOR_READ = "open_for_read"
    OPEN_FOR_UPDATE = "open_for_update"
    OPEN_ONLY_XMP = "open_only_xmp"
    FORCE_GIVEN_HANDLER = "force_given_handler"
    OPEN_STRICTLY = "open_strictly"
    OPEN_USE_SMART_HANDLER = "open_use_smart_handler"
    OPEN_USE_PACKET_SCANNING = "open_use_packet_scanning"
    OPEN_LIMITED_SCANNING = "open_limited_scanning"
    OPEN_REPAIR_FILE = "open_repair_file"
    OPTIMIZE_FILE_LAYOUT = "optimize_file_layout"
    PRESERVE_PDF_STATE = "preserve_pdf_state"


class HandlerFlag(str, Enum):
    """Capabilities of the format handler that serves an open file."""

    CAN_INJECT_XMP = "can_inject_xmp"
    CAN_EXPAND = "can_expand"
    CAN_REWRITE = "can_rewrite"
    PREFERS_IN_PLACE = "prefers_in_place"
    CAN_RECONCILE = "can_reconcile"
    ALLOWS_ONLY_XMP = "allows_only_xmp"
    RETURNS_RAW_PACKET = "returns_raw_packet"
    HANDLER_OWNS_FILE = "handler_owns_file"
    ALLOWS_SAFE_UPDATE = "allows_safe_update"
    NEEDS_READ_ONLY_PACKET = "needs_read_only_packet"
    USES_SIDECAR_XMP = "uses_sidecar_xmp"
    FOLDER_BASED_FORMAT = "folder_based_format"
    CAN_NOTIFY_PROGRESS = "can_notify_progress"
    NEEDS_PRELOADING = "needs_preloading"
    NEEDS_LOCAL_FILE_OPENED = "needs_local_file_opened"


class CharFormFlag(str, Enum):
    """Encoding and byte order of the raw packet (kXMP_Char*)."""

    # Byte-order masks (components of the composite values below)
    LITTLE_ENDIAN_MASK = "little_endian_mask"
    CHAR_16BIT_MASK = "char_16bit_mask"
    CHAR_32BIT_MASK = "char_32bit_mask"

    CHAR_8BIT = "char_8bit"
    CHAR_16BIT_BIG = "char_16bit_big"
    CHAR_16BIT_LITTLE = "char_16bit_little"
    CHAR_32BIT_BIG = "char_32bit_big"
    CHAR_32BIT_LITTLE = "char_32bit_little"
    CHAR_UNKNOWN = "char_unknown"


F = TypeVar("F", bound=Enum)
FlagName = Union[str, Enum]


class FlagRegistry(Generic[F]):
    """Bidirectional mapping between bits and names for one namespace."""

    def __init__(self, namespace: FlagNamespace, names: type[F], table: Sequence[tuple[F, int]]):
        self.namespace = namespace
        self.names = names
        self.table: tuple[tuple[F, int], ...] = tuple(table)
        self._by_name: dict[F, int] = dict(self.table)

        missing = [member.value for member in names if member not in self._by_name]
        if missing:
            raise ValueError(f"{namespace.value} table is missing {missing}")

        # Last declared name wins for aliased values.
        self._by_value: dict[int, F] = {bit: name for name, bit in self.table}

        self.named_mask = reduce(lambda acc, entry: acc | entry[1], self.table, 0)

    def resolve(self, name: FlagName) -> F:
        """Turn a flag name (enum member or its string value) into this namespace's enum."""
        if isinstance(name, self.names):
            return name
        if isinstance(name, Enum):
            raise UnknownFlagError(f"{name!r} does not belong to {self.namespace.value}")
        try:
            return self.names(str(name))
        except ValueError:
            raise UnknownFlagError(f"Unknown {self.namespace.value} flag: {name!r}") from None

    def value_for(self, name: FlagName) -> int:
        return self._by_name[self.resolve(name)]

    def name_for(self, bit: int) -> Optional[F]:
        return self._by_value.get(bit)

    def canonical(self, name: FlagName) -> F:
        """The name `name_for` reports for the value of `name`."""
        return self._by_value[self.value_for(name)]

    def flags_for(self, mask: int) -> list[F]:
        """Every name whose bits intersect `mask`, in declaration order.

        Composite entries and their component masks are all reported.
        """
        return [name for name, bit in self.table if mask & bit]

    def bitmask_for(self, *names: Union[FlagName, int]) -> int:
        mask = 0
        for name in names:
            if isinstance(name, bool):
                raise TypeError(f"Invalid flag type: {type(name).__name__}")
            if isinstance(name, int) and not isinstance(name, Enum):
                mask |= name
            elif isinstance(name, (str, Enum)):
                mask |= self.value_for(name)
            else:
                raise TypeError(f"Invalid flag type: {type(name).__name__}")
        return mask

    def contains(self, mask: int, name: FlagName) -> bool:
        return (mask & self.value_for(name)) != 0

    def flag_set(self, *names: Union[FlagName, int]) -> "FlagSet":
        return FlagSet(self.namespace, self.bitmask_for(*names))


OPEN_FLAGS: FlagRegistry[OpenFlag] = FlagRegistry(
    FlagNamespace.OPEN_FLAGS,
    OpenFlag,
    [
        (OpenFlag.OPEN_FOR_READ, 0x0000_0001),
        (OpenFlag.OPEN_FOR_UPDATE, 0x0000_0002),
        (OpenFlag.OPEN_ONLY_XMP, 0x0000_0004),
        (OpenFlag.FORCE_GIVEN_HANDLER, 0x0000_0008),
        (OpenFlag.OPEN_STRICTLY, 0x0000_0010),
        (OpenFlag.OPEN_USE_SMART_HANDLER, 0x0000_0020),
        (OpenFlag.OPEN_USE_PACKET_SCANNING, 0x0000_0040),
        (OpenFlag.OPEN_LIMITED_SCANNING, 0x0000_0080),
        (OpenFlag.OPEN_REPAIR_FILE, 0x0000_0100),
        (OpenFlag.OPTIMIZE_FILE_LAYOUT, 0x0000_0200),
        (OpenFlag.PRESERVE_PDF_STATE, 0x0000_0400),
    ],
)

HANDLER_FLAGS: FlagRegistry[HandlerFlag] = FlagRegistry(
    FlagNamespace.HANDLER_FLAGS,
    HandlerFlag,
    [
        (HandlerFlag.CAN_INJECT_XMP, 0x0000_0001),
        (HandlerFlag.CAN_EXPAND, 0x0000_0002),
        (HandlerFlag.CAN_REWRITE, 0x0000_0004),
        (HandlerFlag.PREFERS_IN_PLACE, 0x0000_0008),
        (HandlerFlag.CAN_RECONCILE, 0x0000_0010),
        (HandlerFlag.ALLOWS_ONLY_XMP, 0x0000_0020),
        (HandlerFlag.RETURNS_RAW_PACKET, 0x0000_0040),
        (HandlerFlag.HANDLER_OWNS_FILE, 0x0000_0100),
        (HandlerFlag.ALLOWS_SAFE_UPDATE, 0x0000_0200),
        (HandlerFlag.NEEDS_READ_ONLY_PACKET, 0x0000_0400),
        (HandlerFlag.USES_SIDECAR_XMP, 0x0000_0800),
        (HandlerFlag.FOLDER_BASED_FORMAT, 0x0000_1000),
        (HandlerFlag.CAN_NOTIFY_PROGRESS, 0x0000_2000),
        (HandlerFlag.NEEDS_PRELOADING, 0x0000_4000),
        (HandlerFlag.NEEDS_LOCAL_FILE_OPENED, 0x0001_0000),
    ],
)

CHAR_FORM: FlagRegistry[CharFormFlag] = FlagRegistry(
    FlagNamespace.CHAR_FORM,
    CharFormFlag,
    [
        (CharFormFlag.LITTLE_ENDIAN_MASK, 0x0000_0001),
        (CharFormFlag.CHAR_16BIT_MASK, 0x0000_0002),
        (CharFormFlag.CHAR_32BIT_MASK, 0x0000_0004),
        (CharFormFlag.CHAR_8BIT, 0x0000_0000),
        (CharFormFlag.CHAR_16BIT_BIG, 0x0000_0002),
        (CharFormFlag.CHAR_16BIT_LITTLE, 0x0000_0003),
        (CharFormFlag.CHAR_32BIT_BIG, 0x0000_0004),
        (CharFormFlag.CHAR_32BIT_LITTLE, 0x0000_0005),
        (CharFormFlag.CHAR_UNKNOWN, 0x0000_0001),
    ],
)

REGISTRIES: dict[FlagNamespace, FlagRegistry] = {
    FlagNamespace.OPEN_FLAGS: OPEN_FLAGS,
    FlagNamespace.HANDLER_FLAGS: HANDLER_FLAGS,
    FlagNamespace.CHAR_FORM: CHAR_FORM,
}


@dataclass(frozen=True)
class FlagSet:
    """An unsigned bitmask tagged with the namespace it belongs to.

    Unnamed bits survive in `mask`; `names` only lists the table entries.
    """

    namespace: FlagNamespace
    mask: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.mask, bool) or not isinstance(self.mask, int) or self.mask < 0:
            raise ValueError(f"FlagSet mask must be an unsigned integer, got {self.mask!r}")

    @property
    def registry(self) -> FlagRegistry:
        return REGISTRIES[self.namespace]

    @property
    def names(self) -> list:
        return self.registry.flags_for(self.mask)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, (str, Enum)):
            return False
        return self.registry.contains(self.mask, name)

    def __or__(self, other: object) -> "FlagSet":
        if isinstance(other, FlagSet):
            if other.namespace is not self.namespace:
                raise TypeError(f"Cannot combine {self.namespace.value} with {other.namespace.value}")
            return FlagSet(self.namespace, self.mask | other.mask)
        if isinstance(other, (str, Enum)):
            return FlagSet(self.namespace, self.mask | self.registry.value_for(other))
        return NotImplemented

    def __int__(self) -> int:
        return self.mask

    def describe(self) -> str:
        names = ", ".join(name.value for name in self.names)
        return f"{self.namespace.value}(0x{self.mask:08X}: {names or '-'})"


def open_flags(*names: Union[FlagName, int]) -> FlagSet:
    return OPEN_FLAGS.flag_set(*names)


def handler_flags(mask: int) -> FlagSet:
    return FlagSet(FlagNamespace.HANDLER_FLAGS, mask)


def char_form(mask: int) -> FlagSet:
    return FlagSet(FlagNamespace.CHAR_FORM, mask)


class FileFormat(IntEnum):
    """Four-character file format codes (kXMP_*File)."""

    PDF = 0x50444620
    POSTSCRIPT = 0x50532020
    EPS = 0x45505320
    JPEG = 0x4A504547
    JPEG2K = 0x4A505820
    TIFF = 0x54494646
    GIF = 0x47494620
    PNG = 0x504E4720
    SWF = 0x53574620
    FLA = 0x464C4120
    FLV = 0x464C5620
    MOV = 0x4D4F5620
    AVI = 0x41564920
    CIN = 0x43494E20
    WAV = 0x57415620
    MP3 = 0x4D503320
    SES = 0x53455320
    CEL = 0x43454C20
    MPEG = 0x4D504547
    MPEG2 = 0x4D503220
    MPEG4 = 0x4D503420
    MXF = 0x4D584620
    WMAV = 0x574D4156
    AIFF = 0x41494646
    RED = 0x52454420
    ARRI = 0x41525249
    HEIF = 0x48454946
    P2 = 0x50322020
    XDCAM_FAM = 0x58444346
    XDCAM_SAM = 0x58444353
    XDCAM_EX = 0x58444358
    AVCHD = 0x41564844
    SONY_HDV = 0x53484456
    CANON_XF = 0x434E5846
    AVC_ULTRA = 0x41564355
    HTML = 0x48544D4C
    XML = 0x584D4C20
    TEXT = 0x74657874
    SVG = 0x53564720

    # Adobe application formats
    PHOTOSHOP = 0x50534420
    ILLUSTRATOR = 0x41492020
    INDESIGN = 0x494E4444
    AE_PROJECT = 0x41455020
    AE_PROJ_TEMPLATE = 0x41455420
    AE_FILTER_PRESET = 0x46465820
    ENCORE_PROJECT = 0x4E434F52
    PREMIERE_PROJECT = 0x5052504A
    PREMIERE_TITLE = 0x5052544C
    UCF = 0x55434620

    UNKNOWN = 0x20202020

    @classmethod
    def name_for(cls, code: Optional[int]) -> Optional[str]:
        if code is None:
            return None
        try:
            return cls(code).name
        except ValueError:
            return None

    @classmethod
    def value_for(cls, name: str) -> Optional[int]:
        member = cls.__members__.get(str(name).upper())
        return int(member) if member is not None else None


def names_of(flags: Iterable[Enum]) -> list[str]:
    return [flag.value for flag in flags]
