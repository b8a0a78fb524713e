"""Bit packing for the 16-byte iNES / NES 2.0 header.

Everything that knows about individual header bits lives here. The rest of
the package only sees the typed fields of :class:`RomMetadata` and the
segment sizes returned in :class:`SegmentLayout`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from .enums import (
    ConsoleType,
    ExpansionDevice,
    ExtendedConsoleType,
    Mirroring,
    NesVersion,
    Timing,
    VsHardwareType,
    VsPpuType,
)
from .errors import (
    BadMagicError,
    FormatError,
    InconsistentMiscRomError,
    TruncatedInputError,
    UnsupportedFieldForVersionError,
)
from .sizes import MAX_EXPONENT, ExponentSize, encode_size

logger = logging.getLogger(__name__)

INES_MAGIC = b"NES\x1a"
HEADER_SIZE = 16
TRAINER_SIZE = 512
PRG_UNIT = 16 * 1024
CHR_UNIT = 8 * 1024

MAX_MAPPER = 0xFFF
MAX_SUBMAPPER = 0x0F
MAX_MISC_ROM_COUNT = 0x03
# Largest unit count a NES 2.0 size nibble can hold literally; 0xF marks exponent form.
MAX_LINEAR_UNITS = 0xEFF
EXPONENT_NIBBLE = 0x0F

_SIBLING_TAGS: tuple[tuple[bytes, str], ...] = (
    (b"UNIF", "UNIF"),
    (b"FDS\x1a", "FDS"),
    (b"\x01*NI", "FDS (headerless)"),
)

_NVRAM_FIELDS = frozenset({"prg_nvram_size", "chr_nvram_size"})


@dataclass(slots=True)
class RomMetadata:
    """Typed view of every header field except segment sizes."""

    mapper: int = 0
    submapper: int = 0
    battery: bool = False
    version: NesVersion = NesVersion.INES
    mirroring: Mirroring = Mirroring.HORIZONTAL
    prg_ram_size: int = 0
    prg_nvram_size: int = 0
    chr_ram_size: int = 0
    chr_nvram_size: int = 0
    region: Timing = Timing.NTSC
    console: ConsoleType = ConsoleType.NORMAL
    vs_ppu: VsPpuType = VsPpuType.RP2C03B
    vs_hardware: VsHardwareType = VsHardwareType.VS_UNISYSTEM_NORMAL
    extended_console: ExtendedConsoleType = ExtendedConsoleType.REGULAR_NES
    default_expansion_device: ExpansionDevice = ExpansionDevice.UNSPECIFIED
    misc_rom_count: int = 0

    def __setattr__(self, name: str, value) -> None:
        object.__setattr__(self, name, value)
        # Non-volatile memory implies the battery flag.
        if name in _NVRAM_FIELDS and value:
            object.__setattr__(self, "battery", True)


@dataclass(frozen=True, slots=True)
class SegmentLayout:
    """Byte sizes of the segments that follow the header."""

    trainer_size: int
    prg_size: int
    chr_size: int


def _sibling_format(data: bytes) -> str | None:
    for tag, name in _SIBLING_TAGS:
        if data.startswith(tag):
            return name
    return None


def _decode_rom_size(low: int, nibble: int, unit: int) -> int:
    if nibble == EXPONENT_NIBBLE:
        return ExponentSize.from_byte(low).padded_size
    return ((nibble << 8) | low) * unit


def _decode_ram_size(shift: int) -> int:
    return 64 << shift if shift else 0


def _encode_ram_size(size: int, field: str) -> int:
    if size < 0:
        raise FormatError(f"{field} must be non-negative")
    if size == 0:
        return 0
    shift = max(1, (size - 1).bit_length() - 6)
    if shift > 0x0F:
        raise FormatError(f"{field} of {size} bytes is too big for NES 2.0")
    return shift


def _units(size: int, unit: int) -> int:
    return -(-size // unit)


def parse_header(data: bytes, into: RomMetadata) -> SegmentLayout:
    """Decode the header at the start of ``data`` into ``into``.

    Only the fields carried by the detected header version are assigned;
    the rest keep the values ``into`` already holds.
    """
    tag = bytes(data[:4])
    if tag != INES_MAGIC:
        sibling = _sibling_format(tag)
        if sibling is not None:
            raise BadMagicError(f"Data is a {sibling} container, not iNES")
        raise BadMagicError(f"Invalid iNES header tag {tag!r}")
    if len(data) < HEADER_SIZE:
        raise TruncatedInputError(f"Header needs {HEADER_SIZE} bytes, got {len(data)}")

    raw = bytearray(data[:HEADER_SIZE])
    if raw[7] & 0x0C == 0x08:
        version = NesVersion.NES20
    else:
        version = NesVersion.INES
        if any(raw[12:16]):
            # Pre-standard dumpers left garbage (often "DiskDude!") here.
            logger.warning("Archaic iNES header, ignoring bytes 7-15: %s", bytes(raw[7:16]).hex())
            raw[7:16] = bytes(9)

    flags6 = raw[6]
    flags7 = raw[7]
    into.version = version
    into.battery = bool(flags6 & 0x02)
    if flags6 & 0x08:
        into.mirroring = Mirroring.FOUR_SCREEN_VRAM
    elif flags6 & 0x01:
        into.mirroring = Mirroring.VERTICAL
    else:
        into.mirroring = Mirroring.HORIZONTAL
    trainer_size = TRAINER_SIZE if flags6 & 0x04 else 0
    console = ConsoleType(flags7 & 0x03)
    mapper = (flags6 >> 4) | (flags7 & 0xF0)

    if version == NesVersion.INES:
        if console == ConsoleType.EXTENDED:
            raise UnsupportedFieldForVersionError("Extended console type requires NES 2.0")
        into.mapper = mapper
        into.submapper = 0
        into.console = console
        return SegmentLayout(trainer_size, raw[4] * PRG_UNIT, raw[5] * CHR_UNIT)

    into.mapper = mapper | ((raw[8] & 0x0F) << 8)
    into.submapper = raw[8] >> 4
    into.console = console
    into.prg_ram_size = _decode_ram_size(raw[10] & 0x0F)
    into.prg_nvram_size = _decode_ram_size(raw[10] >> 4)
    into.chr_ram_size = _decode_ram_size(raw[11] & 0x0F)
    into.chr_nvram_size = _decode_ram_size(raw[11] >> 4)
    into.region = Timing(raw[12] & 0x03)
    if console == ConsoleType.VS_SYSTEM:
        into.vs_ppu = VsPpuType(raw[13] & 0x0F)
        into.vs_hardware = VsHardwareType(raw[13] >> 4)
    elif console == ConsoleType.EXTENDED:
        into.extended_console = ExtendedConsoleType(raw[13] & 0x0F)
    into.misc_rom_count = raw[14] & MAX_MISC_ROM_COUNT
    into.default_expansion_device = ExpansionDevice(raw[15] & 0x3F)

    return SegmentLayout(
        trainer_size,
        _decode_rom_size(raw[4], raw[9] & 0x0F, PRG_UNIT),
        _decode_rom_size(raw[5], raw[9] >> 4, CHR_UNIT),
    )


def _validate(meta: RomMetadata, trainer_size: int, misc_rom_size: int) -> None:
    if trainer_size not in (0, TRAINER_SIZE):
        raise FormatError(f"Trainer must be 0 or {TRAINER_SIZE} bytes, got {trainer_size}")
    if not 0 <= meta.mapper <= MAX_MAPPER:
        raise FormatError(f"Mapper {meta.mapper} outside 0..{MAX_MAPPER}")
    if not 0 <= meta.submapper <= MAX_SUBMAPPER:
        raise FormatError(f"Submapper {meta.submapper} outside 0..{MAX_SUBMAPPER}")
    if not 0 <= meta.misc_rom_count <= MAX_MISC_ROM_COUNT:
        raise FormatError(f"Miscellaneous ROM count {meta.misc_rom_count} outside 0..{MAX_MISC_ROM_COUNT}")
    if meta.mirroring in (Mirroring.ONE_SCREEN_A, Mirroring.ONE_SCREEN_B):
        raise UnsupportedFieldForVersionError(f"{Mirroring(meta.mirroring).name} mirroring cannot be stored in a header")
    if meta.misc_rom_count and not misc_rom_size:
        raise InconsistentMiscRomError("Miscellaneous ROM count is nonzero but there is no miscellaneous ROM data")
    if misc_rom_size and not meta.misc_rom_count:
        raise InconsistentMiscRomError("Miscellaneous ROM data is present but its count is zero")

    if meta.version == NesVersion.INES:
        if meta.console == ConsoleType.EXTENDED:
            raise UnsupportedFieldForVersionError("Extended console type is supported by NES 2.0 only")
        if meta.mapper > 0xFF:
            raise UnsupportedFieldForVersionError("Mapper number > 255 is supported by NES 2.0 only")
        if meta.submapper:
            raise UnsupportedFieldForVersionError("Submapper number is supported by NES 2.0 only")
        if meta.misc_rom_count:
            raise UnsupportedFieldForVersionError("Miscellaneous ROM is supported by NES 2.0 only")
    elif meta.version != NesVersion.NES20:
        raise FormatError(f"Unknown header version {meta.version!r}")


def _encode_ines_size(size: int, unit: int, name: str) -> tuple[int, int]:
    units = _units(size, unit)
    if units > 0xFF:
        raise UnsupportedFieldForVersionError(f"{name} size is too big for iNES, use NES 2.0 instead")
    return units, units * unit


def _encode_nes20_size(size: int, unit: int, name: str) -> tuple[int, int, int]:
    """Return (low byte, high nibble, padded size) for one ROM segment."""
    units = _units(size, unit)
    if units <= MAX_LINEAR_UNITS:
        return units & 0xFF, units >> 8, units * unit
    packed = encode_size(size)
    if packed.exponent > MAX_EXPONENT:
        raise FormatError(f"{name} size of {size} bytes is too big for NES 2.0")
    return packed.to_byte(), EXPONENT_NIBBLE, packed.padded_size


def build_header(
    meta: RomMetadata,
    prg_size: int,
    chr_size: int,
    *,
    trainer_size: int = 0,
    misc_rom_size: int = 0,
) -> tuple[bytes, SegmentLayout]:
    """Encode ``meta`` plus segment sizes into a header.

    Returns the header and the padded segment sizes it declares.
    """
    _validate(meta, trainer_size, misc_rom_size)

    header = bytearray(HEADER_SIZE)
    header[0:4] = INES_MAGIC

    if meta.mirroring == Mirroring.VERTICAL:
        header[6] |= 0x01
    if meta.battery or meta.prg_nvram_size or meta.chr_nvram_size:
        header[6] |= 0x02
    if trainer_size:
        header[6] |= 0x04
    if meta.mirroring == Mirroring.FOUR_SCREEN_VRAM:
        header[6] |= 0x08
    header[6] |= (meta.mapper & 0x0F) << 4
    header[7] |= int(meta.console) & 0x03
    header[7] |= meta.mapper & 0xF0

    if meta.version == NesVersion.INES:
        header[4], prg_padded = _encode_ines_size(prg_size, PRG_UNIT, "PRG")
        header[5], chr_padded = _encode_ines_size(chr_size, CHR_UNIT, "CHR")
        return bytes(header), SegmentLayout(trainer_size, prg_padded, chr_padded)

    header[4], prg_nibble, prg_padded = _encode_nes20_size(prg_size, PRG_UNIT, "PRG")
    header[5], chr_nibble, chr_padded = _encode_nes20_size(chr_size, CHR_UNIT, "CHR")
    header[9] = (chr_nibble << 4) | prg_nibble
    header[7] |= 0x08
    header[8] = (meta.submapper << 4) | ((meta.mapper >> 8) & 0x0F)
    header[10] = (_encode_ram_size(meta.prg_nvram_size, "PRG-NVRAM") << 4) | _encode_ram_size(
        meta.prg_ram_size, "PRG-RAM"
    )
    header[11] = (_encode_ram_size(meta.chr_nvram_size, "CHR-NVRAM") << 4) | _encode_ram_size(
        meta.chr_ram_size, "CHR-RAM"
    )
    header[12] = int(meta.region) & 0x03
    if meta.console == ConsoleType.VS_SYSTEM:
        header[13] = ((int(meta.vs_hardware) & 0x0F) << 4) | (int(meta.vs_ppu) & 0x0F)
    elif meta.console == ConsoleType.EXTENDED:
        header[13] = int(meta.extended_console) & 0x0F
    header[14] = meta.misc_rom_count
    header[15] = int(meta.default_expansion_device) & 0x3F
    return bytes(header), SegmentLayout(trainer_size, prg_padded, chr_padded)
