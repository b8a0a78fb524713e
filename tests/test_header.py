from __future__ import annotations

import logging

import pytest

from fc_containers.enums import (
    ConsoleType,
    ExpansionDevice,
    ExtendedConsoleType,
    Mirroring,
    NesVersion,
    Timing,
    VsHardwareType,
    VsPpuType,
)
from fc_containers.errors import (
    BadMagicError,
    FormatError,
    InconsistentMiscRomError,
    TruncatedInputError,
    UnsupportedFieldForVersionError,
)
from fc_containers.header import (
    CHR_UNIT,
    PRG_UNIT,
    RomMetadata,
    SegmentLayout,
    build_header,
    parse_header,
)


def _header(*values: int) -> bytes:
    body = bytes(values) + bytes(12 - len(values))
    return b"NES\x1a" + body


def _parse(data: bytes) -> tuple[RomMetadata, SegmentLayout]:
    meta = RomMetadata()
    layout = parse_header(data, meta)
    return meta, layout


def test_ines_header_fields():
    meta, layout = _parse(_header(2, 1, 0x13, 0x42))
    assert meta.version == NesVersion.INES
    assert meta.mapper == 0x41
    assert meta.submapper == 0
    assert meta.mirroring == Mirroring.VERTICAL
    assert meta.battery is True
    assert meta.console == ConsoleType.PLAYCHOICE10
    assert layout == SegmentLayout(0, 2 * PRG_UNIT, CHR_UNIT)


def test_four_screen_overrides_mirroring_bit():
    meta, _ = _parse(_header(1, 0, 0x09))
    assert meta.mirroring == Mirroring.FOUR_SCREEN_VRAM


def test_trainer_flag():
    _, layout = _parse(_header(1, 0, 0x04))
    assert layout.trainer_size == 512


def test_archaic_header_ignores_bytes_7_to_15(caplog):
    data = b"NES\x1a\x01\x00\x10" + b"DiskDude!"
    with caplog.at_level(logging.WARNING, logger="fc_containers.header"):
        meta, layout = _parse(data)
    assert meta.version == NesVersion.INES
    assert meta.mapper == 1
    assert meta.console == ConsoleType.NORMAL
    assert layout.prg_size == PRG_UNIT
    assert "Archaic" in caplog.text


def test_nes20_mapper_and_submapper():
    meta, _ = _parse(_header(1, 1, 0x50, 0xA8, 0x31))
    assert meta.version == NesVersion.NES20
    assert meta.mapper == 0x1A5
    assert meta.submapper == 3


def test_ines_ignores_byte8_mapper_bits():
    meta, _ = _parse(_header(1, 1, 0x50, 0xA0, 0x31))
    assert meta.version == NesVersion.INES
    assert meta.mapper == 0xA5
    assert meta.submapper == 0


def test_nes20_linear_sizes_use_byte9_nibbles():
    _, layout = _parse(_header(0x02, 0x03, 0, 0x08, 0, 0x21))
    assert layout.prg_size == 0x102 * PRG_UNIT
    assert layout.chr_size == 0x203 * CHR_UNIT


def test_nes20_exponent_sizes():
    _, layout = _parse(_header((10 << 2) | 1, (12 << 2) | 2, 0, 0x08, 0, 0xFF))
    assert layout.prg_size == 3 * 1024
    assert layout.chr_size == 5 * 4096


def test_nes20_memory_sizes_and_battery():
    meta, _ = _parse(_header(1, 0, 0x00, 0x08, 0, 0, 0x70, 0x97))
    assert meta.prg_ram_size == 0
    assert meta.prg_nvram_size == 8192
    assert meta.chr_ram_size == 8192
    assert meta.chr_nvram_size == 64 << 9
    assert meta.battery is True


def test_nes20_vs_system_fields():
    meta, _ = _parse(_header(1, 1, 0, 0x09, 0, 0, 0, 0, 0x01, 0x58, 0x02, 0x04))
    assert meta.console == ConsoleType.VS_SYSTEM
    assert meta.region == Timing.PAL
    assert meta.vs_ppu == VsPpuType.RC2C05_01
    assert meta.vs_hardware == VsHardwareType.VS_DUAL_SYSTEM_NORMAL
    assert meta.misc_rom_count == 2
    assert meta.default_expansion_device == ExpansionDevice.VS_SYSTEM


def test_nes20_extended_console():
    meta, _ = _parse(_header(1, 0, 0, 0x0B, 0, 0, 0, 0, 0x03, 0x0B))
    assert meta.console == ConsoleType.EXTENDED
    assert meta.region == Timing.DENDY
    assert meta.extended_console == ExtendedConsoleType.UMC_UM6578


def test_unnamed_codes_decode_to_pseudo_members():
    meta, _ = _parse(_header(1, 0, 0, 0x09, 0, 0, 0, 0, 0, 0xFF, 0, 0x3F))
    assert meta.vs_ppu == 0x0F
    assert meta.vs_ppu.name == "UNKNOWN_0F"
    assert meta.vs_hardware == 0x0F
    assert meta.default_expansion_device == 0x3F
    assert isinstance(meta.default_expansion_device, ExpansionDevice)


def test_extended_console_is_rejected_for_ines():
    with pytest.raises(UnsupportedFieldForVersionError):
        _parse(_header(1, 0, 0, 0x03))


@pytest.mark.parametrize(
    "data, fragment",
    [
        (b"UNIF" + bytes(28), "UNIF"),
        (b"FDS\x1a" + bytes(12), "FDS"),
        (b"\x01*NINTENDO-HVC*" + bytes(16), "FDS"),
    ],
)
def test_sibling_containers_are_named(data, fragment):
    with pytest.raises(BadMagicError, match=fragment):
        _parse(data)


def test_bad_magic():
    with pytest.raises(BadMagicError):
        _parse(b"NEZ\x1a" + bytes(12))
    with pytest.raises(BadMagicError):
        _parse(b"")


def test_short_header():
    with pytest.raises(TruncatedInputError):
        _parse(b"NES\x1a\x01\x01")


def _meta(**fields) -> RomMetadata:
    return RomMetadata(**fields)


def test_build_ines_header():
    header, layout = build_header(_meta(mapper=0x41, battery=True, mirroring=Mirroring.VERTICAL), 2 * PRG_UNIT, 100)
    assert header == _header(2, 1, 0x13, 0x40)
    assert layout == SegmentLayout(0, 2 * PRG_UNIT, CHR_UNIT)


def test_build_nes20_header():
    meta = _meta(
        mapper=0x1A5,
        submapper=3,
        version=NesVersion.NES20,
        mirroring=Mirroring.FOUR_SCREEN_VRAM,
        prg_ram_size=8192,
        chr_nvram_size=100,
        region=Timing.MULTIPLE,
        console=ConsoleType.EXTENDED,
        extended_console=ExtendedConsoleType.VT369,
        misc_rom_count=1,
        default_expansion_device=ExpansionDevice.ZAPPER,
    )
    header, layout = build_header(meta, 0x102 * PRG_UNIT, 0, trainer_size=512, misc_rom_size=4)
    assert header == _header(0x02, 0x00, 0x5E, 0xAB, 0x31, 0x01, 0x07, 0x10, 0x02, 0x0A, 0x01, 0x08)
    assert layout == SegmentLayout(512, 0x102 * PRG_UNIT, 0)


def test_build_nes20_switches_to_exponent_form():
    meta = _meta(version=NesVersion.NES20)
    header, layout = build_header(meta, 0xEFF * PRG_UNIT, 0)
    assert header[4] == 0xFF and header[9] == 0x0E
    assert layout.prg_size == 0xEFF * PRG_UNIT

    header, layout = build_header(meta, 0xEFF * PRG_UNIT + 1, 0xF00 * CHR_UNIT)
    assert header[4] == 26 << 2
    assert header[5] == 25 << 2
    assert header[9] == 0xFF
    assert layout.prg_size == 1 << 26
    assert layout.chr_size == 1 << 25


def test_nvram_sizes_set_battery():
    meta = _meta(version=NesVersion.NES20)
    meta.chr_nvram_size = 8192
    assert meta.battery is True
    header, _ = build_header(meta, 0, 0)
    assert header[6] & 0x02


@pytest.mark.parametrize(
    "fields",
    [
        {"console": ConsoleType.EXTENDED},
        {"mapper": 300},
        {"submapper": 1},
        {"misc_rom_count": 1},
        {"mirroring": Mirroring.ONE_SCREEN_A},
    ],
)
def test_fields_unsupported_by_ines(fields):
    with pytest.raises(UnsupportedFieldForVersionError):
        build_header(_meta(**fields), PRG_UNIT, 0, misc_rom_size=4 if "misc_rom_count" in fields else 0)


def test_ines_size_limit():
    build_header(_meta(), 255 * PRG_UNIT, 255 * CHR_UNIT)
    with pytest.raises(UnsupportedFieldForVersionError):
        build_header(_meta(), 255 * PRG_UNIT + 1, 0)
    with pytest.raises(UnsupportedFieldForVersionError):
        build_header(_meta(), 0, 256 * CHR_UNIT)


def test_misc_rom_count_must_match_data():
    meta = _meta(version=NesVersion.NES20, misc_rom_count=1)
    with pytest.raises(InconsistentMiscRomError):
        build_header(meta, PRG_UNIT, 0)
    meta.misc_rom_count = 0
    with pytest.raises(InconsistentMiscRomError):
        build_header(meta, PRG_UNIT, 0, misc_rom_size=16)


@pytest.mark.parametrize(
    "fields, kwargs",
    [
        ({"mapper": 0x1000, "version": NesVersion.NES20}, {}),
        ({"submapper": 16, "version": NesVersion.NES20}, {}),
        ({"prg_ram_size": 64 << 16, "version": NesVersion.NES20}, {}),
        ({}, {"trainer_size": 100}),
    ],
)
def test_out_of_range_fields(fields, kwargs):
    with pytest.raises(FormatError):
        build_header(_meta(**fields), PRG_UNIT, 0, **kwargs)
