"""Command line entry point for inspecting and repairing .nes files."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .enums import ConsoleType, ExpansionDevice, NesVersion, Timing, VsHardwareType, VsPpuType
from .errors import FormatError
from .fixups import CorrectionResult
from .rom import RomImage

logger = logging.getLogger(__name__)

_VERSIONS = {"ines": NesVersion.INES, "nes20": NesVersion.NES20}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="fc-rom", description="Inspect, repair and convert iNES / NES 2.0 ROMs")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="Print header fields and checksums")
    info.add_argument("rom", type=Path, help="Path to the .nes ROM file")
    info.set_defaults(func=cmd_info)

    fix = sub.add_parser("fix", help="Apply known header corrections")
    fix.add_argument("rom", type=Path, help="Path to the .nes ROM file")
    fix.add_argument("-o", "--output", type=Path, help="Write here instead of overwriting the input")
    fix.set_defaults(func=cmd_fix)

    convert = sub.add_parser("convert", help="Re-encode with another header version")
    convert.add_argument("rom", type=Path, help="Path to the .nes ROM file")
    convert.add_argument("--to", choices=sorted(_VERSIONS), required=True, help="Target header version")
    convert.add_argument("-o", "--output", type=Path, required=True, help="Output path")
    convert.set_defaults(func=cmd_convert)

    return parser.parse_args(argv)


def _size(n: int) -> str:
    if n and n % 1024 == 0:
        return f"{n // 1024} KiB"
    return f"{n} bytes"


def cmd_info(args: argparse.Namespace) -> int:
    rom = RomImage.from_file(args.rom)
    rows = [
        ("Version", rom.version.name),
        ("Mapper", f"{rom.mapper}" + (f".{rom.submapper}" if rom.version == NesVersion.NES20 else "")),
        ("PRG ROM", _size(len(rom.prg_rom))),
        ("CHR ROM", _size(len(rom.chr_rom))),
        ("Trainer", "yes" if rom.trainer else "no"),
        ("Mirroring", rom.mirroring.name),
        ("Battery", "yes" if rom.battery else "no"),
        ("Console", rom.console.name),
    ]
    if rom.version == NesVersion.NES20:
        rows += [
            ("PRG RAM", _size(rom.prg_ram_size)),
            ("PRG NVRAM", _size(rom.prg_nvram_size)),
            ("CHR RAM", _size(rom.chr_ram_size)),
            ("CHR NVRAM", _size(rom.chr_nvram_size)),
            ("Region", rom.region.name),
            ("Expansion", rom.default_expansion_device.name),
            ("Misc ROMs", f"{rom.misc_rom_count} ({_size(len(rom.misc_rom))})"),
        ]
        if rom.console == ConsoleType.VS_SYSTEM:
            rows += [("Vs. PPU", rom.vs_ppu.name), ("Vs. hardware", rom.vs_hardware.name)]
        elif rom.console == ConsoleType.EXTENDED:
            rows.append(("Extended console", rom.extended_console.name))
    rows += [("CRC32", f"{rom.crc32():08X}"), ("MD5", rom.md5().hex())]

    width = max(len(label) for label, _ in rows)
    for label, value in rows:
        print(f"{label:<{width}} : {value}")
    return 0


def cmd_fix(args: argparse.Namespace) -> int:
    rom = RomImage.from_file(args.rom)
    result = rom.correct()
    if result == CorrectionResult.NONE:
        print(f"{args.rom}: no known corrections")
        return 0
    output = args.output or args.rom
    rom.save(output)
    changed = ", ".join(flag.name for flag in CorrectionResult if flag and flag in result)
    print(f"{args.rom}: fixed {changed} -> {output}")
    return 0


def _nes20_only_fields(rom: RomImage) -> list[str]:
    """Names of the set fields an iNES header has no room for."""
    fields = [
        name
        for name in ("prg_ram_size", "prg_nvram_size", "chr_ram_size", "chr_nvram_size")
        if getattr(rom, name)
    ]
    if rom.region != Timing.NTSC:
        fields.append("region")
    if rom.default_expansion_device != ExpansionDevice.UNSPECIFIED:
        fields.append("default_expansion_device")
    if rom.console == ConsoleType.VS_SYSTEM:
        if rom.vs_ppu != VsPpuType.RP2C03B:
            fields.append("vs_ppu")
        if rom.vs_hardware != VsHardwareType.VS_UNISYSTEM_NORMAL:
            fields.append("vs_hardware")
    return fields


def cmd_convert(args: argparse.Namespace) -> int:
    rom = RomImage.from_file(args.rom)
    if args.to == "ines" and rom.version == NesVersion.NES20:
        dropped = _nes20_only_fields(rom)
        if dropped:
            logger.warning("%s: iNES cannot store %s; these fields are discarded", args.rom, ", ".join(dropped))
    rom.version = _VERSIONS[args.to]
    rom.save(args.output)
    print(f"{args.rom}: written as {rom.version.name} to {args.output}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except FormatError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
