"""In-memory iNES / NES 2.0 ROM images."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from . import checksum
from .errors import RomFileNotFoundError, TruncatedInputError
from .fixups import CorrectionResult, RomFixupDatabase, correct_rom
from .header import HEADER_SIZE, RomMetadata, build_header, parse_header

logger = logging.getLogger(__name__)

PAD_BYTE = 0xFF
# Lenient decoding zero-fills short segments, but never by more than this.
MAX_ZERO_FILL = 64 * 1024 * 1024


@dataclass(slots=True)
class RomImage(RomMetadata):
    """A cartridge dump: ROM segments plus every header field.

    Fields may be set freely; their combination is only validated by
    :meth:`to_bytes`.
    """

    prg_rom: bytes = b""
    chr_rom: bytes = b""
    trainer: bytes = b""
    misc_rom: bytes = b""

    @classmethod
    def from_bytes(cls, data: bytes, *, strict: bool = False) -> "RomImage":
        """Decode a whole ``.nes`` file.

        With ``strict=False`` (the default) segments cut short by a bad dump
        are zero-filled; with ``strict=True`` they raise
        :class:`TruncatedInputError`.

        Everything after CHR ROM becomes the misc ROM when the header counts
        any. A header that counts misc ROMs but is followed by no data still
        decodes, with an empty ``misc_rom``; :meth:`to_bytes` then raises
        :class:`InconsistentMiscRomError` until the count or the data is fixed.
        """
        data = bytes(data)
        image = cls()
        layout = parse_header(data, image)

        offset = HEADER_SIZE
        image.trainer, offset = _read_segment(data, offset, layout.trainer_size, "trainer", strict)
        image.prg_rom, offset = _read_segment(data, offset, layout.prg_size, "PRG ROM", strict)
        image.chr_rom, offset = _read_segment(data, offset, layout.chr_size, "CHR ROM", strict)

        if image.misc_rom_count:
            image.misc_rom = data[offset:]
        elif len(data) > offset:
            logger.debug("Ignoring %d trailing bytes", len(data) - offset)
        return image

    @classmethod
    def from_file(cls, path: str | Path, *, strict: bool = False) -> "RomImage":
        path = Path(path)
        if not path.exists():
            raise RomFileNotFoundError(f"ROM file not found: {path}")
        return cls.from_bytes(path.read_bytes(), strict=strict)

    def to_bytes(self) -> bytes:
        """Encode header and segments, padding PRG/CHR to the declared sizes."""
        header, layout = build_header(
            self,
            len(self.prg_rom),
            len(self.chr_rom),
            trainer_size=len(self.trainer),
            misc_rom_size=len(self.misc_rom),
        )
        return b"".join(
            (
                header,
                bytes(self.trainer),
                _pad(self.prg_rom, layout.prg_size),
                _pad(self.chr_rom, layout.chr_size),
                bytes(self.misc_rom),
            )
        )

    def save(self, path: str | Path) -> None:
        Path(path).write_bytes(self.to_bytes())

    def crc32(self) -> int:
        """CRC32 of PRG followed by CHR, without header or trainer."""
        return checksum.crc32(bytes(self.prg_rom) + bytes(self.chr_rom))

    def md5(self) -> bytes:
        """MD5 of PRG followed by CHR, without header or trainer."""
        return checksum.md5(bytes(self.prg_rom) + bytes(self.chr_rom))

    def correct(self, database: RomFixupDatabase | None = None) -> CorrectionResult:
        return correct_rom(self, database)

    def __repr__(self) -> str:  # pragma: no cover - simple debug helper
        return (
            f"RomImage(version={self.version.name}, prg={len(self.prg_rom)} bytes, "
            f"chr={len(self.chr_rom)} bytes, mapper={self.mapper}.{self.submapper})"
        )


def _read_segment(data: bytes, offset: int, size: int, name: str, strict: bool) -> tuple[bytes, int]:
    chunk = data[offset : offset + size]
    missing = size - len(chunk)
    if missing:
        if strict or missing > MAX_ZERO_FILL:
            raise TruncatedInputError(f"Incomplete {name}: expected {size} bytes, got {len(chunk)}")
        logger.warning("Incomplete %s: zero-filling %d missing bytes", name, missing)
        chunk += bytes(missing)
    return chunk, offset + size


def _pad(data: bytes, size: int) -> bytes:
    return bytes(data) + bytes([PAD_BYTE]) * (size - len(data))
