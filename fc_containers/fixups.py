"""Known-bad header database used to repair mis-dumped cartridges.

Two read-only tables are consulted:

* corrections keyed by the CRC32 of PRG+CHR, fixing the mapper number,
  the mirroring and, for some boards, the presence of CHR ROM;
* a set of partial MD5 keys (see :func:`fc_containers.checksum.partial_md5`)
  of games that use battery-backed memory their headers fail to declare.

The shipped rows come from FCEUX 2.2.3: the CHINF table in
``src/ines-correct.h`` and the ``savie[]`` list checked by ``CheckHInfo``
in ``src/ines.cpp``. Only leading entries of both tables are carried.
The mapper column keeps that table's flag bits: ``NO_CHR`` drops the CHR
ROM, ``WIDE_MAPPER`` widens the mapper mask to 12 bits. Callers with a
fuller table build their own :class:`RomFixupDatabase`.
"""
from __future__ import annotations

import enum
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, NamedTuple

from .checksum import partial_md5
from .enums import Mirroring

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .rom import RomImage

logger = logging.getLogger(__name__)

NO_CHR = 0x800
WIDE_MAPPER = 0x1000


class MirroringFix(enum.Enum):
    """Mirroring directives that are not a plain mirroring value."""

    NOT_FOUR_SCREEN = "not-four-screen"


class CorrectionResult(enum.IntFlag):
    NONE = 0
    MAPPER_CHANGED = 1
    MIRRORING_CHANGED = 2
    BATTERY_CHANGED = 4
    CHR_CLEARED = 8


class Correction(NamedTuple):
    crc32: int
    mapper: int | None
    mirroring: Mirroring | MirroringFix | None
    title: str = ""

    @property
    def clears_chr(self) -> bool:
        return self.mapper is not None and bool(self.mapper & NO_CHR)

    @property
    def mapper_number(self) -> int | None:
        if self.mapper is None:
            return None
        mask = 0xFFF if self.mapper & WIDE_MAPPER else 0xFF
        return self.mapper & mask


class RomFixupDatabase:
    """Immutable pair of correction tables."""

    __slots__ = ("_corrections", "_by_crc", "_battery_keys")

    def __init__(self, corrections: Iterable[Correction], battery_keys: Iterable[int]):
        self._corrections = tuple(corrections)
        by_crc: dict[int, Correction] = {}
        for row in self._corrections:
            # First row wins when the table lists a CRC twice.
            by_crc.setdefault(row.crc32, row)
        self._by_crc = MappingProxyType(by_crc)
        self._battery_keys = frozenset(battery_keys)

    @property
    def corrections(self) -> tuple[Correction, ...]:
        return self._corrections

    @property
    def battery_keys(self) -> frozenset[int]:
        return self._battery_keys

    def lookup(self, crc: int) -> Correction | None:
        return self._by_crc.get(crc & 0xFFFFFFFF)

    def needs_battery(self, key: int) -> bool:
        return key in self._battery_keys

    def __len__(self) -> int:
        return len(self._corrections)

    def __repr__(self) -> str:  # pragma: no cover - simple debug helper
        return f"RomFixupDatabase(corrections={len(self._corrections)}, battery_keys={len(self._battery_keys)})"


_N4 = MirroringFix.NOT_FOUR_SCREEN

# Leading rows of the CHINF table in FCEUX src/ines-correct.h.
CORRECTIONS: tuple[Correction, ...] = (
    Correction(0x9CBADC25, 5, _N4, "Just Breed"),
    Correction(0x6E68E31A, 16, _N4, "Dragon Ball 3"),
    Correction(0x3F15D20D, 153, _N4, "Famicom Jump 2"),
    Correction(0x983D8175, 157, _N4, "Datach Battle Rush"),
    Correction(0x894EFDBC, 157, _N4, "Datach Crayon Shin Chan"),
    Correction(0x19E81461, 157, _N4, "Datach DBZ"),
    Correction(0xBE06853F, 157, _N4, "Datach J-League"),
    Correction(0x0BE0A328, 157, _N4, "Datach SD Gundam Wars"),
    Correction(0x5B457641, 157, _N4, "Datach Ultraman Club"),
    Correction(0xF51A7F46, 157, _N4, "Datach Yuu Yuu Hakusho"),
    Correction(0xE170404C, 159, _N4, "SD Gundam Gaiden (V1.0)"),
    Correction(0x276AC722, 159, _N4, "SD Gundam Gaiden (V1.1)"),
    Correction(0x0CF42E69, 159, _N4, "Magical Taruruuto-kun"),
    Correction(0xDCB972CE, 159, _N4, "Magical Taruruuto-kun 2"),
    Correction(0xB7F28915, 159, _N4, "Magical Taruruuto-kun 2 (alt)"),
    Correction(0x183859D2, 159, _N4, "Dragon Ball Z - Kyoushuu! Saiya Jin"),
    Correction(0x1C098942, 162, None, "Xi You Ji Hou Zhuan"),
    Correction(0x081CAAFF, 163, None, "Commandos"),
)

# Leading entries of savie[] in FCEUX src/ines.cpp: partial MD5 keys
# (digest bytes 8..15, most significant first).
BATTERY_KEYS: frozenset[int] = frozenset(
    {
        0xC04361E499748382,  # AD&D Heroes of the Lance
        0xB72EE2337CED5792,  # AD&D Hillsfar
        0x2B7103B7A27BD72F,  # AD&D Pool of Radiance
        0x498C10DC463CFE95,  # Battle Fleet
        0x854D7947A3177F57,  # Crystalis
        0x4A1F5336B86851B6,  # Dragon Warrior
        0xB0BCC02C843C1B79,  # Dragon Warrior (alt)
        0x2E91EB15E9B67F2A,  # Dragon Warrior 2
        0xAA5F36A86A7DA4A9,  # Dragon Warrior 2 (alt)
    }
)

DEFAULT_DATABASE = RomFixupDatabase(CORRECTIONS, BATTERY_KEYS)


def correct_rom(image: "RomImage", database: RomFixupDatabase | None = None) -> CorrectionResult:
    """Apply known header fixes to ``image`` in place.

    Returns the set of fields that actually changed; an image that has
    already been corrected yields ``CorrectionResult.NONE``.
    """
    db = DEFAULT_DATABASE if database is None else database
    result = CorrectionResult.NONE

    # Both keys describe the dump as loaded, before any field is rewritten.
    crc = image.crc32()
    battery_key = partial_md5(image.md5())
    row = db.lookup(crc)
    if row is not None:
        if row.clears_chr and image.chr_rom:
            logger.info("CRC %08X (%s): dropping %d bytes of CHR ROM", crc, row.title, len(image.chr_rom))
            image.chr_rom = b""
            result |= CorrectionResult.CHR_CLEARED

        mapper = row.mapper_number
        if mapper is not None and image.mapper != mapper:
            logger.info("CRC %08X (%s): mapper %d -> %d", crc, row.title, image.mapper, mapper)
            image.mapper = mapper
            result |= CorrectionResult.MAPPER_CHANGED

        mirroring = _corrected_mirroring(image.mirroring, row.mirroring)
        if mirroring is not None and mirroring != image.mirroring:
            logger.info(
                "CRC %08X (%s): mirroring %s -> %s",
                crc,
                row.title,
                Mirroring(image.mirroring).name,
                mirroring.name,
            )
            image.mirroring = mirroring
            result |= CorrectionResult.MIRRORING_CHANGED

    if not image.battery and db.needs_battery(battery_key):
        logger.info("CRC %08X: game is known to use battery-backed memory", crc)
        image.battery = True
        result |= CorrectionResult.BATTERY_CHANGED

    return result


def _corrected_mirroring(current: Mirroring, directive: Mirroring | MirroringFix | None) -> Mirroring | None:
    if directive is None:
        return None
    if directive is MirroringFix.NOT_FOUR_SCREEN:
        return Mirroring.HORIZONTAL if current == Mirroring.FOUR_SCREEN_VRAM else None
    return directive
