"""Exponent-multiplier notation for ROM sizes too large for unit counts.

NES 2.0 headers store such a size in a single byte as ``EEEEEEMM``: the
size equals ``2 ** E * (2 * M + 1)``. Arbitrary byte counts are rounded up
to the nearest representable value, so callers must pad the segment to
:attr:`ExponentSize.padded_size` before writing it.
"""
from __future__ import annotations

from typing import NamedTuple

MAX_EXPONENT = 0x3F
MAX_MULTIPLIER = 0x03


class ExponentSize(NamedTuple):
    """A size in exponent-multiplier form together with its exact value."""

    exponent: int
    multiplier: int
    padded_size: int

    def to_byte(self) -> int:
        if not 0 <= self.exponent <= MAX_EXPONENT:
            raise ValueError(f"Exponent {self.exponent} does not fit in six bits")
        return (self.exponent << 2) | (self.multiplier & MAX_MULTIPLIER)

    @classmethod
    def from_byte(cls, value: int) -> "ExponentSize":
        exponent = (value >> 2) & MAX_EXPONENT
        multiplier = value & MAX_MULTIPLIER
        return cls(exponent, multiplier, decode_size(exponent, multiplier))


def decode_size(exponent: int, multiplier: int) -> int:
    if exponent < 0:
        raise ValueError("exponent must be non-negative")
    if not 0 <= multiplier <= MAX_MULTIPLIER:
        raise ValueError(f"multiplier must be in 0..{MAX_MULTIPLIER}, got {multiplier}")
    return (1 << exponent) * (multiplier * 2 + 1)


# Rounded top-three-bit pattern -> (exponent offset from bit length, multiplier).
_MAJOR_FORMS: dict[int, tuple[int, int]] = {
    0b100: (-1, 0),
    0b101: (-3, 2),
    0b110: (-2, 1),
    0b111: (-3, 3),
    0b1000: (0, 0),
}


def encode_size(size: int) -> ExponentSize:
    """Return the smallest representable size that is at least ``size``."""
    if size < 0:
        raise ValueError("size must be non-negative")
    if size == 0:
        return ExponentSize(0, 0, 1)
    if size < 8:
        # Too few bits to split off a three-bit head; scale up and back.
        scaled = encode_size(size << 3)
        return ExponentSize(scaled.exponent - 3, scaled.multiplier, scaled.padded_size >> 3)

    bitsize = size.bit_length()
    major = size >> (bitsize - 3)
    minor = size & ((1 << (bitsize - 3)) - 1)
    if minor:
        major += 1

    try:
        offset, multiplier = _MAJOR_FORMS[major]
    except KeyError as exc:  # pragma: no cover - unreachable for size >= 8
        raise RuntimeError(f"Unexpected size head {major:#b} for {size}") from exc

    exponent = bitsize + offset
    return ExponentSize(exponent, multiplier, decode_size(exponent, multiplier))
