"""Digests used to identify dumps independently of their headers."""
from __future__ import annotations

import hashlib
import zlib


def crc32(data: bytes) -> int:
    """Standard reflected CRC-32 (poly 0xEDB88320), as an unsigned int."""
    return zlib.crc32(data) & 0xFFFFFFFF


def md5(data: bytes) -> bytes:
    return hashlib.md5(data).digest()


def partial_md5(digest: bytes) -> int:
    """Fold the last 8 bytes of an MD5 digest into a 64-bit lookup key.

    Byte 15 lands in the least significant position, byte 8 in the most
    significant one.
    """
    if len(digest) != 16:
        raise ValueError(f"MD5 digest must be 16 bytes, got {len(digest)}")
    key = 0
    for idx in range(8):
        key |= digest[15 - idx] << (idx * 8)
    return key
