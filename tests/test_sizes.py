from __future__ import annotations

import pytest

from fc_containers.sizes import ExponentSize, decode_size, encode_size


def _representable(limit: int) -> list[int]:
    values = {
        decode_size(exponent, multiplier)
        for exponent in range(limit.bit_length() + 1)
        for multiplier in range(4)
    }
    return sorted(v for v in values if v <= 2 * limit)


def test_zero_encodes_to_one_byte():
    assert encode_size(0) == ExponentSize(0, 0, 1)


@pytest.mark.parametrize(
    "size, expected",
    [
        (1, ExponentSize(0, 0, 1)),
        (3, ExponentSize(0, 1, 3)),
        (5, ExponentSize(0, 2, 5)),
        (6, ExponentSize(1, 1, 6)),
        (7, ExponentSize(0, 3, 7)),
        (9, ExponentSize(1, 2, 10)),
        (15, ExponentSize(4, 0, 16)),
        (17, ExponentSize(2, 2, 20)),
        (3 * 1024 * 1024, ExponentSize(20, 1, 3 * 1024 * 1024)),
        (0xEFF * 0x4000 + 1, ExponentSize(26, 0, 1 << 26)),
    ],
)
def test_known_encodings(size, expected):
    assert encode_size(size) == expected


def test_encoding_rounds_up_to_the_nearest_representable_size():
    limit = 4096
    representable = _representable(limit)
    for size in range(1, limit):
        packed = encode_size(size)
        assert packed.padded_size == decode_size(packed.exponent, packed.multiplier)
        assert packed.padded_size >= size
        nearest = next(v for v in representable if v >= size)
        assert packed.padded_size == nearest


@pytest.mark.parametrize("exponent", [0, 1, 7, 14, 23, 40])
@pytest.mark.parametrize("multiplier", [0, 1, 2, 3])
def test_exact_sizes_are_not_padded(exponent, multiplier):
    size = decode_size(exponent, multiplier)
    assert encode_size(size) == ExponentSize(exponent, multiplier, size)


def test_byte_packing():
    packed = ExponentSize(20, 1, 3 << 20)
    assert packed.to_byte() == 0x51
    assert ExponentSize.from_byte(0x51) == packed
    assert ExponentSize.from_byte(0xFF) == ExponentSize(63, 3, 7 << 63)


def test_exponent_overflow_is_rejected_when_packing():
    with pytest.raises(ValueError):
        ExponentSize(64, 0, 1 << 64).to_byte()


def test_negative_sizes_are_rejected():
    with pytest.raises(ValueError):
        encode_size(-1)
    with pytest.raises(ValueError):
        decode_size(1, 4)
