"""Codec for iNES and NES 2.0 cartridge ROM containers.

The public objects are exposed lazily via the __getattr__ hook so that the
checksum and size helpers can be used without loading the whole codec.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "CorrectionResult",
    "FormatError",
    "Mirroring",
    "NesVersion",
    "RomFixupDatabase",
    "RomImage",
    "correct_rom",
    "decode_size",
    "encode_size",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "CorrectionResult": ("fc_containers.fixups", "CorrectionResult"),
    "RomFixupDatabase": ("fc_containers.fixups", "RomFixupDatabase"),
    "correct_rom": ("fc_containers.fixups", "correct_rom"),
    "FormatError": ("fc_containers.errors", "FormatError"),
    "Mirroring": ("fc_containers.enums", "Mirroring"),
    "NesVersion": ("fc_containers.enums", "NesVersion"),
    "RomImage": ("fc_containers.rom", "RomImage"),
    "decode_size": ("fc_containers.sizes", "decode_size"),
    "encode_size": ("fc_containers.sizes", "encode_size"),
}


def __getattr__(name: str) -> Any:
    if name in _LAZY_IMPORTS:
        module_name, attr_name = _LAZY_IMPORTS[name]
        module = import_module(module_name)
        value = getattr(module, attr_name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:  # pragma: no cover - simple helper
    return sorted(set(__all__ + list(globals().keys())))


if TYPE_CHECKING:  # pragma: no cover - type checkers need eager defs
    from .enums import Mirroring, NesVersion
    from .errors import FormatError
    from .fixups import CorrectionResult, RomFixupDatabase, correct_rom
    from .rom import RomImage
    from .sizes import decode_size, encode_size
