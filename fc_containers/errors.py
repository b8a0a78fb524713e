"""Exceptions raised by the ROM container codecs."""
from __future__ import annotations


class FormatError(RuntimeError):
    """Raised when a container cannot be decoded or encoded."""


class BadMagicError(FormatError):
    """The data does not start with the iNES tag."""


class TruncatedInputError(FormatError):
    """The data ends before a declared header or segment."""


class UnsupportedFieldForVersionError(FormatError):
    """A field value cannot be stored with the selected header version."""


class InconsistentMiscRomError(FormatError):
    """Miscellaneous ROM count and data disagree."""


class RomFileNotFoundError(FormatError):
    """Raised when a ROM file path does not exist."""
