"""Exception hierarchy for HAPI archive parsing.

Format errors are fatal to opening an archive. Extraction problems are not
raised; they are reported as zero bytes written by ``Archive.extract``.
"""

from __future__ import annotations

import enum


class HpiError(Exception):
    """Base class for every error raised by hpiview."""


class HpiFormatError(HpiError):
    """Archive bytes do not follow the HAPI layout."""


class InvalidSignatureError(HpiFormatError):
    """Header signature word is not ``HAPI``."""

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"Invalid HAPI signature: 0x{value:08x}")


class VersionMismatch(enum.Enum):
    """Known families a rejected header sub-type word can resemble."""

    SAVED_GAME = "saved_game"
    HAPI_V2 = "hapi_v2"
    UNKNOWN = "unknown"


class UnsupportedVersionError(HpiFormatError):
    """Header sub-type word is not the supported HAPI v1 marker."""

    def __init__(self, value: int, kind: VersionMismatch) -> None:
        self.value = value
        self.kind = kind
        if kind is VersionMismatch.SAVED_GAME:
            message = f"Bank subtype signature looks like a saved game: 0x{value:08x}"
        elif kind is VersionMismatch.HAPI_V2:
            message = f"HAPIv2 archives are not supported: 0x{value:08x}"
        else:
            message = f"Invalid bank subtype signature: 0x{value:08x}"
        super().__init__(message)


class UnknownEntryTypeError(HpiFormatError):
    """Directory record carries a type tag other than file (0) or directory (1)."""

    def __init__(self, value: int, offset: int) -> None:
        self.value = value
        self.offset = offset
        super().__init__(f"Unknown entry type 0x{value:02x} in directory at 0x{offset:08x}")


class TruncatedArchiveError(HpiFormatError):
    """A read ran past the end of the archive."""

    def __init__(self, offset: int, wanted: int, got: int) -> None:
        self.offset = offset
        self.wanted = wanted
        self.got = got
        super().__init__(f"Truncated archive: wanted {wanted} bytes at 0x{offset:08x}, got {got}")


class DirectoryCycleError(HpiFormatError):
    """A directory record points back at a directory still being expanded."""

    def __init__(self, offset: int) -> None:
        self.offset = offset
        super().__init__(f"Directory cycle detected at offset 0x{offset:08x}")


class CatalogTooLargeError(HpiFormatError):
    """Directory records reference more entries than the archive can hold."""

    def __init__(self, offset: int, limit: int) -> None:
        self.offset = offset
        self.limit = limit
        super().__init__(f"Directory at 0x{offset:08x} exceeds the {limit} record limit for this archive")


__all__ = [
    "HpiError",
    "HpiFormatError",
    "InvalidSignatureError",
    "VersionMismatch",
    "UnsupportedVersionError",
    "UnknownEntryTypeError",
    "TruncatedArchiveError",
    "DirectoryCycleError",
    "CatalogTooLargeError",
]
