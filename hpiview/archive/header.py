"""Fixed archive header checks and key/offset extraction."""

from __future__ import annotations

from ..errors import InvalidSignatureError, UnsupportedVersionError, VersionMismatch
from ..source.scrambled import ScrambledSource
from .types import HeaderInfo

HAPI_MAGIC = 0x49504148
HAPI_VERSION_MAGIC = 0x00010000
HAPI2_VERSION_MAGIC = 0x00020000
BANK_MAGIC = 0x4B4E4142
HEADER_SIZE = 20


def classify_version(value: int) -> VersionMismatch:
    """Name the known format a rejected sub-type word resembles."""
    if value == BANK_MAGIC:
        return VersionMismatch.SAVED_GAME
    if value == HAPI2_VERSION_MAGIC:
        return VersionMismatch.HAPI_V2
    return VersionMismatch.UNKNOWN


def validate_header(source: ScrambledSource) -> HeaderInfo:
    """Read and check the header at offset 0, then install the archive key.

    Raises ``InvalidSignatureError`` or ``UnsupportedVersionError`` as soon as
    the offending word is read; nothing past it is consumed.
    """
    source.seek(0)
    signature = source.read_u32()
    if signature != HAPI_MAGIC:
        raise InvalidSignatureError(signature)

    version = source.read_u32()
    if version != HAPI_VERSION_MAGIC:
        raise UnsupportedVersionError(version, classify_version(version))

    body_offset = source.read_u32()
    key = source.read_u32()
    root_offset = source.read_u32()
    source.set_key(key)
    return HeaderInfo(key=key, root_offset=root_offset, body_offset=body_offset)


__all__ = [
    "BANK_MAGIC",
    "HAPI2_VERSION_MAGIC",
    "HAPI_MAGIC",
    "HAPI_VERSION_MAGIC",
    "HEADER_SIZE",
    "classify_version",
    "validate_header",
]
