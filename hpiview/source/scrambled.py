"""Decrypting random-access reader over raw HAPI archive bytes.

Every byte after the header is XOR-scrambled with a per-archive key and its
own absolute file position. Reads decode transparently once ``set_key`` has
been called; before that the source is plain.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO

from ..errors import TruncatedArchiveError

U32_SIZE = 4


def scramble_key(key: int) -> int:
    """Derive the one-byte XOR key from the header key word."""
    if key == 0:
        return 0
    return ~((key << 2) | (key >> 6)) & 0xFF


def _pattern_table(key_byte: int) -> bytes:
    # Decoded byte at position p is (p & 0xFF) ^ key ^ ~b, i.e. b ^ table[p & 0xFF].
    return bytes((pos ^ key_byte ^ 0xFF) & 0xFF for pos in range(256))


def descramble(data: bytes, position: int, key_byte: int | None) -> bytes:
    """Decode ``data`` that was read starting at absolute ``position``."""
    if key_byte is None or not data:
        return bytes(data)
    table = _pattern_table(key_byte)
    start = position & 0xFF
    rotated = table[start:] + table[:start]
    repeats = len(data) // 256 + 1
    pattern = (rotated * repeats)[: len(data)]
    mixed = int.from_bytes(data, "little") ^ int.from_bytes(pattern, "little")
    return mixed.to_bytes(len(data), "little")


class ScrambledSource:
    """Seekable byte source that descrambles reads with the archive key."""

    def __init__(self, handle: BinaryIO | bytes | bytearray, *, owns_handle: bool = False) -> None:
        if isinstance(handle, (bytes, bytearray)):
            handle = io.BytesIO(bytes(handle))
            owns_handle = True
        self._handle = handle
        self._owns_handle = owns_handle
        self._key_byte: int | None = None
        self.key = 0

    @classmethod
    def from_path(cls, path: Path) -> "ScrambledSource":
        return cls(Path(path).open("rb"), owns_handle=True)

    @property
    def closed(self) -> bool:
        return bool(getattr(self._handle, "closed", False))

    def close(self) -> None:
        """Close the wrapped handle when this source opened it."""
        if self._owns_handle and not self.closed:
            self._handle.close()

    def set_key(self, key: int) -> None:
        """Install the header key; a zero key leaves reads unscrambled."""
        self.key = key
        self._key_byte = scramble_key(key) if key else None

    @property
    def size(self) -> int:
        """Total length of the underlying handle in bytes."""
        position = self._handle.tell()
        end = self._handle.seek(0, io.SEEK_END)
        self._handle.seek(position)
        return end

    def seek(self, offset: int) -> None:
        self._handle.seek(offset)

    def tell(self) -> int:
        return self._handle.tell()

    def read(self, size: int) -> bytes:
        """Read exactly ``size`` descrambled bytes or raise ``TruncatedArchiveError``."""
        position = self.tell()
        data = self._handle.read(size)
        if len(data) != size:
            raise TruncatedArchiveError(position, size, len(data))
        return descramble(data, position, self._key_byte)

    def read_at_most(self, size: int) -> bytes:
        """Read up to ``size`` descrambled bytes, stopping quietly at end of file."""
        position = self.tell()
        data = self._handle.read(max(0, size))
        return descramble(data, position, self._key_byte)

    def read_byte(self) -> int:
        return self.read(1)[0]

    def read_u32(self) -> int:
        return int.from_bytes(self.read(U32_SIZE), "little")

    def read_cstring(self) -> str:
        """Read a NUL-terminated latin-1 string at the current position."""
        start = self.tell()
        out = bytearray()
        while True:
            raw = self._handle.read(1)
            if not raw:
                raise TruncatedArchiveError(start, len(out) + 1, len(out))
            value = descramble(raw, start + len(out), self._key_byte)[0]
            if value == 0:
                return out.decode("latin-1")
            out.append(value)

    def __enter__(self) -> "ScrambledSource":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()


__all__ = [
    "ScrambledSource",
    "descramble",
    "scramble_key",
]
