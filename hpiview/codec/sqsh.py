"""SQSH chunk decoding.

A file's data is stored as a sequence of SQSH chunks, each holding at most
64 KiB of original bytes. A chunk is decoded eagerly when constructed; callers
check ``valid`` and then copy the result out with ``read_all``.
"""

from __future__ import annotations

import enum
import zlib

from loguru import logger

from ..source.substream import SubRange
from .lz77 import Lz77Error, decompress_lz77

SQSH_MAGIC = 0x48535153
SQSH_HEADER_SIZE = 19


class Compression(enum.IntEnum):
    STORED = 0
    LZ77 = 1
    ZLIB = 2


def payload_checksum(payload: bytes) -> int:
    return sum(payload) & 0xFFFFFFFF


def decrypt_payload(payload: bytes) -> bytes:
    """Undo the per-chunk obfuscation: byte ``i`` becomes ``(b - i) ^ i``."""
    return bytes(((value - idx) ^ idx) & 0xFF for idx, value in enumerate(payload))


class SqshChunk:
    """One compressed chunk read from a bounded view.

    ``valid`` is true only when the header is recognized, the payload is whole,
    the checksum matches, and decoding yields exactly ``full_size`` bytes.
    """

    def __init__(self, view: SubRange) -> None:
        self.valid = False
        self.error: str | None = None
        self.marker = 0
        self.compression = -1
        self.encrypted = False
        self.compressed_size = 0
        self.full_size = 0
        self.checksum = 0
        self._data = b""
        self._decode(view)
        if not self.valid:
            logger.debug("SQSH chunk at 0x{:08x} rejected: {}", view.start, self.error)

    def _fail(self, reason: str) -> None:
        self.error = reason

    def _decode(self, view: SubRange) -> None:
        magic = view.read_u32()
        if magic != SQSH_MAGIC:
            self._fail("bad magic" if magic is not None else "window too small")
            return
        header = view.read(3)
        compressed_size = view.read_u32()
        full_size = view.read_u32()
        checksum = view.read_u32()
        if len(header) != 3 or compressed_size is None or full_size is None or checksum is None:
            self._fail("truncated header")
            return
        self.marker, self.compression, encrypt_flag = header
        self.encrypted = bool(encrypt_flag)
        self.compressed_size = compressed_size
        self.full_size = full_size
        self.checksum = checksum

        payload = view.read(compressed_size)
        if len(payload) != compressed_size:
            self._fail(f"payload truncated ({len(payload)} of {compressed_size} bytes)")
            return
        if payload_checksum(payload) != checksum:
            self._fail("checksum mismatch")
            return
        if self.encrypted:
            payload = decrypt_payload(payload)

        try:
            if self.compression == Compression.STORED:
                data = payload
            elif self.compression == Compression.LZ77:
                data = decompress_lz77(payload, full_size)
            elif self.compression == Compression.ZLIB:
                inflater = zlib.decompressobj()
                data = inflater.decompress(payload, full_size + 1)
                if len(data) > full_size or inflater.unconsumed_tail:
                    self._fail(f"zlib stream inflates past {full_size} bytes")
                    return
                if not inflater.eof:
                    self._fail("zlib stream is incomplete")
                    return
            else:
                self._fail(f"unknown compression type {self.compression}")
                return
        except (Lz77Error, zlib.error) as exc:
            self._fail(f"decode failed: {exc}")
            return

        if len(data) != full_size:
            self._fail(f"decoded {len(data)} bytes, header declares {full_size}")
            return
        self._data = data
        self.valid = True

    def read_all(self, output: bytearray) -> int:
        """Append the decoded bytes to ``output`` and return how many were added."""
        if not self.valid:
            return 0
        output += self._data
        return len(self._data)


__all__ = [
    "Compression",
    "SQSH_HEADER_SIZE",
    "SQSH_MAGIC",
    "SqshChunk",
    "decrypt_payload",
    "payload_checksum",
]
