"""Chunk codecs for archived file data."""

from __future__ import annotations

from .lz77 import Lz77Error, decompress_lz77
from .sqsh import SQSH_HEADER_SIZE, SQSH_MAGIC, Compression, SqshChunk

__all__ = [
    "Compression",
    "Lz77Error",
    "SQSH_HEADER_SIZE",
    "SQSH_MAGIC",
    "SqshChunk",
    "decompress_lz77",
]
