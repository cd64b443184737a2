"""Chunked extraction of one file entry's original bytes."""

from __future__ import annotations

from collections.abc import Callable

from loguru import logger

from ..codec.sqsh import SqshChunk
from ..source.scrambled import ScrambledSource
from ..source.substream import SubRange
from .types import Entry

CHUNK_SIZE = 65536

ChunkCodecFactory = Callable[[SubRange], SqshChunk]


def chunk_count(size: int) -> int:
    """Number of 64 KiB chunks needed for ``size`` original bytes."""
    return (size + CHUNK_SIZE - 1) // CHUNK_SIZE


class FileExtractor:
    """Reassemble file data from its chunk-size table and SQSH chunks.

    By default chunk ``i`` is read at the chunk-data base plus the number of
    bytes already produced. ``packed_chunks`` reads chunks back to back
    instead, advancing by each chunk's stored size.
    """

    def __init__(
        self,
        source: ScrambledSource,
        codec_factory: ChunkCodecFactory = SqshChunk,
        *,
        strict_size: bool = False,
        packed_chunks: bool = False,
    ) -> None:
        self.source = source
        self.codec_factory = codec_factory
        self.strict_size = strict_size
        self.packed_chunks = packed_chunks

    def read_chunk_sizes(self, entry: Entry) -> list[int]:
        self.source.seek(entry.offset)
        return [self.source.read_u32() for _ in range(chunk_count(entry.size))]

    def extract(self, entry: Entry, output: bytearray) -> int:
        """Append ``entry``'s bytes to ``output`` and return how many were written.

        Any chunk failure restores ``output`` to its original length and
        returns 0; a partially filled buffer is never handed back.
        """
        if entry.size == 0:
            return 0

        chunk_sizes = self.read_chunk_sizes(entry)
        base = entry.offset + len(chunk_sizes) * 4
        mark = len(output)
        written = 0
        stored = 0
        for idx, stored_size in enumerate(chunk_sizes):
            start = base + (stored if self.packed_chunks else written)
            codec = self.codec_factory(SubRange(self.source, start, stored_size))
            if not codec.valid:
                logger.warning(
                    "Chunk {}/{} of {!r} failed to decode at 0x{:08x}",
                    idx + 1,
                    len(chunk_sizes),
                    entry.path,
                    start,
                )
                del output[mark:]
                return 0
            written += codec.read_all(output)
            stored += stored_size

        if written != entry.size:
            if self.strict_size:
                logger.warning(
                    "Size mismatch for {!r}: recorded {}, decoded {}",
                    entry.path,
                    entry.size,
                    written,
                )
                del output[mark:]
                return 0
            logger.debug("Size mismatch ignored for {!r}: recorded {}, decoded {}", entry.path, entry.size, written)
        return written


__all__ = [
    "CHUNK_SIZE",
    "ChunkCodecFactory",
    "FileExtractor",
    "chunk_count",
]
