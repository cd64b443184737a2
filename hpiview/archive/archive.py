"""Opened HAPI archive: validated header, immutable catalog, on-demand extraction."""

from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from loguru import logger

from ..errors import HpiFormatError, TruncatedArchiveError
from ..source.scrambled import ScrambledSource
from .catalog import build_catalog
from .extract import ChunkCodecFactory, FileExtractor
from .header import validate_header
from .types import Entry

_SEPARATOR_RE = re.compile(r"[\\/]+")


def _normalize_lookup_path(path: str) -> str:
    return "/".join(part for part in _SEPARATOR_RE.split(path.strip()) if part).lower()


class Archive:
    """One opened archive.

    Header mismatches leave the archive unusable (``valid`` is false and
    ``error`` holds the reason); structural errors while walking directories
    propagate out of the constructor.
    """

    def __init__(
        self,
        source: ScrambledSource | BinaryIO | bytes,
        *,
        name: str = "<archive>",
        strict_size: bool = False,
        packed_chunks: bool = False,
        codec_factory: ChunkCodecFactory | None = None,
    ) -> None:
        if not isinstance(source, ScrambledSource):
            source = ScrambledSource(source)
        self.source = source
        self.name = name
        self.valid = False
        self.error: HpiFormatError | None = None
        self.key = 0
        self.root: Entry | None = None
        self._catalog: tuple[Entry, ...] = ()
        self._by_path: dict[str, list[Entry]] = {}
        extractor_kwargs: dict[str, object] = {"strict_size": strict_size, "packed_chunks": packed_chunks}
        if codec_factory is not None:
            extractor_kwargs["codec_factory"] = codec_factory
        self._extractor = FileExtractor(source, **extractor_kwargs)

        try:
            header = validate_header(source)
        except HpiFormatError as exc:
            logger.warning("File {}: {}", name, exc)
            self.error = exc
            return

        self.key = header.key
        root, entries = build_catalog(source, header.root_offset)
        self.root = root
        self._catalog = tuple(entries)
        for entry in self._catalog:
            self._by_path.setdefault(_normalize_lookup_path(entry.path), []).append(entry)
        self.valid = True
        logger.debug("File {}: {} catalog entries, key 0x{:08x}", name, len(self._catalog), self.key)

    @classmethod
    def from_path(cls, path: Path, **kwargs: object) -> "Archive":
        """Open ``path`` and own the file handle for the archive's lifetime."""
        source = ScrambledSource.from_path(Path(path))
        try:
            return cls(source, name=str(path), **kwargs)
        except Exception:
            source.close()
            raise

    @property
    def catalog(self) -> tuple[Entry, ...]:
        """Every entry, root included, in post-order."""
        return self._catalog

    @property
    def strict_size(self) -> bool:
        return self._extractor.strict_size

    @property
    def packed_chunks(self) -> bool:
        return self._extractor.packed_chunks

    def close(self) -> None:
        self.source.close()

    def __enter__(self) -> "Archive":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._catalog)

    def owns(self, entry: Entry) -> bool:
        """Return whether ``entry`` is the very object stored in this catalog."""
        return 0 <= entry.index < len(self._catalog) and self._catalog[entry.index] is entry

    def children(self, entry: Entry) -> tuple[Entry, ...]:
        return tuple(self._catalog[idx] for idx in entry.children)

    def find(self, path: str) -> Entry | None:
        """Case-insensitive lookup by ``/`` or ``\\`` separated path.

        Entries whose paths differ only in case share a key; the first one in
        catalog order wins. ``find_all`` returns every match.
        """
        matches = self._by_path.get(_normalize_lookup_path(path))
        return matches[0] if matches else None

    def find_all(self, path: str) -> tuple[Entry, ...]:
        return tuple(self._by_path.get(_normalize_lookup_path(path), ()))

    def iter_files(self) -> Iterator[Entry]:
        return (entry for entry in self._catalog if not entry.is_directory)

    def walk(self) -> Iterator[tuple[Entry, int]]:
        """Yield ``(entry, depth)`` pre-order from the root, in record order."""
        if self.root is None:
            return
        stack: list[tuple[Entry, int]] = [(self.root, 0)]
        while stack:
            entry, depth = stack.pop()
            yield entry, depth
            for child in reversed(self.children(entry)):
                stack.append((child, depth + 1))

    def extract(self, entry: Entry, output: bytearray) -> int:
        """Append ``entry``'s decompressed bytes to ``output``; 0 on any failure."""
        if not self.owns(entry):
            logger.warning("Entry {!r} does not belong to archive {}", entry.path, self.name)
            return 0
        if entry.is_directory:
            logger.warning("Entry {!r} is a directory, not a file", entry.path)
            return 0
        mark = len(output)
        try:
            return self._extractor.extract(entry, output)
        except TruncatedArchiveError as exc:
            logger.warning("Cannot extract {!r}: {}", entry.path, exc)
            del output[mark:]
            return 0

    def read_file(self, entry: Entry) -> bytes | None:
        """Return the entry's bytes, or ``None`` when extraction failed."""
        output = bytearray()
        written = self.extract(entry, output)
        if written == 0 and (entry.size != 0 or not self.owns(entry) or entry.is_directory):
            return None
        return bytes(output)


def open_archive(target: Path | str | BinaryIO | bytes, **kwargs: object) -> Archive:
    """Open an archive and raise its header error instead of returning it invalid."""
    if isinstance(target, (str, Path)):
        archive = Archive.from_path(Path(target), **kwargs)
    else:
        archive = Archive(target, **kwargs)
    if not archive.valid:
        archive.close()
        assert archive.error is not None
        raise archive.error
    return archive


__all__ = [
    "Archive",
    "open_archive",
]
