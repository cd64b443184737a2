"""Directory-record walking and flat catalog construction.

The catalog is append-only and post-order: a directory is appended only after
its whole subtree. Directories keep their children as catalog indices. The
descent keeps an explicit stack of open directories, so nesting depth is bound
by the archive size rather than the interpreter's recursion limit.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..errors import CatalogTooLargeError, DirectoryCycleError, UnknownEntryTypeError
from ..source.scrambled import ScrambledSource
from .types import DirectoryRecord, Entry

ENTRY_TYPE_FILE = 0
ENTRY_TYPE_DIRECTORY = 1
DIRECTORY_RECORD_SIZE = 9


@dataclass
class _OpenDirectory:
    parent_path: tuple[str, ...]
    name: str
    offset: int
    records: list[DirectoryRecord]
    position: int = 0
    children: list[int] = field(default_factory=list)

    @property
    def child_parent(self) -> tuple[str, ...]:
        return self.parent_path + (self.name,) if self.name else self.parent_path


class CatalogBuilder:
    """Build ``Entry`` objects from directory records reachable from one offset.

    Every record occupies its own bytes in a well-formed archive, so the total
    number of records read while building is capped at the archive size
    divided by the record size. Tables that reference the same subdirectory
    repeatedly hit that cap instead of expanding without bound.
    """

    def __init__(self, source: ScrambledSource) -> None:
        self.source = source
        self.entries: list[Entry] = []
        self.record_limit = source.size // DIRECTORY_RECORD_SIZE
        self.records_read = 0
        self._expanding: set[int] = set()

    def _append(self, entry: Entry) -> Entry:
        indexed = replace(entry, index=len(self.entries))
        self.entries.append(indexed)
        return indexed

    def read_records(self, offset: int) -> list[DirectoryRecord]:
        """Read the entry count, the reserved word, and every record at ``offset``."""
        self.source.seek(offset)
        count = self.source.read_u32()
        self.records_read += count
        if self.records_read > self.record_limit:
            raise CatalogTooLargeError(offset, self.record_limit)
        self.source.read_u32()
        records: list[DirectoryRecord] = []
        for _ in range(count):
            name_offset = self.source.read_u32()
            info_offset = self.source.read_u32()
            entry_type = self.source.read_byte()
            records.append(DirectoryRecord(name_offset, info_offset, entry_type))
        return records

    def _open_directory(self, parent_path: tuple[str, ...], name: str, offset: int) -> _OpenDirectory:
        if offset in self._expanding:
            raise DirectoryCycleError(offset)
        records = self.read_records(offset)
        self._expanding.add(offset)
        return _OpenDirectory(parent_path, name, offset, records)

    def build_directory(self, parent_path: tuple[str, ...], name: str, offset: int) -> Entry:
        stack = [self._open_directory(parent_path, name, offset)]
        try:
            while True:
                current = stack[-1]
                if current.position < len(current.records):
                    record = current.records[current.position]
                    current.position += 1
                    self.source.seek(record.name_offset)
                    item_name = self.source.read_cstring()
                    if record.entry_type == ENTRY_TYPE_FILE:
                        child = self.build_file(current.child_parent, item_name, record.info_offset)
                        current.children.append(child.index)
                    elif record.entry_type == ENTRY_TYPE_DIRECTORY:
                        stack.append(self._open_directory(current.child_parent, item_name, record.info_offset))
                    else:
                        raise UnknownEntryTypeError(record.entry_type, current.offset)
                    continue

                stack.pop()
                self._expanding.discard(current.offset)
                directory = self._append(
                    Entry(
                        parent_path=current.parent_path,
                        name=current.name,
                        is_directory=True,
                        offset=current.offset,
                        children=tuple(current.children),
                    )
                )
                if not stack:
                    return directory
                stack[-1].children.append(directory.index)
        finally:
            for pending in stack:
                self._expanding.discard(pending.offset)

    def build_file(self, parent_path: tuple[str, ...], name: str, offset: int) -> Entry:
        self.source.seek(offset)
        data_offset = self.source.read_u32()
        size = self.source.read_u32()
        return self._append(
            Entry(
                parent_path=parent_path,
                name=name,
                is_directory=False,
                offset=data_offset,
                size=size,
            )
        )


def build_catalog(source: ScrambledSource, root_offset: int) -> tuple[Entry, list[Entry]]:
    """Walk the whole tree from ``root_offset`` and return ``(root, catalog)``."""
    builder = CatalogBuilder(source)
    root = builder.build_directory((), "", root_offset)
    return root, builder.entries


__all__ = [
    "DIRECTORY_RECORD_SIZE",
    "ENTRY_TYPE_DIRECTORY",
    "ENTRY_TYPE_FILE",
    "CatalogBuilder",
    "build_catalog",
]
