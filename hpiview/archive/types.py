"""Domain datatypes for HAPI archive catalogs."""

from __future__ import annotations

from dataclasses import dataclass

PATH_SEPARATOR = "/"


@dataclass(frozen=True)
class Entry:
    """One catalog node: a file or a directory discovered at open time.

    ``children`` holds catalog indices rather than nested entries; the owning
    catalog is the only container of ``Entry`` objects.
    """

    parent_path: tuple[str, ...]
    name: str
    is_directory: bool
    offset: int
    size: int = 0
    children: tuple[int, ...] = ()
    index: int = -1

    @property
    def segments(self) -> tuple[str, ...]:
        """Full path segments; the nameless root contributes none."""
        if not self.name:
            return self.parent_path
        return self.parent_path + (self.name,)

    @property
    def path(self) -> str:
        return PATH_SEPARATOR.join(self.segments)


@dataclass(frozen=True)
class HeaderInfo:
    """Archive-wide values read from a validated header."""

    key: int
    root_offset: int
    body_offset: int


@dataclass(frozen=True)
class DirectoryRecord:
    """Raw fields of one directory record, read before any nested seek."""

    name_offset: int
    info_offset: int
    entry_type: int


__all__ = [
    "PATH_SEPARATOR",
    "Entry",
    "HeaderInfo",
    "DirectoryRecord",
]
