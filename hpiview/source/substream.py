"""Bounded window over a shared scrambled source."""

from __future__ import annotations

from .scrambled import U32_SIZE, ScrambledSource


class SubRange:
    """Read-only view of ``length`` bytes starting at ``start`` in ``source``.

    The view keeps its own cursor and repositions the shared source before each
    read, so interleaving with other readers of the same source is harmless as
    long as calls are not concurrent.
    """

    def __init__(self, source: ScrambledSource, start: int, length: int) -> None:
        self._source = source
        self.start = start
        self.length = max(0, length)
        self._position = 0

    @property
    def remaining(self) -> int:
        return self.length - self._position

    def tell(self) -> int:
        return self._position

    def seek(self, position: int) -> None:
        self._position = min(max(0, position), self.length)

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes (all remaining when negative)."""
        if size < 0 or size > self.remaining:
            size = self.remaining
        if size == 0:
            return b""
        self._source.seek(self.start + self._position)
        data = self._source.read_at_most(size)
        self._position += len(data)
        return data

    def read_byte(self) -> int | None:
        data = self.read(1)
        return data[0] if data else None

    def read_u32(self) -> int | None:
        data = self.read(U32_SIZE)
        if len(data) != U32_SIZE:
            return None
        return int.from_bytes(data, "little")


__all__ = ["SubRange"]
