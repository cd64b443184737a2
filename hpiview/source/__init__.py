"""Byte-level access to archive files.

- scrambled, position-keyed reads over a seekable handle
- bounded sub-range windows used to feed one compressed chunk to a codec
"""

from __future__ import annotations

from .scrambled import ScrambledSource, descramble, scramble_key
from .substream import SubRange

__all__ = [
    "ScrambledSource",
    "SubRange",
    "descramble",
    "scramble_key",
]
