"""Public package surface for hpiview.

Exports the archive reader API plus ``main`` for programmatic CLI invocation.
Most implementation lives in submodules under ``hpiview``.
"""

from __future__ import annotations

from .archive import Archive, Entry, open_archive
from .errors import (
    CatalogTooLargeError,
    DirectoryCycleError,
    HpiError,
    HpiFormatError,
    InvalidSignatureError,
    TruncatedArchiveError,
    UnknownEntryTypeError,
    UnsupportedVersionError,
    VersionMismatch,
)


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "Archive",
    "Entry",
    "open_archive",
    "CatalogTooLargeError",
    "DirectoryCycleError",
    "HpiError",
    "HpiFormatError",
    "InvalidSignatureError",
    "TruncatedArchiveError",
    "UnknownEntryTypeError",
    "UnsupportedVersionError",
    "VersionMismatch",
    "main",
]
