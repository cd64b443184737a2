"""Domain model and readers for HAPI archive catalogs.

This package contains the non-UI archive primitives:
- catalog entry datatypes with index-based children
- header validation and key extraction
- recursive directory-record walking into a post-order catalog
- chunked file extraction
"""

from __future__ import annotations

from .archive import Archive, open_archive
from .catalog import CatalogBuilder, build_catalog
from .extract import CHUNK_SIZE, FileExtractor, chunk_count
from .header import (
    BANK_MAGIC,
    HAPI2_VERSION_MAGIC,
    HAPI_MAGIC,
    HAPI_VERSION_MAGIC,
    classify_version,
    validate_header,
)
from .types import DirectoryRecord, Entry, HeaderInfo

__all__ = [
    "Archive",
    "open_archive",
    "CatalogBuilder",
    "build_catalog",
    "CHUNK_SIZE",
    "FileExtractor",
    "chunk_count",
    "BANK_MAGIC",
    "HAPI2_VERSION_MAGIC",
    "HAPI_MAGIC",
    "HAPI_VERSION_MAGIC",
    "classify_version",
    "validate_header",
    "DirectoryRecord",
    "Entry",
    "HeaderInfo",
]
