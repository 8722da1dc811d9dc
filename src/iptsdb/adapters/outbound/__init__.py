"""Outbound adapters - implementations of outbound ports.

- InMemoryContentStore / InMemoryNamingService: process-local backends
- FileContentStore / FileNamingService: directory-backed backends
"""

from iptsdb.adapters.outbound.file_content_store import FileContentStore
from iptsdb.adapters.outbound.file_naming_service import FileNamingService
from iptsdb.adapters.outbound.memory_content_store import InMemoryContentStore
from iptsdb.adapters.outbound.memory_naming_service import (
    InMemoryNamingService,
    NameRecord,
)

__all__ = [
    "FileContentStore",
    "FileNamingService",
    "InMemoryContentStore",
    "InMemoryNamingService",
    "NameRecord",
]
