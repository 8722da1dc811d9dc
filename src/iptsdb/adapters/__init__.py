"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (REST, CLI)
- Outbound adapters: Implement the content store and naming service
"""

from iptsdb.adapters.outbound import (
    FileContentStore,
    FileNamingService,
    InMemoryContentStore,
    InMemoryNamingService,
)

__all__ = [
    # Outbound adapters
    "FileContentStore",
    "FileNamingService",
    "InMemoryContentStore",
    "InMemoryNamingService",
]
