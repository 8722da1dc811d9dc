"""Naming Service port for mutable table pointers.

This outbound port defines the contract for the one mutable piece of state
in the system: the pointer from a table key to its current root id (an IPNS
name, a key-value entry, a file).

Publishing is the single atomic commit point of every table update.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from iptsdb.domain.value_objects import ContentId, TableKey


@runtime_checkable
class NamingService(Protocol):
    """Protocol for per-table root pointers.

    Thread Safety:
        publish() is called from a worker thread so that the caller can bound
        it with a deadline. Implementations must tolerate that.
    """

    @abstractmethod
    def resolve(self, table_key: TableKey) -> ContentId:
        """Return the root id currently published under a key.

        Raises:
            NotFoundError: If nothing was ever published under the key.
            StoreUnavailableError: If the backend cannot be reached.
        """
        ...

    @abstractmethod
    def publish(self, table_key: TableKey, content_id: ContentId, ttl: str) -> None:
        """Point a key at a new root id.

        Args:
            table_key: Table key to update.
            content_id: Root document id to publish.
            ttl: Lifetime hint for the record (e.g. "12h").

        Raises:
            StoreUnavailableError: If the backend cannot be reached.
        """
        ...
