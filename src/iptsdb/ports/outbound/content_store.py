"""Content Store port for immutable block storage.

This outbound port defines the contract for content-addressed blob storage
(an IPFS node, an object bucket keyed by hash, a local directory).

The content store is responsible for:
- Storing byte blobs under an id derived from their content
- Returning the exact bytes stored under an id
- Forgetting blobs on request (garbage collection)
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from iptsdb.domain.value_objects import ContentId


@runtime_checkable
class ContentStore(Protocol):
    """Protocol for content-addressed blob storage.

    Ids are deterministic: putting the same bytes twice yields the same id.
    Stored blobs are immutable and may be shared by any number of roots.
    """

    @abstractmethod
    def put(self, data: bytes) -> ContentId:
        """Store a blob.

        Args:
            data: Bytes to store.

        Returns:
            The content-derived id of the blob.

        Raises:
            StoreUnavailableError: If the backend cannot be reached.
        """
        ...

    @abstractmethod
    def get(self, content_id: ContentId) -> bytes:
        """Fetch a blob.

        Args:
            content_id: Id returned by a previous put().

        Returns:
            The stored bytes.

        Raises:
            NotFoundError: If no blob is stored under the id.
            StoreUnavailableError: If the backend cannot be reached.
        """
        ...

    @abstractmethod
    def delete(self, content_id: ContentId) -> None:
        """Remove a blob.

        Callers treat deletion as best-effort; a failure never invalidates
        committed state because nothing published still references the blob.

        Args:
            content_id: Id of the blob to remove.

        Raises:
            NotFoundError: If no blob is stored under the id.
            StoreUnavailableError: If the backend cannot be reached.
        """
        ...
