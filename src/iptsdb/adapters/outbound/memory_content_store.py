"""In-memory Content Store implementation.

Keeps blobs in a dict keyed by their sha256 id. Used for tests, for the
``memory`` backend, and for embedding the store in a single process.

Thread Safety:
    All operations are serialized by one lock.
"""

from __future__ import annotations

import threading

from iptsdb.domain.exceptions import NotFoundError
from iptsdb.domain.value_objects import ContentId, content_id_for


class InMemoryContentStore:
    """Dict-backed implementation of the ContentStore protocol."""

    def __init__(self) -> None:
        self._blobs: dict[ContentId, bytes] = {}
        self._lock = threading.Lock()

    def put(self, data: bytes) -> ContentId:
        content_id = content_id_for(data)
        with self._lock:
            self._blobs[content_id] = bytes(data)
        return content_id

    def get(self, content_id: ContentId) -> bytes:
        with self._lock:
            try:
                return self._blobs[content_id]
            except KeyError:
                raise NotFoundError(f"No block stored under '{content_id}'") from None

    def delete(self, content_id: ContentId) -> None:
        with self._lock:
            if self._blobs.pop(content_id, None) is None:
                raise NotFoundError(f"No block stored under '{content_id}'")

    def ids(self) -> set[ContentId]:
        """Snapshot of every stored id."""
        with self._lock:
            return set(self._blobs)

    def __contains__(self, content_id: object) -> bool:
        with self._lock:
            return content_id in self._blobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._blobs)
