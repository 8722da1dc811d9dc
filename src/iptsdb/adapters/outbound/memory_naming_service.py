"""In-memory Naming Service implementation."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass

from iptsdb.domain.exceptions import NotFoundError
from iptsdb.domain.value_objects import ContentId, TableKey


@dataclass(frozen=True)
class NameRecord:
    """A published pointer.

    Attributes:
        content_id: Root document id the key points at.
        ttl: Lifetime hint given at publish time.
        published_at: Unix time of the publish.
    """

    content_id: ContentId
    ttl: str
    published_at: float


class InMemoryNamingService:
    """Dict-backed implementation of the NamingService protocol.

    The ttl is recorded but not enforced; records never expire.
    """

    def __init__(self) -> None:
        self._records: dict[TableKey, NameRecord] = {}
        self._lock = threading.Lock()
        self.publish_count = 0

    def resolve(self, table_key: TableKey) -> ContentId:
        with self._lock:
            record = self._records.get(table_key)
        if record is None:
            raise NotFoundError(f"No root published under '{table_key}'")
        return record.content_id

    def publish(self, table_key: TableKey, content_id: ContentId, ttl: str) -> None:
        with self._lock:
            self._records[table_key] = NameRecord(content_id, ttl, time.time())
            self.publish_count += 1

    def record(self, table_key: TableKey) -> NameRecord | None:
        """The full published record of a key, if any."""
        with self._lock:
            return self._records.get(table_key)

    def keys(self) -> list[TableKey]:
        """Every key with a published pointer."""
        with self._lock:
            return list(self._records)
