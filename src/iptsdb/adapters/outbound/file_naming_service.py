"""File-based Naming Service implementation.

Each table key maps to one small JSON file under ``<data_dir>/names``:

    {"content_id": "<root id>", "ttl": "12h", "published_at": 1700000000.0}

The file name is the percent-encoded key, so any key string is safe to use.
A publish replaces the file atomically, which makes it the single commit
point of every table update.
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from urllib.parse import quote, unquote

from iptsdb.adapters.outbound.atomic_file import write_atomic
from iptsdb.adapters.outbound.memory_naming_service import NameRecord
from iptsdb.domain.exceptions import NotFoundError, StoreUnavailableError
from iptsdb.domain.value_objects import ContentId, TableKey

NAMES_DIR = "names"


class FileNamingService:
    """Directory-backed implementation of the NamingService protocol.

    The ttl is stored with the pointer but not enforced.
    """

    def __init__(self, data_dir: str | Path) -> None:
        """Initialize the service, creating its directory if needed.

        Raises:
            StoreUnavailableError: If the directory cannot be created.
        """
        self._root = Path(data_dir) / NAMES_DIR
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot create names directory {self._root}: {e}") from e

    def resolve(self, table_key: TableKey) -> ContentId:
        return self.record(table_key).content_id

    def publish(self, table_key: TableKey, content_id: ContentId, ttl: str) -> None:
        document = {"content_id": content_id, "ttl": ttl, "published_at": time.time()}
        try:
            write_atomic(self._path_for(table_key), json.dumps(document).encode("utf-8"))
        except OSError as e:
            raise StoreUnavailableError(f"Cannot publish '{table_key}': {e}") from e

    def record(self, table_key: TableKey) -> NameRecord:
        """Read the full published record of a key.

        Raises:
            NotFoundError: If nothing was published under the key or the
                record is unreadable.
            StoreUnavailableError: If the file cannot be read.
        """
        path = self._path_for(table_key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            raise NotFoundError(f"No root published under '{table_key}'") from None
        except OSError as e:
            raise StoreUnavailableError(f"Cannot resolve '{table_key}': {e}") from e

        try:
            document = json.loads(raw)
            return NameRecord(
                content_id=ContentId(document["content_id"]),
                ttl=str(document.get("ttl", "")),
                published_at=float(document.get("published_at", 0.0)),
            )
        except (ValueError, TypeError, KeyError) as e:
            raise NotFoundError(f"Name record for '{table_key}' is unreadable: {e}") from e

    def keys(self) -> list[TableKey]:
        """Every key with a published pointer, sorted."""
        return sorted(TableKey(unquote(path.stem)) for path in self._root.glob("*.json"))

    def _path_for(self, table_key: TableKey) -> Path:
        if not table_key:
            raise ValueError("Table key must be a non-empty string")
        return self._root / f"{quote(table_key, safe='')}.json"
