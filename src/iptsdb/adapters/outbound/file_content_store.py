"""File-based Content Store implementation.

Blobs live under ``<data_dir>/blocks``, fanned out by the first two hex
characters of their id:

    <data_dir>/blocks/ab/ab3f...e1

Since ids are content hashes, writing an id that already exists rewrites
identical bytes and is harmless.

Thread Safety:
    Every write is an atomic rename, so concurrent puts and gets never see a
    partial blob. Deleting a blob while another thread reads it may make
    that read fail with NotFoundError.
"""

from __future__ import annotations

import re
from pathlib import Path

from iptsdb.adapters.outbound.atomic_file import write_atomic
from iptsdb.domain.exceptions import NotFoundError, StoreUnavailableError
from iptsdb.domain.value_objects import ContentId, content_id_for
from iptsdb.infrastructure.logging import get_logger

logger = get_logger(__name__)

BLOCKS_DIR = "blocks"
_CONTENT_ID_PATTERN = re.compile(r"^[0-9a-f]{64}$")


class FileContentStore:
    """Directory-backed implementation of the ContentStore protocol.

    Attributes:
        root: Directory holding the block fan-out.
    """

    def __init__(self, data_dir: str | Path) -> None:
        """Initialize the store, creating its directory if needed.

        Args:
            data_dir: Base data directory shared with the naming service.

        Raises:
            StoreUnavailableError: If the directory cannot be created.
        """
        self._root = Path(data_dir) / BLOCKS_DIR
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot create block directory {self._root}: {e}") from e

    @property
    def root(self) -> Path:
        return self._root

    def put(self, data: bytes) -> ContentId:
        content_id = content_id_for(data)
        path = self._path_for(content_id)
        if path.exists():
            return content_id
        try:
            write_atomic(path, data)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot write block {content_id}: {e}") from e
        logger.debug("block_written", content_id=content_id, size=len(data))
        return content_id

    def get(self, content_id: ContentId) -> bytes:
        path = self._checked_path(content_id)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise NotFoundError(f"No block stored under '{content_id}'") from None
        except OSError as e:
            raise StoreUnavailableError(f"Cannot read block {content_id}: {e}") from e

    def delete(self, content_id: ContentId) -> None:
        path = self._checked_path(content_id)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFoundError(f"No block stored under '{content_id}'") from None
        except OSError as e:
            raise StoreUnavailableError(f"Cannot delete block {content_id}: {e}") from e
        logger.debug("block_deleted", content_id=content_id)

    def _checked_path(self, content_id: ContentId) -> Path:
        """Path of a well-formed id; anything else cannot be stored here."""
        if not isinstance(content_id, str) or not _CONTENT_ID_PATTERN.match(content_id):
            raise NotFoundError(f"'{content_id}' is not a block id")
        return self._path_for(content_id)

    def _path_for(self, content_id: ContentId) -> Path:
        return self._root / content_id[:2] / content_id
