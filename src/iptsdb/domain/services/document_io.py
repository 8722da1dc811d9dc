"""Typed reads and writes of documents through the outbound ports.

Shared by the schema store, the root manager, and the table scanner so that
all of them resolve tables and decode blocks the same way.
"""

from __future__ import annotations

from iptsdb.domain.entities import ColumnBlock, RootDocument
from iptsdb.domain.exceptions import NotFoundError
from iptsdb.domain.value_objects import ContentId, TableKey
from iptsdb.ports.outbound import ContentStore, NamingService


def resolve_root(
    content_store: ContentStore,
    naming_service: NamingService,
    table_key: TableKey,
) -> tuple[ContentId, RootDocument]:
    """Resolve a table key to its current root id and document.

    Raises:
        NotFoundError: If the key was never published or the root is unreadable.
    """
    root_id = naming_service.resolve(table_key)
    return root_id, load_root(content_store, root_id)


def load_root(content_store: ContentStore, root_id: ContentId) -> RootDocument:
    """Fetch and decode a root document.

    Raises:
        NotFoundError: If the id is unknown or does not hold a root document.
    """
    data = content_store.get(root_id)
    try:
        return RootDocument.from_bytes(data)
    except ValueError as e:
        raise NotFoundError(f"Block {root_id} does not hold a root document: {e}") from e


def load_column(content_store: ContentStore, block_id: ContentId) -> ColumnBlock:
    """Fetch and decode a column block.

    Raises:
        NotFoundError: If the id is unknown or does not hold a column block.
    """
    data = content_store.get(block_id)
    try:
        return ColumnBlock.from_bytes(data)
    except ValueError as e:
        raise NotFoundError(f"Block {block_id} does not hold a column block: {e}") from e


def store_root(content_store: ContentStore, root: RootDocument) -> ContentId:
    """Write a root document and return its id."""
    return content_store.put(root.to_bytes())


def store_column(content_store: ContentStore, block: ColumnBlock) -> ContentId:
    """Write a column block and return its id."""
    return content_store.put(block.to_bytes())
