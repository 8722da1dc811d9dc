"""Root document entity.

The root document is the whole committed state of a table: the schema id and
the head column block of every field. The naming service points at exactly
one root per table; an update never edits a root, it writes a new one and
moves the pointer.

Persisted form (JSON):

    {"schema": "<content id>", "columns": {"temp": "<content id or empty>"}}
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from iptsdb.domain.value_objects import EMPTY_CONTENT_ID, ContentId, is_empty

SCHEMA_KEY = "schema"
COLUMNS_KEY = "columns"


@dataclass(frozen=True)
class RootDocument:
    """Immutable table state: schema id plus per-field column heads.

    Attributes:
        schema_id: Content id of the table's schema document.
        columns: Field name -> head column block id (EMPTY_CONTENT_ID when
            nothing has been written for that field yet).
    """

    schema_id: ContentId
    columns: dict[str, ContentId]

    @classmethod
    def empty(cls, schema_id: ContentId, field_names: Iterable[str]) -> RootDocument:
        """Create the root of a freshly created table (no column data)."""
        return cls(schema_id=schema_id, columns={name: EMPTY_CONTENT_ID for name in field_names})

    def column_head(self, field_name: str) -> ContentId:
        """Return the head block id of a field, EMPTY_CONTENT_ID if unknown."""
        return self.columns.get(field_name, EMPTY_CONTENT_ID)

    def referenced_blocks(self) -> list[ContentId]:
        """Non-empty column block ids referenced by this root."""
        return [block_id for block_id in self.columns.values() if not is_empty(block_id)]

    def with_columns(self, columns: Mapping[str, ContentId]) -> RootDocument:
        """Return a new root for the same schema with replaced column heads."""
        return RootDocument(schema_id=self.schema_id, columns=dict(columns))

    def to_bytes(self) -> bytes:
        """Serialize to canonical JSON bytes."""
        document = {SCHEMA_KEY: self.schema_id, COLUMNS_KEY: dict(self.columns)}
        return json.dumps(document, separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> RootDocument:
        """Deserialize from stored JSON bytes.

        Raises:
            ValueError: If the bytes are not a root document.
        """
        try:
            document = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValueError(f"Root document is not valid JSON: {e}") from e

        if not isinstance(document, Mapping):
            raise ValueError("Root document must be a JSON object")
        schema_id = document.get(SCHEMA_KEY)
        columns = document.get(COLUMNS_KEY)
        if not isinstance(schema_id, str) or not schema_id:
            raise ValueError(f"Root document requires a non-empty '{SCHEMA_KEY}' id")
        if not isinstance(columns, Mapping) or not all(
            isinstance(value, str) for value in columns.values()
        ):
            raise ValueError(f"Root document requires a '{COLUMNS_KEY}' object of ids")

        return cls(
            schema_id=ContentId(schema_id),
            columns={name: ContentId(block_id) for name, block_id in columns.items()},
        )
