"""Table Store port - the public API of the time-series store.

This inbound port defines what clients (CLI, REST API, embedding code) can
do with a table: create it from a schema, append one record at a time, and
read back a projection of its columns.

Key concepts:
- A table is addressed by its naming-service key
- Every successful create/insert returns the id of the newly published root
- Reads never block writers and never see a half-applied insert
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from iptsdb.domain.value_objects import ContentId, FieldType, TableKey


@dataclass
class ResultTable:
    """Rows produced by a select, in insertion order.

    Attributes:
        fields: Requested field names, in column order.
        header: Display labels, with the timestamp column relabelled.
        rows: One tuple per row; timestamps are UTC strings, all other
            values are native ints or floats.
        root_id: Root document the rows were read from.
    """

    fields: list[str]
    header: list[str]
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    root_id: ContentId | None = None

    def __len__(self) -> int:
        return len(self.rows)

    def as_dicts(self) -> list[dict[str, Any]]:
        """Rows keyed by field name."""
        return [dict(zip(self.fields, row)) for row in self.rows]

    def column(self, field_name: str) -> list[Any]:
        """All values of one requested field."""
        index = self.fields.index(field_name)
        return [row[index] for row in self.rows]


class TableStore(Protocol):
    """Protocol for table-level operations.

    Thread Safety:
        Readers may run concurrently with one writer per table. Concurrent
        inserts into the same table are NOT coordinated: both may read the
        same root, the later publish wins, and its garbage collection can
        delete blocks the other writer's root still references.

    Example:
        store.create_table(TableKey("weather"), {"_timestamp": "u64", "temp": "f32"})
        store.insert(TableKey("weather"), {"temp": 21.5})
        table = store.select(TableKey("weather"), ["_timestamp", "temp"], limit=10)
    """

    @abstractmethod
    def create_table(
        self, table_key: TableKey, fields: Mapping[str, FieldType | str]
    ) -> ContentId:
        """Create a table and publish its empty root.

        Returns:
            The published root id.

        Raises:
            InvalidSchemaError: If the field declarations are invalid.
            StoreUnavailableError: If a backend call fails.
            PublishTimeoutError: If publishing exceeds its deadline.
        """
        ...

    @abstractmethod
    def insert(self, table_key: TableKey, record: Mapping[str, Any]) -> ContentId:
        """Append one record to every column of a table.

        Returns:
            The published root id.

        Raises:
            NotFoundError: If the table or one of its blocks cannot be resolved.
            MissingFieldError: If the record lacks a declared field.
            TypeMismatchError: If a value does not fit its declared type.
            StoreUnavailableError: If a backend call fails.
            PublishTimeoutError: If publishing exceeds its deadline.
        """
        ...

    @abstractmethod
    def select(
        self,
        table_key: TableKey,
        fields: Sequence[str] = (),
        limit: int | None = None,
    ) -> ResultTable:
        """Read a projection of a table.

        Args:
            table_key: Table to read.
            fields: Fields to project; empty selects every field.
            limit: Return at most this many of the most recent rows;
                None or negative returns all rows.

        Raises:
            NotFoundError: If the table or a column cannot be resolved.
            MissingFieldError: If a requested field is not declared.
            TruncatedColumnError: If a column ends mid-value.
            StoreUnavailableError: If a backend call fails.
        """
        ...
