"""Table scanner: column projection with an optional row limit.

Columns are decoded in lockstep, one cursor per requested field, so a row is
only emitted once every requested column has supplied its value. Columns of
one table normally hold the same row count; when they do not, the scan stops
at the shortest one.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Any

from iptsdb.domain.exceptions import NotFoundError, TruncatedColumnError
from iptsdb.domain.services.column_codec import (
    EOF,
    ColumnCursor,
    decode_value,
    format_timestamp,
)
from iptsdb.domain.services.document_io import load_column, resolve_root
from iptsdb.domain.services.schema_store import SchemaStore
from iptsdb.domain.value_objects import (
    TIMESTAMP_FIELD,
    TIMESTAMP_HEADER,
    FieldType,
    TableKey,
    is_empty,
)
from iptsdb.infrastructure.logging import get_logger
from iptsdb.infrastructure.metrics import MetricsRegistry, get_metrics
from iptsdb.ports.inbound import ResultTable
from iptsdb.ports.outbound import ContentStore, NamingService

logger = get_logger(__name__)


def display_header(field_names: Sequence[str]) -> list[str]:
    """Column labels for output, with the timestamp column relabelled."""
    return [TIMESTAMP_HEADER if name == TIMESTAMP_FIELD else name for name in field_names]


class TableScanner:
    """Read-only access to table rows. Never writes to either backend."""

    def __init__(
        self,
        content_store: ContentStore,
        naming_service: NamingService,
        schema_store: SchemaStore | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._content_store = content_store
        self._naming_service = naming_service
        self._schema_store = schema_store or SchemaStore(content_store)
        self._metrics = metrics or get_metrics()

    def select(
        self,
        table_key: TableKey,
        fields: Sequence[str] = (),
        limit: int | None = None,
    ) -> ResultTable:
        """Project the requested fields of a table.

        Args:
            table_key: Table to read.
            fields: Fields to project in output order; empty selects every
                schema field in schema order.
            limit: Return only the most recent ``limit`` rows (still in
                insertion order). None or negative returns every row.

        Returns:
            The projected rows and their display header.

        Raises:
            NotFoundError: If the table is unresolvable or a requested column
                has never been written.
            MissingFieldError: If a requested field is not declared.
            TruncatedColumnError: If a column ends in the middle of a value.
        """
        started = time.perf_counter()
        root_id, root = resolve_root(self._content_store, self._naming_service, table_key)
        schema = self._schema_store.get_schema(root.schema_id)

        requested = list(fields) or schema.field_names
        types = [schema.field_type(name) for name in requested]

        cursors: list[ColumnCursor] = []
        for name in requested:
            head_id = root.column_head(name)
            if is_empty(head_id):
                raise NotFoundError(f"Column '{name}' of table '{table_key}' has no data")
            cursors.append(ColumnCursor(load_column(self._content_store, head_id).data))

        bounded = limit is not None and limit >= 0
        first_row = 0
        if bounded:
            available = min(cursor.remaining // t.width for cursor, t in zip(cursors, types))
            self._check_end(requested, types, cursors, available)
            first_row = max(0, available - limit)
            for cursor, field_type in zip(cursors, types):
                cursor.seek_row(first_row, field_type.width)

        rows: list[tuple[Any, ...]] = []
        while not bounded or len(rows) < limit:
            row = self._next_row(requested, types, cursors, first_row + len(rows))
            if row is None:
                break
            rows.append(row)

        self._metrics.rows_scanned_total.inc(len(rows))
        logger.debug(
            "table_scanned",
            table_key=table_key,
            root_id=root_id,
            fields=requested,
            limit=limit,
            rows=len(rows),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
        )
        return ResultTable(
            fields=requested,
            header=display_header(requested),
            rows=rows,
            root_id=root_id,
        )

    @staticmethod
    def _next_row(
        names: list[str],
        types: list[FieldType],
        cursors: list[ColumnCursor],
        row_index: int,
    ) -> tuple[Any, ...] | None:
        """Decode one value per column, or None at the end of the shortest column."""
        values = [decode_value(t, cursor) for t, cursor in zip(types, cursors)]
        if not any(value is EOF for value in values):
            return tuple(
                format_timestamp(value) if name == TIMESTAMP_FIELD else value
                for name, value in zip(names, values)
            )

        for name, field_type, cursor, value in zip(names, types, cursors, values):
            if value is EOF and 0 < cursor.remaining < field_type.width:
                raise TruncatedColumnError(name, row_index, cursor.remaining)
        return None

    @staticmethod
    def _check_end(
        names: list[str],
        types: list[FieldType],
        cursors: list[ColumnCursor],
        row_count: int,
    ) -> None:
        """Raise if a column ending at ``row_count`` holds a partial value there.

        Applies the unbounded scan's end-of-table rule to a limited scan, which
        stops on the row count before reaching the end.
        """
        for name, field_type, cursor in zip(names, types, cursors):
            full_rows, partial = divmod(cursor.remaining, field_type.width)
            if full_rows == row_count and partial:
                raise TruncatedColumnError(name, row_count, partial)
