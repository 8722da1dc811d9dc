"""Root Document Manager: table creation and the insert commit protocol.

This module owns every write to a table. An insert never modifies a stored
block; it builds a complete new generation of column blocks and a new root,
then makes that generation visible with one naming-service publish.

Insert protocol:
    1. Resolve the table key to the current root, fetch its schema.
    2. Fill in ``_timestamp`` from the clock when the record lacks it.
    3. Encode one value per schema field (schema order); append each to the
       field's existing buffer and store the result as a new block.
    4. Store the new root referencing the new blocks.
    5. Publish the new root id, bounded by a deadline.
       - success: delete the old root and its column blocks (best-effort)
       - timeout/failure: delete nothing; the old root stays authoritative

Readers only ever follow the published pointer, and every block the new root
references is stored before the pointer moves, so a reader sees either the
whole old table or the whole new one.

Limitations:
    There is no lease or compare-and-swap on the pointer. Two concurrent
    inserts into one table can read the same old root; the later publish
    wins, and its garbage collection may delete blocks the other writer's
    root still references.

    Blocks are content-addressed and not reference counted, so tables can
    share them: two tables created with the same schema point at the same
    empty root, and identical column buffers are one block. Garbage
    collection only spares ids the new root of the table being written
    references. The first insert into one table therefore deletes the empty
    root of a still-empty twin, whose next insert fails with NotFoundError
    until it is re-created.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from iptsdb.domain.entities import ColumnBlock, RootDocument, SchemaDocument
from iptsdb.domain.exceptions import (
    IptsdbError,
    MissingFieldError,
    PublishTimeoutError,
    StoreUnavailableError,
)
from iptsdb.domain.services.column_codec import check_timestamp, encode_value
from iptsdb.domain.services.document_io import (
    load_column,
    resolve_root,
    store_column,
    store_root,
)
from iptsdb.domain.services.schema_store import SchemaStore
from iptsdb.domain.value_objects import (
    TIMESTAMP_FIELD,
    ContentId,
    FieldType,
    TableKey,
    is_empty,
)
from iptsdb.infrastructure.config import (
    DEFAULT_PUBLISH_TIMEOUT_SECONDS,
    DEFAULT_RECORD_TTL,
    Config,
)
from iptsdb.infrastructure.logging import get_logger
from iptsdb.infrastructure.metrics import MetricsRegistry, get_metrics
from iptsdb.ports.outbound import ContentStore, NamingService

logger = get_logger(__name__)


@dataclass(frozen=True)
class TableSettings:
    """Per-operation commit settings.

    Attributes:
        publish_timeout_seconds: Deadline for the naming-service publish.
        record_ttl: Lifetime hint sent with every published pointer.
    """

    publish_timeout_seconds: float = DEFAULT_PUBLISH_TIMEOUT_SECONDS
    record_ttl: str = DEFAULT_RECORD_TTL

    def __post_init__(self) -> None:
        if self.publish_timeout_seconds <= 0:
            raise ValueError(
                f"publish_timeout_seconds must be positive, got {self.publish_timeout_seconds}"
            )

    @classmethod
    def from_config(cls, config: Config) -> TableSettings:
        """Derive settings from the application configuration."""
        return cls(
            publish_timeout_seconds=config.naming.publish_timeout_seconds,
            record_ttl=config.naming.record_ttl,
        )


@dataclass(frozen=True)
class GarbageReport:
    """Outcome of deleting superseded blocks after a publish."""

    deleted: list[ContentId]
    failed: list[ContentId]
    kept: list[ContentId]


class RootDocumentManager:
    """Sole writer of root documents.

    Thread Safety:
        Safe to share between threads for different tables. Inserts into the
        same table must be serialized by the caller (see module docstring).
    """

    def __init__(
        self,
        content_store: ContentStore,
        naming_service: NamingService,
        schema_store: SchemaStore | None = None,
        settings: TableSettings | None = None,
        metrics: MetricsRegistry | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the root manager.

        Args:
            content_store: Backend for schema, root, and column blocks.
            naming_service: Backend for table pointers.
            schema_store: Schema access (built on content_store if None).
            settings: Publish deadline and ttl (defaults if None).
            metrics: Metrics registry (global registry if None).
            clock: Source of epoch seconds for synthesized timestamps.
        """
        self._content_store = content_store
        self._naming_service = naming_service
        self._schema_store = schema_store or SchemaStore(content_store)
        self._settings = settings or TableSettings()
        self._metrics = metrics or get_metrics()
        self._clock = clock
        self.last_gc: GarbageReport | None = None

    @property
    def settings(self) -> TableSettings:
        """Active commit settings."""
        return self._settings

    def create_table(
        self, table_key: TableKey, fields: Mapping[str, FieldType | str]
    ) -> ContentId:
        """Store a schema and an all-empty root, then publish the root.

        Publishing over an existing key replaces that table; its blocks are
        left in the content store.

        Raises:
            InvalidSchemaError: If the field declarations are invalid.
            StoreUnavailableError: If a backend call fails.
            PublishTimeoutError: If publishing exceeds its deadline.
        """
        field_names = SchemaDocument.from_fields(fields).field_names
        schema_id = self._schema_store.create_schema(fields)
        root = RootDocument.empty(schema_id, field_names)
        root_id = store_root(self._content_store, root)

        self._publish(table_key, root_id)
        logger.info(
            "table_created",
            table_key=table_key,
            schema_id=schema_id,
            root_id=root_id,
            fields=field_names,
        )
        return root_id

    def insert(self, table_key: TableKey, record: Mapping[str, Any]) -> ContentId:
        """Append one record and commit it as a new published root.

        Returns:
            Id of the newly published root.

        Raises:
            NotFoundError: If the table, its root, schema, or a block is unresolvable.
            MissingFieldError: If the record lacks a declared field.
            TypeMismatchError: If a value does not fit its declared type.
            StoreUnavailableError: If a backend call fails.
            PublishTimeoutError: If publishing exceeds its deadline.
        """
        started = time.perf_counter()
        old_root_id, old_root = resolve_root(self._content_store, self._naming_service, table_key)
        schema = self._schema_store.get_schema(old_root.schema_id)

        encoded = self._encode_record(schema, record)

        new_columns: dict[str, ContentId] = {}
        bytes_written = 0
        for field_name, value_bytes in encoded.items():
            head_id = old_root.column_head(field_name)
            if is_empty(head_id):
                block = ColumnBlock.empty()
            else:
                block = load_column(self._content_store, head_id)

            new_block = block.append(value_bytes)
            new_columns[field_name] = store_column(self._content_store, new_block)
            bytes_written += len(new_block)
            logger.debug(
                "column_appended",
                table_key=table_key,
                field=field_name,
                field_type=schema.fields[field_name].value,
                previous_block=head_id,
                block_id=new_columns[field_name],
                size=len(new_block),
            )
        self._metrics.column_bytes_written_total.inc(bytes_written)

        new_root = old_root.with_columns(new_columns)
        new_root_id = store_root(self._content_store, new_root)

        self._publish(table_key, new_root_id)
        logger.info(
            "root_published",
            table_key=table_key,
            old_root_id=old_root_id,
            root_id=new_root_id,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
        )

        self.last_gc = self._collect_garbage(old_root_id, old_root, new_root_id, new_root)
        logger.debug(
            "gc_done",
            table_key=table_key,
            deleted=len(self.last_gc.deleted),
            failed=len(self.last_gc.failed),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 3),
        )
        return new_root_id

    def _encode_record(
        self, schema: SchemaDocument, record: Mapping[str, Any]
    ) -> dict[str, bytes]:
        """Encode one value per schema field, in schema order."""
        values = dict(record)
        if schema.has_timestamp and TIMESTAMP_FIELD not in values:
            values[TIMESTAMP_FIELD] = int(self._clock())

        undeclared = [name for name in values if name not in schema.fields]
        if undeclared:
            logger.warning("undeclared_fields_ignored", fields=undeclared)

        encoded: dict[str, bytes] = {}
        for field_name, field_type in schema.fields.items():
            if field_name not in values:
                raise MissingFieldError(field_name, f"Record has no value for field '{field_name}'")
            encoded[field_name] = encode_value(field_type, values[field_name])
            if field_name == TIMESTAMP_FIELD:
                check_timestamp(values[field_name])
        return encoded

    def _publish(self, table_key: TableKey, root_id: ContentId) -> None:
        """Publish a root id, waiting at most the configured deadline.

        The call runs on a daemon worker thread. On timeout the worker is
        abandoned; if it completes later the pointer still moves, and the
        blocks it replaced are left for an external sweep.
        """
        outcome: dict[str, Exception] = {}

        def run() -> None:
            try:
                self._naming_service.publish(table_key, root_id, self._settings.record_ttl)
            except Exception as e:  # handed back to the caller below
                outcome["error"] = e

        started = time.perf_counter()
        worker = threading.Thread(target=run, name=f"iptsdb-publish-{table_key}", daemon=True)
        worker.start()
        worker.join(self._settings.publish_timeout_seconds)
        self._metrics.publish_latency_seconds.observe(time.perf_counter() - started)

        if worker.is_alive():
            self._metrics.publish_timeouts_total.inc()
            logger.error(
                "publish_timed_out",
                table_key=table_key,
                root_id=root_id,
                timeout_seconds=self._settings.publish_timeout_seconds,
            )
            raise PublishTimeoutError(
                f"Publishing {root_id} under '{table_key}' exceeded "
                f"{self._settings.publish_timeout_seconds}s"
            )

        error = outcome.get("error")
        if error is None:
            return
        logger.error("publish_failed", table_key=table_key, root_id=root_id, error=str(error))
        if isinstance(error, IptsdbError):
            raise error
        if isinstance(error, TimeoutError):
            raise PublishTimeoutError(f"Publishing {root_id} under '{table_key}' timed out") from error
        if isinstance(error, OSError):
            raise StoreUnavailableError(f"Publishing {root_id} under '{table_key}' failed: {error}") from error
        raise error

    def _collect_garbage(
        self,
        old_root_id: ContentId,
        old_root: RootDocument,
        new_root_id: ContentId,
        new_root: RootDocument,
    ) -> GarbageReport:
        """Delete the superseded root and its column blocks.

        Blocks the new root still references are kept. Failures are logged
        and counted, never raised: nothing published points at these blocks.
        """
        live = {new_root_id, new_root.schema_id, *new_root.referenced_blocks()}
        deleted: list[ContentId] = []
        failed: list[ContentId] = []
        kept: list[ContentId] = []

        for block_id in dict.fromkeys([old_root_id, *old_root.referenced_blocks()]):
            if block_id in live:
                kept.append(block_id)
                continue
            try:
                self._content_store.delete(block_id)
            except (IptsdbError, OSError) as e:
                failed.append(block_id)
                self._metrics.gc_delete_failures_total.inc()
                logger.warning("gc_delete_failed", block_id=block_id, error=str(e))
            else:
                deleted.append(block_id)
                self._metrics.gc_blocks_deleted_total.inc()

        return GarbageReport(deleted=deleted, failed=failed, kept=kept)
