"""Time-series database - unified entry point for table operations.

This module provides the TimeSeriesDatabase facade that wires the schema
store, root manager, and table scanner onto one content store and one
naming service, and implements the TableStore inbound port.

Usage:
    from iptsdb.application import TimeSeriesDatabase

    db = TimeSeriesDatabase.on_disk("/path/to/data")
    db.create_table("weather", {"_timestamp": "u64", "temp": "f32"})
    db.insert("weather", {"temp": 21.5})
    table = db.select("weather", ["_timestamp", "temp"], limit=10)
"""

from __future__ import annotations

import time
from collections.abc import Callable, Generator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from iptsdb.adapters.outbound import (
    FileContentStore,
    FileNamingService,
    InMemoryContentStore,
    InMemoryNamingService,
)
from iptsdb.domain.exceptions import IptsdbError
from iptsdb.domain.services import (
    RootDocumentManager,
    SchemaStore,
    TableScanner,
    TableSettings,
)
from iptsdb.domain.value_objects import ContentId, FieldType, TableKey
from iptsdb.infrastructure.logging import get_logger, table_context
from iptsdb.infrastructure.metrics import MetricsRegistry, get_metrics
from iptsdb.infrastructure.tracing import table_span
from iptsdb.ports.inbound import ResultTable
from iptsdb.ports.outbound import ContentStore, NamingService

logger = get_logger(__name__)


class TimeSeriesDatabase:
    """Facade implementing the TableStore protocol.

    Every operation is traced, counted by outcome, and timed. Domain errors
    propagate unchanged to the caller.

    Thread Safety:
        Selects may run alongside inserts. Inserts into the same table must
        be serialized by the caller.
    """

    def __init__(
        self,
        content_store: ContentStore,
        naming_service: NamingService,
        settings: TableSettings | None = None,
        metrics: MetricsRegistry | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the database over the given backends.

        Args:
            content_store: Backend for immutable blocks.
            naming_service: Backend for table pointers.
            settings: Publish deadline and ttl.
            metrics: Metrics registry (global registry if None).
            clock: Epoch-seconds source for synthesized timestamps.
        """
        self._content_store = content_store
        self._naming_service = naming_service
        self._metrics = metrics or get_metrics()

        self._schema_store = SchemaStore(content_store)
        self._root_manager = RootDocumentManager(
            content_store,
            naming_service,
            schema_store=self._schema_store,
            settings=settings,
            metrics=self._metrics,
            clock=clock,
        )
        self._scanner = TableScanner(
            content_store,
            naming_service,
            schema_store=self._schema_store,
            metrics=self._metrics,
        )

    @classmethod
    def in_memory(cls, **kwargs: Any) -> TimeSeriesDatabase:
        """Create a database whose state lives only in this process."""
        return cls(InMemoryContentStore(), InMemoryNamingService(), **kwargs)

    @classmethod
    def on_disk(cls, data_dir: str | Path, **kwargs: Any) -> TimeSeriesDatabase:
        """Create a database persisted under ``data_dir``."""
        return cls(FileContentStore(data_dir), FileNamingService(data_dir), **kwargs)

    @property
    def content_store(self) -> ContentStore:
        return self._content_store

    @property
    def naming_service(self) -> NamingService:
        return self._naming_service

    @property
    def root_manager(self) -> RootDocumentManager:
        return self._root_manager

    @property
    def schema_store(self) -> SchemaStore:
        return self._schema_store

    def create_table(
        self, table_key: TableKey, fields: Mapping[str, FieldType | str]
    ) -> ContentId:
        """Create a table and publish its empty root."""
        with self._observe("create", table_key, fields=len(fields)):
            return self._root_manager.create_table(table_key, fields)

    def insert(self, table_key: TableKey, record: Mapping[str, Any]) -> ContentId:
        """Append one record to a table."""
        with self._observe("insert", table_key, fields=len(record)):
            return self._root_manager.insert(table_key, record)

    def select(
        self,
        table_key: TableKey,
        fields: Sequence[str] = (),
        limit: int | None = None,
    ) -> ResultTable:
        """Read a projection of a table."""
        with self._observe("select", table_key, fields=len(fields), limit=limit) as span:
            result = self._scanner.select(table_key, fields, limit)
            span.set_attribute("iptsdb.rows", len(result))
            return result

    @contextmanager
    def _observe(
        self, operation: str, table_key: TableKey, **attributes: Any
    ) -> Generator[Any, None, None]:
        """Trace, time, and count one table operation."""
        started = time.perf_counter()
        with table_span(operation, table_key, **attributes) as span, table_context(
            operation, table_key
        ):
            try:
                yield span
            except IptsdbError as e:
                self._metrics.operations_total.labels(operation=operation, status="error").inc()
                span.record_exception(e)
                logger.debug(
                    "operation_failed",
                    error_type=type(e).__name__,
                    error=str(e),
                )
                raise
            else:
                self._metrics.operations_total.labels(operation=operation, status="success").inc()
            finally:
                self._metrics.operation_latency_seconds.labels(operation=operation).observe(
                    time.perf_counter() - started
                )
