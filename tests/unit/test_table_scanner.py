"""Unit tests for the table scanner."""

from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from iptsdb.adapters.outbound import InMemoryContentStore, InMemoryNamingService
from iptsdb.application import TimeSeriesDatabase
from iptsdb.domain.entities import ColumnBlock, RootDocument
from iptsdb.domain.exceptions import MissingFieldError, NotFoundError, TruncatedColumnError
from iptsdb.domain.services import SchemaStore, TableScanner
from iptsdb.domain.services.document_io import store_column, store_root
from iptsdb.domain.value_objects import TableKey
from iptsdb.infrastructure.metrics import MetricsRegistry

RAW = TableKey("raw")


@pytest.fixture
def scanner(
    content_store: InMemoryContentStore,
    naming_service: InMemoryNamingService,
    metrics_registry: MetricsRegistry,
) -> TableScanner:
    return TableScanner(content_store, naming_service, metrics=metrics_registry)


def publish_raw_table(
    content_store: InMemoryContentStore,
    naming_service: InMemoryNamingService,
    fields: dict[str, str],
    columns: dict[str, bytes],
) -> str:
    """Publish a table whose column buffers are given byte for byte."""
    schema_id = SchemaStore(content_store).create_schema(fields)
    heads = {name: store_column(content_store, ColumnBlock(data=data)) for name, data in columns.items()}
    root_id = store_root(content_store, RootDocument(schema_id, heads))
    naming_service.publish(RAW, root_id, "1h")
    return root_id


@pytest.fixture
def three_rows(database: TimeSeriesDatabase, weather: TableKey) -> TableKey:
    """The weather table after three inserts (timestamps advance by 1 s)."""
    for temp in (20.0, 21.5, 23.0):
        database.insert(weather, {"temp": temp})
    return weather


@pytest.mark.unit
class TestSelect:
    """Tests for TableScanner.select."""

    def test_all_fields_by_default(self, scanner: TableScanner, three_rows: TableKey) -> None:
        result = scanner.select(three_rows)

        assert result.fields == ["_timestamp", "temp"]
        assert result.header == ["timestamp (UTC)", "temp"]
        assert result.rows == [
            ("2023-11-14 22:13:20", 20.0),
            ("2023-11-14 22:13:21", 21.5),
            ("2023-11-14 22:13:22", 23.0),
        ]

    def test_projection_order(self, scanner: TableScanner, three_rows: TableKey) -> None:
        result = scanner.select(three_rows, ["temp", "_timestamp"])
        assert result.header == ["temp", "timestamp (UTC)"]
        assert result.rows[0] == (20.0, "2023-11-14 22:13:20")

    def test_result_carries_root_id(
        self,
        scanner: TableScanner,
        three_rows: TableKey,
        naming_service: InMemoryNamingService,
    ) -> None:
        assert scanner.select(three_rows).root_id == naming_service.resolve(three_rows)

    def test_native_integer_values(
        self,
        scanner: TableScanner,
        content_store: InMemoryContentStore,
        naming_service: InMemoryNamingService,
    ) -> None:
        publish_raw_table(
            content_store,
            naming_service,
            {"level": "i16", "count": "u8"},
            {"level": b"\xff\xff\x02\x00", "count": b"\x07\x08"},
        )
        result = scanner.select(RAW)
        assert result.rows == [(-1, 7), (2, 8)]
        assert result.as_dicts() == [{"level": -1, "count": 7}, {"level": 2, "count": 8}]

    def test_undeclared_field(self, scanner: TableScanner, three_rows: TableKey) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            scanner.select(three_rows, ["temp", "wind"])
        assert exc_info.value.field_name == "wind"

    def test_unknown_table(self, scanner: TableScanner) -> None:
        with pytest.raises(NotFoundError):
            scanner.select(TableKey("nope"))

    def test_empty_table_has_no_columns(self, scanner: TableScanner, weather: TableKey) -> None:
        with pytest.raises(NotFoundError, match="no data"):
            scanner.select(weather, ["temp"])

    def test_rows_scanned_metric(
        self,
        scanner: TableScanner,
        three_rows: TableKey,
        collector_registry: CollectorRegistry,
    ) -> None:
        scanner.select(three_rows)
        scanner.select(three_rows, limit=1)
        assert collector_registry.get_sample_value("iptsdb_rows_scanned_total") == 4


@pytest.mark.unit
class TestSelectLimit:
    """Tests for the row limit (most recent rows, insertion order)."""

    def test_limit_one_is_latest_row(self, scanner: TableScanner, three_rows: TableKey) -> None:
        result = scanner.select(three_rows, ["temp"], limit=1)
        assert result.rows == [(23.0,)]

    def test_limit_keeps_insertion_order(self, scanner: TableScanner, three_rows: TableKey) -> None:
        result = scanner.select(three_rows, ["temp"], limit=2)
        assert result.column("temp") == [21.5, 23.0]

    def test_limit_zero(self, scanner: TableScanner, three_rows: TableKey) -> None:
        assert len(scanner.select(three_rows, limit=0)) == 0

    @pytest.mark.parametrize("limit", [None, -1, 3, 100])
    def test_unbounded_or_large_limit(
        self, scanner: TableScanner, three_rows: TableKey, limit: int | None
    ) -> None:
        assert len(scanner.select(three_rows, limit=limit)) == 3


@pytest.mark.unit
class TestUnevenColumns:
    """Tests for columns of different lengths and partial values."""

    def test_stops_at_shortest_column(
        self,
        scanner: TableScanner,
        content_store: InMemoryContentStore,
        naming_service: InMemoryNamingService,
    ) -> None:
        publish_raw_table(
            content_store,
            naming_service,
            {"a": "u16", "b": "u8"},
            {"a": b"\x01\x00\x02\x00\x03\x00", "b": b"\x0a\x0b"},
        )
        assert scanner.select(RAW).rows == [(1, 10), (2, 11)]
        assert scanner.select(RAW, ["a"]).column("a") == [1, 2, 3]

    def test_limit_counts_from_shortest_column(
        self,
        scanner: TableScanner,
        content_store: InMemoryContentStore,
        naming_service: InMemoryNamingService,
    ) -> None:
        publish_raw_table(
            content_store,
            naming_service,
            {"a": "u16", "b": "u8"},
            {"a": b"\x01\x00\x02\x00\x03\x00", "b": b"\x0a\x0b"},
        )
        assert scanner.select(RAW, limit=1).rows == [(2, 11)]

    def test_partial_trailing_value(
        self,
        scanner: TableScanner,
        content_store: InMemoryContentStore,
        naming_service: InMemoryNamingService,
    ) -> None:
        publish_raw_table(
            content_store,
            naming_service,
            {"a": "u16", "b": "u16"},
            {"a": b"\x01\x00\x02\x00\x03", "b": b"\x01\x00\x02\x00\x03\x00"},
        )
        with pytest.raises(TruncatedColumnError) as exc_info:
            scanner.select(RAW)
        assert exc_info.value.field_name == "a"
        assert exc_info.value.row == 2
        assert exc_info.value.remaining == 1

    def test_partial_value_beyond_shortest_column_is_unread(
        self,
        scanner: TableScanner,
        content_store: InMemoryContentStore,
        naming_service: InMemoryNamingService,
    ) -> None:
        publish_raw_table(
            content_store,
            naming_service,
            {"a": "u16", "b": "u16"},
            {"a": b"\x01\x00\x02\x00\x03", "b": b"\x01\x00"},
        )
        assert scanner.select(RAW).rows == [(1, 1)]

    @pytest.mark.parametrize("limit", [None, 1, 2, 5])
    def test_partial_trailing_value_with_limit(
        self,
        scanner: TableScanner,
        content_store: InMemoryContentStore,
        naming_service: InMemoryNamingService,
        limit: int | None,
    ) -> None:
        """A limit that covers the last row still sees the partial value after it."""
        publish_raw_table(
            content_store,
            naming_service,
            {"a": "u32"},
            {"a": b"\x01\x00\x00\x00\x02\x00\x00\x00\xff\xff"},
        )
        with pytest.raises(TruncatedColumnError) as exc_info:
            scanner.select(RAW, limit=limit)
        assert exc_info.value.field_name == "a"
        assert exc_info.value.row == 2
        assert exc_info.value.remaining == 2


@pytest.mark.unit
class TestTimestampRendering:
    """Tests for the timestamp column in results."""

    def test_relabelled_and_formatted(
        self, scanner: TableScanner, three_rows: TableKey
    ) -> None:
        result = scanner.select(three_rows, ["_timestamp"], limit=1)

        assert result.header == ["timestamp (UTC)"]
        assert result.rows == [("2023-11-14 22:13:22",)]

    def test_out_of_calendar_value_is_shown_raw(
        self,
        scanner: TableScanner,
        content_store: InMemoryContentStore,
        naming_service: InMemoryNamingService,
    ) -> None:
        millis = 1_700_000_000_000
        publish_raw_table(
            content_store,
            naming_service,
            {"_timestamp": "u64", "temp": "f32"},
            {"_timestamp": millis.to_bytes(8, "little"), "temp": b"\x00\x00\x80\x3f"},
        )
        assert scanner.select(RAW).rows == [("1700000000000", 1.0)]
