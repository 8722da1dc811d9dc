"""Pytest configuration and fixtures for iptsdb tests."""

from __future__ import annotations

import tempfile
import threading
from pathlib import Path
from typing import Generator

import pytest
import structlog
from prometheus_client import CollectorRegistry

from iptsdb.adapters.outbound import InMemoryContentStore, InMemoryNamingService
from iptsdb.application import TimeSeriesDatabase
from iptsdb.domain.exceptions import StoreUnavailableError
from iptsdb.domain.services import TableSettings
from iptsdb.domain.value_objects import ContentId, TableKey
from iptsdb.infrastructure.config import Config, StorageConfig
from iptsdb.infrastructure.container import Container
from iptsdb.infrastructure.metrics import MetricsRegistry

EPOCH_START = 1_700_000_000  # 2023-11-14 22:13:20 UTC


class AdvancingClock:
    """Deterministic clock: returns start, start+step, start+2*step, ..."""

    def __init__(self, start: float = EPOCH_START, step: float = 1.0) -> None:
        self._next = start
        self._step = step

    def __call__(self) -> float:
        now = self._next
        self._next += self._step
        return now


class BlockingNamingService(InMemoryNamingService):
    """Naming service whose publish hangs while ``blocked`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.blocked = False
        self.release = threading.Event()

    def publish(self, table_key: TableKey, content_id: ContentId, ttl: str) -> None:
        if self.blocked:
            self.release.wait(timeout=10)
            return
        super().publish(table_key, content_id, ttl)


class FailingNamingService(InMemoryNamingService):
    """Naming service whose publish raises ``error`` once ``failing`` is set."""

    def __init__(self, error: Exception | None = None) -> None:
        super().__init__()
        self.failing = False
        self.error = error or ConnectionRefusedError("naming service unreachable")

    def publish(self, table_key: TableKey, content_id: ContentId, ttl: str) -> None:
        if self.failing:
            raise self.error
        super().publish(table_key, content_id, ttl)


class UndeletableContentStore(InMemoryContentStore):
    """Content store whose deletes always fail."""

    def delete(self, content_id: ContentId) -> None:
        raise StoreUnavailableError(f"cannot delete {content_id}")


@pytest.fixture(autouse=True)
def _reset_structlog() -> Generator[None, None, None]:
    """Undo any global structlog configuration a test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration rooted in a temporary directory."""
    return Config(storage=StorageConfig(backend="file", data_dir=temp_dir / "data"))


@pytest.fixture
def container() -> Generator[Container, None, None]:
    """Provide a fresh DI container for each test."""
    c = Container()
    yield c
    c.clear()


@pytest.fixture
def collector_registry() -> CollectorRegistry:
    """Provide an isolated Prometheus registry."""
    return CollectorRegistry(auto_describe=True)


@pytest.fixture
def metrics_registry(collector_registry: CollectorRegistry) -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    return MetricsRegistry(registry=collector_registry)


@pytest.fixture
def clock() -> AdvancingClock:
    return AdvancingClock()


@pytest.fixture
def settings() -> TableSettings:
    return TableSettings(publish_timeout_seconds=2.0, record_ttl="1h")


@pytest.fixture
def content_store() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture
def naming_service() -> InMemoryNamingService:
    return InMemoryNamingService()


@pytest.fixture
def database(
    content_store: InMemoryContentStore,
    naming_service: InMemoryNamingService,
    settings: TableSettings,
    metrics_registry: MetricsRegistry,
    clock: AdvancingClock,
) -> TimeSeriesDatabase:
    """In-memory database with a deterministic clock."""
    return TimeSeriesDatabase(
        content_store,
        naming_service,
        settings=settings,
        metrics=metrics_registry,
        clock=clock,
    )


@pytest.fixture
def weather(database: TimeSeriesDatabase) -> TableKey:
    """A created, still empty table with a timestamp and a temperature."""
    key = TableKey("weather")
    database.create_table(key, {"_timestamp": "u64", "temp": "f32"})
    return key


@pytest.fixture
def blocking_naming_service() -> Generator[BlockingNamingService, None, None]:
    service = BlockingNamingService()
    yield service
    service.release.set()


@pytest.fixture
def failing_naming_service() -> FailingNamingService:
    return FailingNamingService()


@pytest.fixture
def undeletable_content_store() -> UndeletableContentStore:
    return UndeletableContentStore()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
