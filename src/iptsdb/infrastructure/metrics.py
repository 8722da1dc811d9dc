"""Prometheus metrics for the time-series store."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all time-series store metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Table operation metrics
        self.operations_total = Counter(
            "iptsdb_operations_total",
            "Total number of table operations",
            ["operation", "status"],  # operation: create, insert, select
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "iptsdb_operation_latency_seconds",
            "Table operation latency in seconds",
            ["operation"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self._registry,
        )

        # Commit metrics
        self.publish_latency_seconds = Histogram(
            "iptsdb_publish_latency_seconds",
            "Naming service publish latency in seconds",
            buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0),
            registry=self._registry,
        )

        self.publish_timeouts_total = Counter(
            "iptsdb_publish_timeouts_total",
            "Total publishes that exceeded their deadline",
            registry=self._registry,
        )

        self.column_bytes_written_total = Counter(
            "iptsdb_column_bytes_written_total",
            "Total column block bytes written to the content store",
            registry=self._registry,
        )

        # Garbage collection metrics
        self.gc_blocks_deleted_total = Counter(
            "iptsdb_gc_blocks_deleted_total",
            "Total superseded blocks deleted after a publish",
            registry=self._registry,
        )

        self.gc_delete_failures_total = Counter(
            "iptsdb_gc_delete_failures_total",
            "Total superseded blocks that could not be deleted",
            registry=self._registry,
        )

        # Scan metrics
        self.rows_scanned_total = Counter(
            "iptsdb_rows_scanned_total",
            "Total rows emitted by table scans",
            registry=self._registry,
        )

        self.info = Info(
            "iptsdb",
            "Time-series store information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the Prometheus metrics server.

    The existing global registry is reused unless a custom one is given.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    if _metrics is None or registry is not None:
        _metrics = MetricsRegistry(registry)

    from iptsdb import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
