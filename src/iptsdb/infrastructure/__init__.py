"""Infrastructure layer - cross-cutting concerns."""

from iptsdb.infrastructure.config import Config, get_config
from iptsdb.infrastructure.logging import setup_logging, get_logger, table_context
from iptsdb.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from iptsdb.infrastructure.tracing import setup_tracing, get_tracer, table_span

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "table_context",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "table_span",
]
