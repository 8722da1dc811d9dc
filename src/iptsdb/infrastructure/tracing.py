"""OpenTelemetry tracing for table operations."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from iptsdb.infrastructure.config import ObservabilityConfig

TRACER_NAME = "iptsdb"
ATTRIBUTE_PREFIX = "iptsdb."

_tracer: trace.Tracer | None = None


def setup_tracing(
    observability: ObservabilityConfig,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Install a tracer provider for the configured collector.

    Spans are exported over OTLP gRPC when ``otel_endpoint`` is set, and to
    stderr when ``console_export`` is true. With neither, spans are created
    but dropped.

    Args:
        observability: Service name and collector endpoint
        console_export: Also print finished spans (debugging)

    Returns:
        The tracer used for table operations
    """
    global _tracer

    from iptsdb import __version__

    resource = Resource.create(
        {
            "service.name": observability.otel_service_name,
            "service.version": __version__,
        }
    )
    provider = TracerProvider(resource=resource)

    if observability.otel_endpoint:
        exporter = OTLPSpanExporter(endpoint=observability.otel_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(exporter))
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the tracer, falling back to the global (no-op until configured) provider."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


@contextmanager
def table_span(
    operation: str,
    table_key: str,
    **attributes: Any,
) -> Generator[trace.Span, None, None]:
    """
    Span around one operation on one table.

    The span is named ``iptsdb.<operation>``. Attribute names get the
    ``iptsdb.`` prefix, and None values are skipped since OpenTelemetry
    rejects them.

    Example:
        with table_span("insert", "weather", fields=3) as span:
            ...
            span.set_attribute("iptsdb.root_id", root_id)
    """
    with get_tracer().start_as_current_span(f"{ATTRIBUTE_PREFIX}{operation}") as span:
        span.set_attribute(f"{ATTRIBUTE_PREFIX}table_key", table_key)
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(f"{ATTRIBUTE_PREFIX}{key}", value)
        yield span
