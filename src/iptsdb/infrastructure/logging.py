"""Structured logging for the time-series store.

Events are structlog key/value records written to stderr, so that command
output on stdout (root ids, row tables) stays machine-readable. Within one
table operation every event also carries ``operation`` and ``table_key``
(see ``table_context``).
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Generator

import structlog
from structlog._config import BoundLoggerLazyProxy
from structlog.types import EventDict, Processor, WrappedLogger

from iptsdb.infrastructure.config import ObservabilityConfig


def _add_component(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Shorten the ``logger`` name to the component, e.g. ``root_manager``."""
    name = event_dict.pop("logger", None)
    if name:
        event_dict["component"] = name.rsplit(".", 1)[-1]
    return event_dict


def setup_logging(
    observability: ObservabilityConfig | None = None,
    level: str | None = None,
) -> None:
    """
    Configure structlog from the observability settings.

    Args:
        observability: Log level and format (defaults if None)
        level: Overrides the configured level, e.g. for ``--verbose``
    """
    observability = observability or ObservabilityConfig()
    numeric_level = getattr(logging, (level or observability.log_level).upper())

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _add_component,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if observability.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """
    Get a lazy logger, with ``name`` reported as the component.

    Module-level loggers are created at import time, before ``setup_logging``
    runs. The proxy resolves the configuration on each call, so calling
    ``.bind()`` here would freeze structlog's defaults into it.
    """
    if name:
        initial_context = {"logger": name, **initial_context}
    return BoundLoggerLazyProxy(None, initial_values=initial_context, logger_factory_args=(name,))


@contextmanager
def table_context(operation: str, table_key: str) -> Generator[None, None, None]:
    """Tag every event logged inside the block with the operation and table."""
    with structlog.contextvars.bound_contextvars(operation=operation, table_key=table_key):
        yield
