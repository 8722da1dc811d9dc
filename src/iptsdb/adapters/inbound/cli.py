"""Command-line interface for the time-series store.

    iptsdb create weather --field _timestamp:u64 --field temp:f32
    echo '{"temp": 21.5}' | iptsdb insert weather
    iptsdb select weather _timestamp temp --limit 10

Schema documents and records are JSON, read from ``--input`` or stdin.
Root ids go to stdout; logs go to stderr.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from iptsdb.application import TimeSeriesDatabase
from iptsdb.domain.exceptions import IptsdbError
from iptsdb.domain.services import parse_schema_document
from iptsdb.domain.value_objects import TableKey
from iptsdb.infrastructure.config import Config, get_config
from iptsdb.infrastructure.container import Container, build_container
from iptsdb.infrastructure.logging import get_logger, setup_logging

app = typer.Typer(
    help="Columnar time-series tables over a content-addressed store",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


def _read_json(input_path: Optional[Path]) -> Any:
    """Parse JSON from a file, or from stdin when no file is given."""
    try:
        raw = input_path.read_text() if input_path else sys.stdin.read()
    except OSError as e:
        raise typer.BadParameter(f"Cannot read {input_path}: {e}", param_hint="--input") from e
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"Input is not valid JSON: {e}", param_hint="--input") from e


def _database(ctx: typer.Context) -> TimeSeriesDatabase:
    container: Container = ctx.obj
    return container.resolve(TimeSeriesDatabase)


def _fail(error: IptsdbError) -> typer.Exit:
    err_console.print(f"[red]{type(error).__name__}:[/red] {error}")
    return typer.Exit(code=1)


@app.callback()
def main_options(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None, "--data-dir", help="Data directory (overrides IPTSDB_STORAGE__DATA_DIR)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Columnar time-series tables over a content-addressed store."""
    config = get_config()
    if data_dir is not None:
        storage = config.storage.model_copy(update={"data_dir": data_dir})
        config = config.model_copy(update={"storage": storage})

    setup_logging(config.observability, level="DEBUG" if verbose else None)
    ctx.obj = build_container(config)


@app.command()
def create(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Table key"),
    field: list[str] = typer.Option(
        [], "--field", "-f", help="Field declaration NAME:TYPE (repeatable)"
    ),
    input_path: Optional[Path] = typer.Option(
        None, "--input", "-i", help='Schema document {"fields": {...}} (default: stdin)'
    ),
) -> None:
    """
    Create a table and print its root id.
    """
    try:
        if field:
            fields: dict[str, str] = {}
            for declaration in field:
                name, sep, type_name = declaration.partition(":")
                if not sep:
                    raise typer.BadParameter(f"Expected NAME:TYPE, got '{declaration}'", param_hint="--field")
                fields[name] = type_name
            declared = parse_schema_document({"fields": fields})
        else:
            declared = parse_schema_document(_read_json(input_path))
        root_id = _database(ctx).create_table(TableKey(key), declared)
    except IptsdbError as e:
        raise _fail(e) from e
    typer.echo(root_id)


@app.command()
def insert(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Table key"),
    input_path: Optional[Path] = typer.Option(
        None, "--input", "-i", help="JSON record (default: stdin)"
    ),
) -> None:
    """
    Append one JSON record and print the new root id.
    """
    record = _read_json(input_path)
    if not isinstance(record, dict):
        raise typer.BadParameter("Record must be a JSON object", param_hint="--input")
    try:
        root_id = _database(ctx).insert(TableKey(key), record)
    except IptsdbError as e:
        raise _fail(e) from e
    typer.echo(root_id)


@app.command()
def select(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Table key"),
    fields: Optional[list[str]] = typer.Argument(None, help="Fields to show (default: all)"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Show only the most recent N rows"),
    as_json: bool = typer.Option(False, "--json", help="Print rows as a JSON array of objects"),
) -> None:
    """
    Print rows of a table in insertion order.
    """
    try:
        result = _database(ctx).select(TableKey(key), fields or (), limit)
    except IptsdbError as e:
        raise _fail(e) from e

    if as_json:
        typer.echo(json.dumps(result.as_dicts()))
        return

    table = Table(show_lines=False)
    for label in result.header:
        table.add_column(label)
    for row in result.rows:
        table.add_row(*(str(value) for value in row))
    console.print(table)


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="REST API port"),
) -> None:
    """
    Serve the REST API, with Prometheus metrics and optional tracing.
    """
    from iptsdb.adapters.inbound.rest_api import run_server
    from iptsdb.infrastructure.metrics import setup_metrics
    from iptsdb.infrastructure.tracing import setup_tracing

    container: Container = ctx.obj
    config = container.resolve(Config)
    setup_metrics(config.server.metrics_port)
    if config.observability.otel_endpoint:
        setup_tracing(config.observability)

    logger.info(
        "server_starting",
        backend=config.storage.backend,
        data_dir=str(config.storage.data_dir),
        port=port or config.server.port,
        metrics_port=config.server.metrics_port,
    )
    run_server(_database(ctx), host=host or config.server.host, port=port or config.server.port)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
