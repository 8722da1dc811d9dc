"""REST API adapter for the time-series store.

This module provides a FastAPI-based REST API over a TimeSeriesDatabase.

Endpoints:
    GET /health - Health check
    POST /tables/{key} - Create a table from a schema document
    POST /tables/{key}/records - Append one record
    GET /tables/{key}/rows - Select rows (?fields=a,b&limit=N)

Errors are returned as ``{"error": <type>, "detail": <message>}`` with the
status code of the failure class (see ERROR_STATUS).

Usage:
    from iptsdb.adapters.inbound.rest_api import create_app
    from iptsdb.application import TimeSeriesDatabase

    app = create_app(TimeSeriesDatabase.on_disk("/path/to/data"))
    # Run with uvicorn: uvicorn app:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from iptsdb import __version__
from iptsdb.application import TimeSeriesDatabase
from iptsdb.domain.exceptions import (
    InvalidSchemaError,
    IptsdbError,
    MissingFieldError,
    NotFoundError,
    PublishTimeoutError,
    StoreUnavailableError,
    TruncatedColumnError,
    TypeMismatchError,
)
from iptsdb.domain.services import parse_schema_document
from iptsdb.domain.value_objects import TableKey
from iptsdb.infrastructure.logging import get_logger

logger = get_logger(__name__)

ERROR_STATUS: dict[type[IptsdbError], int] = {
    NotFoundError: 404,
    MissingFieldError: 422,
    TypeMismatchError: 422,
    InvalidSchemaError: 422,
    TruncatedColumnError: 500,
    StoreUnavailableError: 503,
    PublishTimeoutError: 504,
}


class SchemaRequest(BaseModel):
    """Request model for table creation (the persisted schema document)."""

    fields: dict[str, Any] = Field(
        ..., description='Field name -> {"type": t} or a bare type name, in column order'
    )


class CommitResponse(BaseModel):
    """Response model for create and insert."""

    table_key: str = Field(..., description="Table key")
    root_id: str = Field(..., description="Id of the newly published root")


class RowsResponse(BaseModel):
    """Response model for select."""

    fields: list[str] = Field(..., description="Selected field names")
    header: list[str] = Field(..., description="Display labels")
    rows: list[list[Any]] = Field(default_factory=list, description="Rows in insertion order")
    root_id: str | None = Field(None, description="Root the rows were read from")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


def status_for(error: IptsdbError) -> int:
    """HTTP status code for a domain error."""
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 500


def _split_fields(values: list[str]) -> list[str]:
    """Accept both ``?fields=a&fields=b`` and ``?fields=a,b``."""
    return [name for value in values for name in value.split(",") if name]


def create_app(db: TimeSeriesDatabase) -> FastAPI:
    """Create a FastAPI application for a database.

    Args:
        db: The database to serve.

    Returns:
        A configured FastAPI application.
    """
    app = FastAPI(
        title="iptsdb API",
        description="Columnar time-series tables over a content store",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(IptsdbError)
    async def handle_domain_error(request: Request, exc: IptsdbError) -> JSONResponse:
        status_code = status_for(exc)
        logger.info(
            "request_failed",
            path=request.url.path,
            status_code=status_code,
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=__version__)

    @app.post("/tables/{key}", response_model=CommitResponse, status_code=201, tags=["Tables"])
    def create_table(key: str, request: SchemaRequest) -> CommitResponse:
        """Create a table and publish its empty root."""
        fields = parse_schema_document(request.model_dump())
        root_id = db.create_table(TableKey(key), fields)
        return CommitResponse(table_key=key, root_id=root_id)

    @app.post("/tables/{key}/records", response_model=CommitResponse, tags=["Tables"])
    def insert_record(key: str, record: dict[str, Any]) -> CommitResponse:
        """Append one record; ``_timestamp`` is filled in when omitted."""
        root_id = db.insert(TableKey(key), record)
        return CommitResponse(table_key=key, root_id=root_id)

    @app.get("/tables/{key}/rows", response_model=RowsResponse, tags=["Tables"])
    def select_rows(
        key: str,
        fields: list[str] = Query(default=[]),
        limit: int | None = Query(default=None),
    ) -> RowsResponse:
        """Select rows; no fields means every field, a limit keeps the most recent rows."""
        result = db.select(TableKey(key), _split_fields(fields), limit)
        return RowsResponse(
            fields=result.fields,
            header=result.header,
            rows=[list(row) for row in result.rows],
            root_id=result.root_id,
        )

    return app


def run_server(
    db: TimeSeriesDatabase,
    host: str = "0.0.0.0",
    port: int = 8000,
) -> None:
    """Run the REST API server.

    Args:
        db: The database to serve.
        host: Host to bind to.
        port: Port to bind to.
    """
    import uvicorn

    app = create_app(db)
    uvicorn.run(app, host=host, port=port)
