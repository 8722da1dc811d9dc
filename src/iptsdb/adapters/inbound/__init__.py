"""Inbound adapters for the time-series store.

Inbound adapters handle incoming requests and convert them to table
operations.

Exports:
    REST API:
        - create_app: Create a FastAPI application
        - run_server: Run the REST API server
    CLI:
        - app: The typer application behind the ``iptsdb`` command
"""

from iptsdb.adapters.inbound.cli import app
from iptsdb.adapters.inbound.rest_api import create_app, run_server

__all__ = [
    "app",
    "create_app",
    "run_server",
]
