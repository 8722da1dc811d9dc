"""Inbound ports - API contracts for the time-series store.

Inbound ports define the interfaces that clients and upper layers
use to interact with tables.
"""

from iptsdb.ports.inbound.table_store import ResultTable, TableStore

__all__ = [
    "ResultTable",
    "TableStore",
]
