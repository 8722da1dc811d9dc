"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for the external systems that the
time-series store is layered on: the content store and the naming service.
"""

from iptsdb.ports.outbound.content_store import ContentStore
from iptsdb.ports.outbound.naming_service import NamingService

__all__ = [
    "ContentStore",
    "NamingService",
]
