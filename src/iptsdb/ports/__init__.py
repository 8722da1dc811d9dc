"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to clients (e.g., TableStore)
- Outbound ports: Dependencies on external systems (e.g., ContentStore, NamingService)

Adapters implement these ports with concrete functionality.
"""

from iptsdb.ports.inbound import ResultTable, TableStore
from iptsdb.ports.outbound import ContentStore, NamingService

__all__ = [
    # Inbound ports
    "ResultTable",
    "TableStore",
    # Outbound ports
    "ContentStore",
    "NamingService",
]
