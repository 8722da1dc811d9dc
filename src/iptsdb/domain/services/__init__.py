"""Domain services for table operations.

Services coordinate entities and the outbound ports to perform the
operations of the store:

- SchemaStore: write-once schema documents
- RootDocumentManager: table creation and the insert commit protocol
- TableScanner: column projection with a row limit
- column_codec: fixed-width value encoding shared by writer and reader
"""

from iptsdb.domain.services.column_codec import (
    EOF,
    ColumnCursor,
    check_timestamp,
    decode_value,
    encode_value,
    format_timestamp,
)
from iptsdb.domain.services.root_manager import (
    GarbageReport,
    RootDocumentManager,
    TableSettings,
)
from iptsdb.domain.services.schema_store import SchemaStore, parse_schema_document
from iptsdb.domain.services.table_scanner import TableScanner, display_header

__all__ = [
    "EOF",
    "ColumnCursor",
    "GarbageReport",
    "RootDocumentManager",
    "SchemaStore",
    "TableScanner",
    "TableSettings",
    "check_timestamp",
    "decode_value",
    "display_header",
    "encode_value",
    "format_timestamp",
    "parse_schema_document",
]
