"""Domain entities for the time-series store.

All three documents are immutable once written to the content store; a
change in table state is always expressed as new documents.

Exports:
    Schema:
        - SchemaDocument: Field name -> declared type, written once per table

    Root:
        - RootDocument: Schema id plus the head column block of every field

    Column Block:
        - ColumnBlock: Full encoded history of one field
"""

from iptsdb.domain.entities.column_block import ColumnBlock
from iptsdb.domain.entities.root import RootDocument
from iptsdb.domain.entities.schema import SchemaDocument

__all__ = [
    "ColumnBlock",
    "RootDocument",
    "SchemaDocument",
]
