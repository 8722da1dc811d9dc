"""Value objects for the time-series store domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Identifiers:
        - ContentId: Content-derived block identifier
        - TableKey: Naming-service key of a table
        - EMPTY_CONTENT_ID: Sentinel for "no block"
        - TIMESTAMP_FIELD, TIMESTAMP_HEADER: The special timestamp column

    Field Types:
        - FieldType: Closed set of fixed-width numeric column types
"""

from iptsdb.domain.value_objects.field_types import FieldType
from iptsdb.domain.value_objects.identifiers import (
    EMPTY_CONTENT_ID,
    TIMESTAMP_FIELD,
    TIMESTAMP_HEADER,
    ContentId,
    TableKey,
    content_id_for,
    is_empty,
)

__all__ = [
    # Identifiers
    "ContentId",
    "TableKey",
    "EMPTY_CONTENT_ID",
    "TIMESTAMP_FIELD",
    "TIMESTAMP_HEADER",
    "content_id_for",
    "is_empty",
    # Field types
    "FieldType",
]
