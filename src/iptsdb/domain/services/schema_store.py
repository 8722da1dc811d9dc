"""Schema store: write-once schema documents."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from iptsdb.domain.entities import SchemaDocument
from iptsdb.domain.exceptions import InvalidSchemaError, NotFoundError
from iptsdb.domain.value_objects import ContentId, FieldType
from iptsdb.infrastructure.logging import get_logger
from iptsdb.ports.outbound import ContentStore

logger = get_logger(__name__)


class SchemaStore:
    """Creates and reads schema documents in the content store.

    There is no update operation. A schema id referenced by a root always
    denotes the same field set.
    """

    def __init__(self, content_store: ContentStore) -> None:
        """Initialize the schema store.

        Args:
            content_store: Backend holding the schema documents.
        """
        self._content_store = content_store

    def create_schema(self, fields: Mapping[str, FieldType | str]) -> ContentId:
        """Validate and store a schema.

        Args:
            fields: Field name -> type, in column order.

        Returns:
            Content id of the stored schema document.

        Raises:
            InvalidSchemaError: If the declarations are invalid.
        """
        schema = SchemaDocument.from_fields(fields)
        schema_id = self._content_store.put(schema.to_bytes())
        logger.debug("schema_stored", schema_id=schema_id, fields=schema.field_names)
        return schema_id

    def get_schema(self, schema_id: ContentId) -> SchemaDocument:
        """Fetch a schema document.

        Raises:
            NotFoundError: If the id cannot be resolved to a schema.
        """
        data = self._content_store.get(schema_id)
        try:
            return SchemaDocument.from_bytes(data)
        except InvalidSchemaError as e:
            raise NotFoundError(f"Block {schema_id} does not hold a schema document: {e}") from e


def parse_schema_document(raw: str | bytes | Mapping[str, Any]) -> dict[str, FieldType]:
    """Parse a schema document as written by users or read back from storage.

    Accepts ``{"fields": {name: {"type": t}}}`` as JSON text or as an already
    decoded mapping, and returns the field declarations ready for
    ``create_schema``.

    Raises:
        InvalidSchemaError: If the document is malformed.
    """
    if isinstance(raw, Mapping):
        schema = SchemaDocument.from_document(raw)
    else:
        schema = SchemaDocument.from_bytes(raw.encode("utf-8") if isinstance(raw, str) else raw)
    return dict(schema.fields)
