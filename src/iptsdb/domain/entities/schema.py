"""Schema document entity.

A schema maps every field name of a table to its declared column type. It is
written once, at table creation, and is never mutated afterwards; adding a
field means creating a new table.

Persisted form (JSON, field order preserved):

    {"fields": {"_timestamp": {"type": "u64"}, "temp": {"type": "f32"}}}
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from iptsdb.domain.exceptions import InvalidSchemaError, MissingFieldError
from iptsdb.domain.value_objects import TIMESTAMP_FIELD, FieldType

FIELDS_KEY = "fields"
TYPE_KEY = "type"


@dataclass(frozen=True)
class SchemaDocument:
    """Immutable mapping of field name to declared type.

    Attributes:
        fields: Field name -> FieldType, in declaration order.

    Example:
        >>> schema = SchemaDocument.from_fields({"_timestamp": "u64", "temp": "f32"})
        >>> schema.field_names
        ['_timestamp', 'temp']
        >>> schema.field_type("temp").width
        4
    """

    fields: dict[str, FieldType]

    def __post_init__(self) -> None:
        """Validate the declared fields."""
        if not self.fields:
            raise InvalidSchemaError("Schema must declare at least one field")
        for name, field_type in self.fields.items():
            if not isinstance(name, str) or not name:
                raise InvalidSchemaError(f"Invalid field name {name!r}")
            if not isinstance(field_type, FieldType):
                raise InvalidSchemaError(f"Field '{name}' has no valid type: {field_type!r}")
        timestamp_type = self.fields.get(TIMESTAMP_FIELD)
        if timestamp_type is not None and timestamp_type is not FieldType.U64:
            raise InvalidSchemaError(
                f"Field '{TIMESTAMP_FIELD}' must be declared as u64, got {timestamp_type.value}"
            )

    @property
    def field_names(self) -> list[str]:
        """Field names in declaration order."""
        return list(self.fields)

    @property
    def has_timestamp(self) -> bool:
        """Whether the table carries an auto-populated timestamp column."""
        return TIMESTAMP_FIELD in self.fields

    def field_type(self, name: str) -> FieldType:
        """Return the declared type of a field.

        Raises:
            MissingFieldError: If the schema does not declare the field.
        """
        try:
            return self.fields[name]
        except KeyError:
            raise MissingFieldError(name, f"Field '{name}' is not declared in the schema") from None

    def to_document(self) -> dict[str, Any]:
        """Render the persisted document structure."""
        return {FIELDS_KEY: {name: {TYPE_KEY: t.value} for name, t in self.fields.items()}}

    def to_bytes(self) -> bytes:
        """Serialize to canonical JSON bytes."""
        return json.dumps(self.to_document(), separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> SchemaDocument:
        """Deserialize from stored JSON bytes.

        Raises:
            InvalidSchemaError: If the bytes are not a schema document.
        """
        try:
            document = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidSchemaError(f"Schema document is not valid JSON: {e}") from e
        return cls.from_document(document)

    @classmethod
    def from_document(cls, document: Any) -> SchemaDocument:
        """Build a schema from the persisted document structure.

        Field entries may be ``{"type": "f32"}`` objects or bare type names.
        Keys other than ``type`` inside a field entry are ignored.

        Raises:
            InvalidSchemaError: If the structure or a type name is invalid.
        """
        if not isinstance(document, Mapping) or not isinstance(document.get(FIELDS_KEY), Mapping):
            raise InvalidSchemaError(f"Schema document requires a '{FIELDS_KEY}' object")

        declared: dict[str, str] = {}
        for name, entry in document[FIELDS_KEY].items():
            if isinstance(entry, Mapping):
                type_name = entry.get(TYPE_KEY)
            else:
                type_name = entry
            if not isinstance(type_name, str):
                raise InvalidSchemaError(f"Field '{name}' requires a '{TYPE_KEY}' string")
            declared[name] = type_name
        return cls.from_fields(declared)

    @classmethod
    def from_fields(cls, fields: Mapping[str, FieldType | str]) -> SchemaDocument:
        """Build a schema from a name -> type mapping.

        Raises:
            InvalidSchemaError: If a type name is not supported.
        """
        parsed: dict[str, FieldType] = {}
        for name, field_type in fields.items():
            if isinstance(field_type, FieldType):
                parsed[name] = field_type
                continue
            try:
                parsed[name] = FieldType.parse(field_type)
            except (ValueError, TypeError) as e:
                raise InvalidSchemaError(f"Field '{name}': {e}") from e
        return cls(fields=parsed)
