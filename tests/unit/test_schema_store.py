"""Unit tests for the schema store."""

from __future__ import annotations

import json

import pytest

from iptsdb.adapters.outbound import InMemoryContentStore
from iptsdb.domain.exceptions import InvalidSchemaError, NotFoundError
from iptsdb.domain.services import SchemaStore, parse_schema_document
from iptsdb.domain.value_objects import ContentId, FieldType, content_id_for


@pytest.mark.unit
class TestSchemaStore:
    """Tests for SchemaStore."""

    def test_create_and_get(self, content_store: InMemoryContentStore) -> None:
        store = SchemaStore(content_store)
        schema_id = store.create_schema({"_timestamp": "u64", "temp": "f32"})

        schema = store.get_schema(schema_id)
        assert schema.field_names == ["_timestamp", "temp"]
        assert schema.field_type("temp") is FieldType.F32

    def test_id_is_content_address(self, content_store: InMemoryContentStore) -> None:
        schema_id = SchemaStore(content_store).create_schema({"a": "u8"})
        assert schema_id == content_id_for(content_store.get(schema_id))

    def test_same_fields_same_id(self, content_store: InMemoryContentStore) -> None:
        store = SchemaStore(content_store)
        assert store.create_schema({"a": "u8"}) == store.create_schema({"a": FieldType.U8})
        assert len(content_store) == 1

    def test_invalid_schema_stores_nothing(self, content_store: InMemoryContentStore) -> None:
        with pytest.raises(InvalidSchemaError):
            SchemaStore(content_store).create_schema({"a": "u128"})
        assert len(content_store) == 0

    def test_unknown_id(self, content_store: InMemoryContentStore) -> None:
        with pytest.raises(NotFoundError):
            SchemaStore(content_store).get_schema(ContentId("0" * 64))

    def test_block_that_is_not_a_schema(self, content_store: InMemoryContentStore) -> None:
        block_id = content_store.put(b'{"schema": "x", "columns": {}}')
        with pytest.raises(NotFoundError, match="schema"):
            SchemaStore(content_store).get_schema(block_id)


@pytest.mark.unit
class TestParseSchemaDocument:
    """Tests for parse_schema_document."""

    def test_parse_json_text(self) -> None:
        raw = json.dumps({"fields": {"_timestamp": {"type": "u64"}, "temp": {"type": "f32"}}})
        assert parse_schema_document(raw) == {"_timestamp": FieldType.U64, "temp": FieldType.F32}

    def test_parse_bytes(self) -> None:
        assert parse_schema_document(b'{"fields": {"a": {"type": "i16"}}}') == {"a": FieldType.I16}

    def test_parse_mapping(self) -> None:
        assert parse_schema_document({"fields": {"a": "u8"}}) == {"a": FieldType.U8}

    def test_rejects_missing_fields_key(self) -> None:
        with pytest.raises(InvalidSchemaError):
            parse_schema_document({"a": {"type": "u8"}})
