"""Core identifiers for blocks and tables.

These value objects keep content ids and table keys apart from arbitrary
strings so that a root document or a naming-service call cannot be handed
the wrong kind of name.
"""

from __future__ import annotations

import hashlib
from typing import NewType


ContentId = NewType("ContentId", str)
"""Deterministic identifier of an immutable blob in the content store."""

TableKey = NewType("TableKey", str)
"""Naming-service key under which a table's current root id is published."""

# Persisted as the empty string: "no block written yet" / "no predecessor".
EMPTY_CONTENT_ID = ContentId("")

TIMESTAMP_FIELD = "_timestamp"
"""Field name that carries insert-time Unix epoch seconds."""

TIMESTAMP_HEADER = "timestamp (UTC)"
"""Display label for the timestamp field in result headers."""


def content_id_for(data: bytes) -> ContentId:
    """Derive the content id of a blob (hex SHA-256 of its bytes)."""
    return ContentId(hashlib.sha256(data).hexdigest())


def is_empty(content_id: str) -> bool:
    """Check whether a stored reference is the empty sentinel."""
    return content_id == EMPTY_CONTENT_ID
