"""Error taxonomy for table operations.

Every failure surfaced by create, insert, or select derives from
IptsdbError. Adapters translate backend failures into these types so that
callers never see transport-specific exceptions.
"""

from __future__ import annotations


class IptsdbError(Exception):
    """Base exception for all time-series store failures."""


class NotFoundError(IptsdbError):
    """Raised when a table key, root, schema, or column block cannot be resolved."""


class MissingFieldError(IptsdbError):
    """Raised when a record lacks a declared field or a select names an undeclared one."""

    def __init__(self, field_name: str, message: str | None = None) -> None:
        self.field_name = field_name
        super().__init__(message or f"Field '{field_name}' is missing")


class TypeMismatchError(IptsdbError):
    """Raised when a value cannot be represented in its declared column type."""

    def __init__(self, field_type: str, value: object, reason: str) -> None:
        self.field_type = field_type
        self.value = value
        super().__init__(f"Cannot encode {value!r} as {field_type}: {reason}")


class TruncatedColumnError(IptsdbError):
    """Raised when a column buffer ends in the middle of a value.

    Signals corruption or a racing writer, as opposed to a clean end of
    column where every requested buffer is exhausted on a value boundary.
    """

    def __init__(self, field_name: str, row: int, remaining: int) -> None:
        self.field_name = field_name
        self.row = row
        self.remaining = remaining
        super().__init__(
            f"Column '{field_name}' is truncated at row {row} ({remaining} stray bytes)"
        )


class PublishTimeoutError(IptsdbError):
    """Raised when publishing a new root pointer exceeds its deadline."""


class StoreUnavailableError(IptsdbError):
    """Raised on a backend failure of the content store or naming service."""


class InvalidSchemaError(IptsdbError):
    """Raised when a schema document is malformed or declares an unsupported type."""
