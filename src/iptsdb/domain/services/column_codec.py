"""Column codec: fixed-width little-endian value encoding.

Each declared type has a fixed width, so a column buffer is a plain
concatenation of values and row ``i`` lives at bytes ``[i*w, (i+1)*w)``.

Encoding follows two rules, applied in order:

1. The value must be representable without loss in the 64-bit domain of its
   type family: ``0 .. 2**64-1`` for unsigned types, ``-2**63 .. 2**63-1``
   for signed types, any finite or infinite double for floats (``f32`` must
   also fit single precision). Anything else is a TypeMismatchError.
2. Sub-64-bit integer types then keep only their low bits, so ``300`` stored
   as ``u8`` reads back as ``44`` and ``200`` stored as ``i8`` reads back as
   ``-56``.

Decoding never raises on a short buffer. It returns the EOF sentinel and the
caller decides, from the cursor's remaining byte count, whether that is a
clean end of column or a truncated value.
"""

from __future__ import annotations

import math
import struct
from datetime import datetime, timezone
from typing import Final

from iptsdb.domain.exceptions import TypeMismatchError
from iptsdb.domain.value_objects import FieldType

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_TIMESTAMP_SECONDS = 253_402_300_799  # 9999-12-31 23:59:59 UTC

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


class _EndOfColumn:
    """Sentinel type returned when a cursor cannot supply a full value."""

    _instance: _EndOfColumn | None = None

    def __new__(cls) -> _EndOfColumn:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "EOF"


EOF: Final = _EndOfColumn()


class ColumnCursor:
    """Independent read position over one column buffer.

    Cursors never modify the buffer they wrap; several cursors over the same
    block can advance independently.
    """

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._position = 0

    @property
    def position(self) -> int:
        """Current byte offset."""
        return self._position

    @property
    def remaining(self) -> int:
        """Bytes left after the current position."""
        return len(self._data) - self._position

    def seek_row(self, row: int, width: int) -> None:
        """Move to the first byte of a row index for values of ``width`` bytes."""
        if row < 0:
            raise ValueError(f"Row index must be non-negative, got {row}")
        self._position = min(row * width, len(self._data))

    def read(self, size: int) -> bytes | None:
        """Consume exactly ``size`` bytes, or nothing if fewer remain."""
        if self.remaining < size:
            return None
        chunk = self._data[self._position : self._position + size].tobytes()
        self._position += size
        return chunk


def encode_value(field_type: FieldType, value: object) -> bytes:
    """Encode one value as ``field_type.width`` little-endian bytes.

    Args:
        field_type: Declared column type.
        value: Decoded JSON value (int or float).

    Returns:
        The encoded bytes.

    Raises:
        TypeMismatchError: If the value is not representable in the type.
    """
    if field_type.is_integer():
        integer = _as_integer(field_type, value)
        return struct.pack(field_type.struct_format, _narrow(field_type, integer))

    number = _as_float(field_type, value)
    try:
        return struct.pack(field_type.struct_format, number)
    except (OverflowError, struct.error) as e:
        raise TypeMismatchError(field_type.value, value, "magnitude exceeds the type's range") from e


def decode_value(field_type: FieldType, cursor: ColumnCursor) -> int | float | _EndOfColumn:
    """Decode the next value from a cursor.

    Returns:
        The native value, or EOF if fewer than ``field_type.width`` bytes
        remain (the cursor is left untouched in that case).
    """
    chunk = cursor.read(field_type.width)
    if chunk is None:
        return EOF
    (value,) = struct.unpack(field_type.struct_format, chunk)
    return value


def check_timestamp(seconds: int | float) -> None:
    """Reject epoch seconds that cannot be rendered as a calendar date.

    Raises:
        TypeMismatchError: If the value lies after 9999-12-31 23:59:59 UTC.
    """
    if seconds > MAX_TIMESTAMP_SECONDS:
        raise TypeMismatchError(
            FieldType.U64.value, seconds, "timestamp is after 9999-12-31 23:59:59 UTC"
        )


def format_timestamp(seconds: int) -> str:
    """Render Unix epoch seconds as a UTC date-time string.

    Values outside the calendar range (written by another client) are
    rendered as the raw integer.
    """
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc).strftime(TIMESTAMP_FORMAT)
    except (ValueError, OverflowError, OSError):
        return str(seconds)


def _as_integer(field_type: FieldType, value: object) -> int:
    """Validate an integer value against its 64-bit family domain."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeMismatchError(field_type.value, value, "expected an integer")
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise TypeMismatchError(field_type.value, value, "fractional value for an integer type")
        value = int(value)

    if field_type.is_signed():
        if not _I64_MIN <= value <= _I64_MAX:
            raise TypeMismatchError(field_type.value, value, "outside the signed 64-bit range")
    elif not 0 <= value <= _U64_MAX:
        raise TypeMismatchError(field_type.value, value, "outside the unsigned 64-bit range")
    return value


def _narrow(field_type: FieldType, value: int) -> int:
    """Truncate an in-domain integer to the declared width."""
    bits = field_type.width * 8
    masked = value & ((1 << bits) - 1)
    if field_type.is_signed() and masked >= 1 << (bits - 1):
        masked -= 1 << bits
    return masked


def _as_float(field_type: FieldType, value: object) -> float:
    """Validate a floating-point value."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeMismatchError(field_type.value, value, "expected a number")
    try:
        return float(value)
    except OverflowError as e:
        raise TypeMismatchError(field_type.value, value, "magnitude exceeds the type's range") from e
