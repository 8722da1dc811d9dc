"""Unit tests for the column codec."""

from __future__ import annotations

import math

import pytest

from iptsdb.domain.exceptions import TypeMismatchError
from iptsdb.domain.services.column_codec import (
    EOF,
    MAX_TIMESTAMP_SECONDS,
    ColumnCursor,
    check_timestamp,
    decode_value,
    encode_value,
    format_timestamp,
)
from iptsdb.domain.value_objects import FieldType


@pytest.mark.unit
class TestEncodeValue:
    """Tests for encode_value."""

    def test_little_endian_layout(self) -> None:
        assert encode_value(FieldType.U16, 0x1234) == b"\x34\x12"
        assert encode_value(FieldType.U32, 1) == b"\x01\x00\x00\x00"
        assert encode_value(FieldType.I8, -1) == b"\xff"

    @pytest.mark.parametrize("field_type", list(FieldType))
    def test_encoded_width_matches_type(self, field_type: FieldType) -> None:
        assert len(encode_value(field_type, 7)) == field_type.width

    def test_unsigned_narrowing_wraps(self) -> None:
        """Values inside the 64-bit domain keep only the declared low bits."""
        cursor = ColumnCursor(encode_value(FieldType.U8, 300))
        assert decode_value(FieldType.U8, cursor) == 44

    def test_signed_narrowing_wraps(self) -> None:
        cursor = ColumnCursor(encode_value(FieldType.I8, 200))
        assert decode_value(FieldType.I8, cursor) == -56

    def test_integral_float_accepted_for_integers(self) -> None:
        assert encode_value(FieldType.U32, 3.0) == encode_value(FieldType.U32, 3)

    @pytest.mark.parametrize(
        ("field_type", "value"),
        [
            (FieldType.U64, 2**64),
            (FieldType.U64, -1),
            (FieldType.U8, -1),
            (FieldType.I64, 2**63),
            (FieldType.I64, -(2**63) - 1),
            (FieldType.U32, 1.5),
            (FieldType.U32, math.nan),
            (FieldType.U32, True),
            (FieldType.U32, "5"),
            (FieldType.U32, None),
            (FieldType.F32, 1e39),
            (FieldType.F64, 10**400),
            (FieldType.F64, "21.5"),
            (FieldType.F64, False),
        ],
    )
    def test_unrepresentable_values(self, field_type: FieldType, value: object) -> None:
        """Out-of-domain or wrongly typed values raise TypeMismatchError."""
        with pytest.raises(TypeMismatchError) as exc_info:
            encode_value(field_type, value)
        assert exc_info.value.field_type == field_type.value

    def test_domain_boundaries(self) -> None:
        assert encode_value(FieldType.U64, 2**64 - 1) == b"\xff" * 8
        assert encode_value(FieldType.I64, -(2**63)) == b"\x00" * 7 + b"\x80"

    def test_float_values(self) -> None:
        cursor = ColumnCursor(encode_value(FieldType.F32, 21.5) + encode_value(FieldType.F64, 7))
        assert decode_value(FieldType.F32, cursor) == 21.5
        assert decode_value(FieldType.F64, cursor) == 7.0


@pytest.mark.unit
class TestDecodeValue:
    """Tests for decode_value and ColumnCursor."""

    def test_sequential_decode(self) -> None:
        cursor = ColumnCursor(b"\x01\x00\x02\x00")
        assert decode_value(FieldType.U16, cursor) == 1
        assert decode_value(FieldType.U16, cursor) == 2
        assert decode_value(FieldType.U16, cursor) is EOF

    def test_short_buffer_consumes_nothing(self) -> None:
        """A partial value yields EOF and leaves the cursor in place."""
        cursor = ColumnCursor(b"\x01\x02")
        assert decode_value(FieldType.U32, cursor) is EOF
        assert cursor.position == 0
        assert cursor.remaining == 2

    def test_zero_is_not_eof(self) -> None:
        cursor = ColumnCursor(b"\x00")
        value = decode_value(FieldType.U8, cursor)
        assert value == 0
        assert value is not EOF

    def test_cursors_are_independent(self) -> None:
        data = b"\x01\x02\x03"
        first, second = ColumnCursor(data), ColumnCursor(data)
        decode_value(FieldType.U8, first)
        decode_value(FieldType.U8, first)
        assert decode_value(FieldType.U8, second) == 1
        assert first.position == 2

    def test_seek_row(self) -> None:
        cursor = ColumnCursor(b"\x01\x00\x02\x00\x03\x00")
        cursor.seek_row(2, 2)
        assert decode_value(FieldType.U16, cursor) == 3

    def test_seek_past_end_clamps(self) -> None:
        cursor = ColumnCursor(b"\x01\x00")
        cursor.seek_row(5, 2)
        assert cursor.remaining == 0

    def test_seek_negative_row(self) -> None:
        with pytest.raises(ValueError):
            ColumnCursor(b"").seek_row(-1, 4)

    def test_eof_repr(self) -> None:
        assert repr(EOF) == "EOF"


@pytest.mark.unit
class TestFormatTimestamp:
    """Tests for timestamp rendering."""

    def test_epoch(self) -> None:
        assert format_timestamp(0) == "1970-01-01 00:00:00"

    def test_utc_rendering(self) -> None:
        assert format_timestamp(1_700_000_000) == "2023-11-14 22:13:20"

    def test_last_calendar_second(self) -> None:
        assert format_timestamp(MAX_TIMESTAMP_SECONDS) == "9999-12-31 23:59:59"

    def test_beyond_calendar_renders_raw_value(self) -> None:
        assert format_timestamp(1_700_000_000_000) == "1700000000000"
        assert format_timestamp(2**64 - 1) == str(2**64 - 1)

    def test_check_timestamp(self) -> None:
        check_timestamp(MAX_TIMESTAMP_SECONDS)
        with pytest.raises(TypeMismatchError):
            check_timestamp(MAX_TIMESTAMP_SECONDS + 1)


F32_MAX = 3.4028234663852886e38
F32_MIN_SUBNORMAL = 1.401298464324817e-45

ROUND_TRIP_CASES = [
    (FieldType.U8, [0, 1, 255]),
    (FieldType.U16, [0, 1, 65535]),
    (FieldType.U32, [0, 1, 2**32 - 1]),
    (FieldType.U64, [0, 1, 2**64 - 1]),
    (FieldType.I8, [0, -1, -128, 127]),
    (FieldType.I16, [0, -1, -(2**15), 2**15 - 1]),
    (FieldType.I32, [0, -1, -(2**31), 2**31 - 1]),
    (FieldType.I64, [0, -1, -(2**63), 2**63 - 1]),
    (FieldType.F32, [0.0, -1.0, 1.5, F32_MAX, -F32_MAX, F32_MIN_SUBNORMAL, math.inf, -math.inf]),
    (FieldType.F64, [0.0, -1.0, 0.1, 1.7976931348623157e308, -1.7976931348623157e308, 5e-324, math.inf]),
]


@pytest.mark.unit
class TestRoundTrip:
    """Values inside a type's range decode to themselves."""

    @pytest.mark.parametrize(
        ("field_type", "value"),
        [(field_type, value) for field_type, values in ROUND_TRIP_CASES for value in values],
        ids=lambda param: str(param.value if isinstance(param, FieldType) else param),
    )
    def test_decode_returns_encoded_value(self, field_type: FieldType, value: int | float) -> None:
        cursor = ColumnCursor(encode_value(field_type, value))

        decoded = decode_value(field_type, cursor)

        assert decoded == value
        assert type(decoded) is type(value)
        assert cursor.remaining == 0

    def test_f32_nan(self) -> None:
        decoded = decode_value(FieldType.F32, ColumnCursor(encode_value(FieldType.F32, math.nan)))
        assert math.isnan(decoded)
