"""Declared column types.

Every column holds fixed-width little-endian values of exactly one of these
types. The width is what lets a column buffer be addressed by row index
without any per-value framing.
"""

from __future__ import annotations

from enum import Enum


class FieldType(str, Enum):
    """Closed set of numeric column types.

    The enum value is the spelling used in schema documents.
    """

    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    F32 = "f32"
    F64 = "f64"

    @classmethod
    def parse(cls, name: str) -> FieldType:
        """Look up a type by its schema spelling.

        Raises:
            ValueError: If the name is not a supported type.
        """
        try:
            return cls(name)
        except ValueError:
            supported = ", ".join(member.value for member in cls)
            raise ValueError(f"Unsupported field type {name!r} (expected one of {supported})") from None

    @property
    def width(self) -> int:
        """Encoded size of one value in bytes."""
        return _WIDTHS[self]

    @property
    def struct_format(self) -> str:
        """Little-endian struct format for one value."""
        return _STRUCT_FORMATS[self]

    def is_integer(self) -> bool:
        """Check if this is an integer type."""
        return self not in (FieldType.F32, FieldType.F64)

    def is_signed(self) -> bool:
        """Check if this is a signed integer type."""
        return self in (FieldType.I8, FieldType.I16, FieldType.I32, FieldType.I64)

    def is_float(self) -> bool:
        """Check if this is a floating-point type."""
        return not self.is_integer()


_WIDTHS: dict[FieldType, int] = {
    FieldType.U8: 1,
    FieldType.U16: 2,
    FieldType.U32: 4,
    FieldType.U64: 8,
    FieldType.I8: 1,
    FieldType.I16: 2,
    FieldType.I32: 4,
    FieldType.I64: 8,
    FieldType.F32: 4,
    FieldType.F64: 8,
}

_STRUCT_FORMATS: dict[FieldType, str] = {
    FieldType.U8: "<B",
    FieldType.U16: "<H",
    FieldType.U32: "<I",
    FieldType.U64: "<Q",
    FieldType.I8: "<b",
    FieldType.I16: "<h",
    FieldType.I32: "<i",
    FieldType.I64: "<q",
    FieldType.F32: "<f",
    FieldType.F64: "<d",
}
