"""Column block entity.

A column block holds the complete encoded history of one field. Every insert
writes a new block whose data is the previous data plus one value; blocks
themselves never change once stored.

Block Format (big-endian header):
    - magic: 4 bytes (b"IPTC")
    - version: 1 byte
    - next length: 2 bytes
    - data length: 8 bytes
    - next: UTF-8 content id of the predecessor block (usually empty)
    - data: raw little-endian column values
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

from iptsdb.domain.value_objects import EMPTY_CONTENT_ID, ContentId


@dataclass(frozen=True)
class ColumnBlock:
    """Immutable column buffer with a reserved predecessor link.

    Attributes:
        data: Concatenated fixed-width values in insertion order.
        next: Predecessor block id. Always EMPTY_CONTENT_ID because inserts
            rewrite the whole buffer instead of chaining blocks.

    Example:
        >>> block = ColumnBlock.empty().append(b"\\x01\\x00")
        >>> block.row_count(2)
        1
    """

    data: bytes = b""
    next: ContentId = EMPTY_CONTENT_ID

    MAGIC: ClassVar[bytes] = b"IPTC"
    VERSION: ClassVar[int] = 1
    HEADER_FORMAT: ClassVar[str] = ">4sBHQ"  # magic, version, next_len, data_len
    HEADER_SIZE: ClassVar[int] = struct.calcsize(">4sBHQ")

    @classmethod
    def empty(cls) -> ColumnBlock:
        """Starting point for a field that has no data yet."""
        return cls()

    def __len__(self) -> int:
        """Size of the data buffer in bytes."""
        return len(self.data)

    def row_count(self, width: int) -> int:
        """Number of complete values stored for a type of the given width."""
        return len(self.data) // width

    def append(self, encoded: bytes) -> ColumnBlock:
        """Return a new head block with one more encoded value."""
        return ColumnBlock(data=self.data + encoded, next=EMPTY_CONTENT_ID)

    def to_bytes(self) -> bytes:
        """Serialize block to bytes for the content store."""
        next_bytes = self.next.encode("utf-8")
        header = struct.pack(
            self.HEADER_FORMAT,
            self.MAGIC,
            self.VERSION,
            len(next_bytes),
            len(self.data),
        )
        return header + next_bytes + self.data

    @classmethod
    def from_bytes(cls, data: bytes) -> ColumnBlock:
        """Deserialize a block from stored bytes.

        Raises:
            ValueError: If the bytes are not a well-formed column block.
        """
        if len(data) < cls.HEADER_SIZE:
            raise ValueError(
                f"ColumnBlock requires at least {cls.HEADER_SIZE} bytes, got {len(data)}"
            )

        magic, version, next_len, data_len = struct.unpack(
            cls.HEADER_FORMAT, data[: cls.HEADER_SIZE]
        )
        if magic != cls.MAGIC:
            raise ValueError(f"Invalid column block: bad magic {magic!r}")
        if version != cls.VERSION:
            raise ValueError(f"Unsupported column block version: {version}")

        body = data[cls.HEADER_SIZE:]
        if len(body) != next_len + data_len:
            raise ValueError(
                f"Column block length mismatch: header declares {next_len + data_len} bytes, "
                f"found {len(body)}"
            )

        return cls(
            data=bytes(body[next_len:]),
            next=ContentId(body[:next_len].decode("utf-8")),
        )
