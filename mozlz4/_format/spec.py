"""
Container Format Specification - Firefox mozLz4.

Layout:
    Offset  Length  Meaning
    0       8       magic "mozLz40\\0" (6d 6f 7a 4c 7a 34 30 00)
    8       4       uncompressed payload length, unsigned 32-bit little-endian
    12      rest    LZ4 block, opaque to this layer

Size field:
    size = field[0] | field[1] << 8 | field[2] << 16 | field[3] << 24

The header carries no checksum and no version. A file is identified by the
magic alone; anything shorter than the 12-byte header is rejected.
"""

from __future__ import annotations

import logging
import struct

from mozlz4 import HEADER_SIZE, MAGIC, MAX_DECLARED_SIZE, SIZE_FIELD_LENGTH

log = logging.getLogger(__name__)

# Header: 8-byte magic + uint32 size, little-endian
HEADER_STRUCT = struct.Struct("<8sI")
SIZE_STRUCT = struct.Struct("<I")


class FormatError(ValueError):
    """Input is not a mozLz4 container (bad magic or too short)."""


def is_container(data: bytes) -> bool:
    """Fast check if bytes start with the container magic."""
    return bytes(data[:len(MAGIC)]) == MAGIC


def decode_size(field: bytes) -> int:
    """Decode the 4-byte little-endian size field."""
    if len(field) != SIZE_FIELD_LENGTH:
        raise FormatError(
            f"Size field must be {SIZE_FIELD_LENGTH} bytes, got {len(field)}"
        )
    return SIZE_STRUCT.unpack(field)[0]


def encode_size(n: int) -> bytes:
    """Encode a size as 4 little-endian bytes. Inverse of decode_size."""
    if not isinstance(n, int) or n < 0 or n > MAX_DECLARED_SIZE:
        raise FormatError(
            f"Size {n!r} does not fit the uint32 size field (max {MAX_DECLARED_SIZE})"
        )
    return SIZE_STRUCT.pack(n)


def build_header(n: int) -> bytes:
    """Build the 12-byte header for a payload that decompresses to n bytes."""
    return MAGIC + encode_size(n)


def parse_header(data: bytes) -> tuple[int, int]:
    """Validate the header. Returns (uncompressed_size, payload_offset).

    Raises FormatError when the input is shorter than the header or the
    first 8 bytes are not the magic.
    """
    if len(data) < HEADER_SIZE:
        raise FormatError(
            f"Input too small: {len(data)} bytes (header is {HEADER_SIZE})"
        )
    magic, size = HEADER_STRUCT.unpack_from(data, 0)
    if magic != MAGIC:
        raise FormatError(f"Bad magic: expected {MAGIC!r}, got {magic!r}")
    log.debug("Header OK: declared size %d, payload %d bytes", size, len(data) - HEADER_SIZE)
    return size, HEADER_SIZE
