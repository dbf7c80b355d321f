"""
Internal container format engine.

Format: "mozLz40\\0" magic + uint32 LE uncompressed size + LZ4 block.
The size field is advisory - the LZ4 block carries no length of its own,
so the declared size is the output capacity handed to the decompressor.

This is an internal dependency - not a public API.
"""

from mozlz4._format.spec import (
    HEADER_STRUCT, FormatError, build_header, decode_size, encode_size,
    is_container, parse_header,
)
from mozlz4._format.reader import Buffer, ReadError, read_source, read_stream
from mozlz4._format.writer import WriteError, write_output
