"""
mozlz4 - read and write Firefox "mozLz4" containers (bookmark backups).

Layout:
    Header:   "mozLz40\\0" (8 bytes) + uncompressed size (uint32, little-endian) = 12 bytes
    Payload:  LZ4 block (no frame, no size prefix)
    Tools:    dejsonlz4 (decode), jsonlz4 (encode), mozlz4 {decode,encode}
"""

__version__ = "0.1.0"

# Container constants
MAGIC = b"mozLz40\x00"
MAGIC_HEX = "6d6f7a4c7a343000"
SIZE_FIELD_LENGTH = 4  # uint32 little-endian after the magic
HEADER_SIZE = 12  # 8 (magic) + 4 (size field)
MAX_DECLARED_SIZE = 0xFFFFFFFF

# Reader constants
INITIAL_READ_CAPACITY = 32 * 1024  # 32 KiB, doubled whenever filled
MAX_INPUT_SIZE = 4 * 1024 * 1024 * 1024  # 4 GiB - larger inputs are a read failure

# LZ4 block limits (LZ4_MAX_INPUT_SIZE in lz4.h)
LZ4_MAX_INPUT_SIZE = 0x7E000000

STDIN_NAME = "<stdin>"
STDOUT_NAME = "<stdout>"

from mozlz4._format.spec import FormatError  # noqa: E402
from mozlz4._format.reader import Buffer, ReadError  # noqa: E402
from mozlz4._format.writer import WriteError  # noqa: E402
from mozlz4.block import CodecError  # noqa: E402
from mozlz4.codec import ContainerCodec, decode, encode  # noqa: E402
