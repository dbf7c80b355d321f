"""
Block compression primitive - raw LZ4 blocks via the ``lz4`` package.

The container stores the uncompressed size itself, so blocks are written
and read without lz4's own 4-byte size prefix (``store_size=False``).

Contract used by the codec:
    compress_bound(n)        -> worst-case compressed size, 0 if n is too large
    compress(src)            -> compressed bytes
    decompress(src, max_out) -> at most max_out bytes

Failures surface as CodecError carrying a negative status, matching the
LZ4 C API convention (status = -error_code).
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

import lz4.block

from mozlz4 import LZ4_MAX_INPUT_SIZE

log = logging.getLogger(__name__)

_ERROR_CODE_RE = re.compile(r"Error code:\s*(\d+)")


class CodecError(Exception):
    """The block compressor reported a failure."""

    def __init__(self, message: str, status: int = -1) -> None:
        super().__init__(message)
        self.status = status


class BlockCompressor(Protocol):
    """Anything the container codec can delegate block (de)compression to."""

    def compress_bound(self, n: int) -> int: ...

    def compress(self, src: bytes) -> bytes: ...

    def decompress(self, src: bytes, max_out: int) -> bytes: ...


def _status_from(exc: Exception) -> int:
    """Recover the negative LZ4 status from an lz4.block error message."""
    match = _ERROR_CODE_RE.search(str(exc))
    if match:
        return -int(match.group(1))
    return -1


class Lz4BlockCompressor:
    """LZ4 block compressor backed by ``lz4.block``.

    Usage:
        lz = Lz4BlockCompressor()
        blob = lz.compress(b"hello")
        assert lz.decompress(blob, 5) == b"hello"
    """

    def __init__(self, mode: str = "default", acceleration: int = 1) -> None:
        self.mode = mode
        self.acceleration = acceleration

    @staticmethod
    def compress_bound(n: int) -> int:
        """LZ4_COMPRESSBOUND: n + n/255 + 16, or 0 past LZ4_MAX_INPUT_SIZE."""
        if n < 0 or n > LZ4_MAX_INPUT_SIZE:
            return 0
        return n + n // 255 + 16

    def compress(self, src: bytes) -> bytes:
        try:
            out = lz4.block.compress(
                src,
                mode=self.mode,
                acceleration=self.acceleration,
                store_size=False,
            )
        except lz4.block.LZ4BlockError as e:
            raise CodecError(f"compression failed: {e}", _status_from(e)) from e
        log.debug("LZ4 compressed %d -> %d bytes", len(src), len(out))
        return out

    def decompress(self, src: bytes, max_out: int) -> bytes:
        try:
            out = lz4.block.decompress(src, uncompressed_size=max_out)
        except lz4.block.LZ4BlockError as e:
            status = _status_from(e)
            raise CodecError(f"decompression failed: {status}", status) from e
        except MemoryError as e:
            raise CodecError(f"cannot allocate {max_out} bytes for output") from e
        log.debug("LZ4 decompressed %d -> %d bytes (capacity %d)", len(src), len(out), max_out)
        return out
