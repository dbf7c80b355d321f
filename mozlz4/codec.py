"""
Container codec - glue between the header layer and the block compressor.

Decode:  parse_header -> decompress(payload, declared_size) -> bytes
Encode:  compress_bound -> header + compress(data) -> bytes

A declared size that disagrees with what the compressor produced is not
fatal: it is logged as a warning and the produced bytes are returned.
"""

from __future__ import annotations

import logging

from mozlz4 import INITIAL_READ_CAPACITY, MAX_INPUT_SIZE
from mozlz4._format.reader import Buffer, Source, read_source
from mozlz4._format.spec import build_header, parse_header
from mozlz4._format.writer import Destination, write_output
from mozlz4.block import BlockCompressor, CodecError, Lz4BlockCompressor

log = logging.getLogger(__name__)


class ContainerCodec:
    """Encode/decode mozLz4 containers.

    Usage:
        codec = ContainerCodec()
        blob = codec.encode(b'{"roots": {}}')
        data = codec.decode(blob)

        # Whole pipeline: file/stdin -> file/stdout
        codec.decode_file("bookmarks.jsonlz4", "bookmarks.json")
    """

    def __init__(
        self,
        compressor: BlockCompressor | None = None,
        initial_capacity: int = INITIAL_READ_CAPACITY,
        max_size: int = MAX_INPUT_SIZE,
    ) -> None:
        self.compressor = compressor or Lz4BlockCompressor()
        self.initial_capacity = initial_capacity
        self.max_size = max_size

    def decode(self, data: bytes) -> bytes:
        """Decode a full container. Raises FormatError or CodecError."""
        declared, offset = parse_header(data)
        out = self.compressor.decompress(data[offset:], declared)
        if len(out) != declared:
            log.warning(
                "decompressed size %d differs from declared size %d",
                len(out), declared,
            )
        return out

    def encode(self, data: bytes) -> bytes:
        """Wrap ``data`` in a container. Raises CodecError or FormatError."""
        size = len(data)
        bound = self.compressor.compress_bound(size)
        if bound <= 0:
            raise CodecError(f"compression failed: input of {size} bytes is too large")

        compressed = self.compressor.compress(data)
        if not compressed:
            raise CodecError("compression failed")
        if len(compressed) > bound:
            raise CodecError(
                f"compression failed: {len(compressed)} bytes exceeds bound {bound}"
            )
        out = build_header(size) + compressed
        log.debug("Encoded %d bytes into %d-byte container", size, len(out))
        return out

    def _read(self, source: Source) -> Buffer:
        return read_source(source, self.initial_capacity, self.max_size)

    def decode_file(self, source: Source = None, destination: Destination = None) -> int:
        """Decode ``source`` (path, or stdin for None/"-") to ``destination``.

        Nothing is written unless decoding succeeds. Returns bytes written.
        """
        with self._read(source) as buf:
            with buf.view() as view:
                out = self.decode(view)
        return write_output(out, destination)

    def encode_file(self, source: Source = None, destination: Destination = None) -> int:
        """Encode ``source`` (path, or stdin for None/"-") to ``destination``."""
        with self._read(source) as buf:
            with buf.view() as view:
                out = self.encode(view)
        return write_output(out, destination)


_default_codec: ContainerCodec | None = None


def _codec() -> ContainerCodec:
    global _default_codec
    if _default_codec is None:
        _default_codec = ContainerCodec()
    return _default_codec


def decode(data: bytes) -> bytes:
    """Decode a container with the default LZ4 codec."""
    return _codec().decode(data)


def encode(data: bytes) -> bytes:
    """Encode ``data`` into a container with the default LZ4 codec."""
    return _codec().encode(data)
