"""
Tests for the container codec and the LZ4 block adapter.

Most tests use the real lz4 package; size-mismatch and failure paths that
LZ4 cannot produce on demand use an injected in-memory compressor.
"""

from __future__ import annotations

import json
import logging
import random

import lz4.block
import pytest

import mozlz4
from mozlz4 import HEADER_SIZE, LZ4_MAX_INPUT_SIZE, MAGIC
from mozlz4._format.spec import FormatError, build_header, decode_size
from mozlz4.block import CodecError, Lz4BlockCompressor, _status_from
from mozlz4.codec import ContainerCodec


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

class StoreCompressor:
    """Identity "compressor": blocks are stored verbatim."""

    def __init__(self, fail_compress: bool = False) -> None:
        self.fail_compress = fail_compress
        self.calls: list[tuple[str, int]] = []

    def compress_bound(self, n: int) -> int:
        return n + 16

    def compress(self, src: bytes) -> bytes:
        self.calls.append(("compress", len(src)))
        if self.fail_compress:
            return b""
        return bytes(src)

    def decompress(self, src: bytes, max_out: int) -> bytes:
        self.calls.append(("decompress", max_out))
        data = bytes(src)
        if len(data) > max_out:
            raise CodecError("decompression failed: -3", -3)
        return data


@pytest.fixture
def codec():
    return ContainerCodec()


@pytest.fixture
def store_codec():
    return ContainerCodec(compressor=StoreCompressor())


@pytest.fixture
def bookmarks_json():
    """A small Firefox-style bookmarks backup."""
    doc = {
        "guid": "root________",
        "title": "",
        "type": "text/x-moz-place-container",
        "children": [
            {"guid": f"bm{i:010d}", "title": f"Bookmark {i}", "uri": f"https://example.com/{i}"}
            for i in range(200)
        ],
    }
    return json.dumps(doc, separators=(",", ":")).encode("utf-8")


# ---------------------------------------------------------------------------
# TestLz4BlockCompressor
# ---------------------------------------------------------------------------

class TestLz4BlockCompressor:
    """Tests for the lz4.block adapter."""

    def test_bound_formula(self):
        lz = Lz4BlockCompressor()
        assert lz.compress_bound(0) == 16
        assert lz.compress_bound(255) == 255 + 1 + 16
        assert lz.compress_bound(LZ4_MAX_INPUT_SIZE) > LZ4_MAX_INPUT_SIZE

    def test_bound_too_large(self):
        assert Lz4BlockCompressor.compress_bound(LZ4_MAX_INPUT_SIZE + 1) == 0

    def test_no_size_prefix(self):
        """Blocks are raw: identical to lz4.block with store_size=False."""
        data = b"hello hello hello hello"
        assert Lz4BlockCompressor().compress(data) == lz4.block.compress(data, store_size=False)

    def test_round_trip(self, bookmarks_json):
        lz = Lz4BlockCompressor()
        blob = lz.compress(bookmarks_json)
        assert len(blob) <= lz.compress_bound(len(bookmarks_json))
        assert lz.decompress(blob, len(bookmarks_json)) == bookmarks_json

    def test_high_compression_mode(self, bookmarks_json):
        lz = Lz4BlockCompressor(mode="high_compression")
        blob = lz.compress(bookmarks_json)
        assert Lz4BlockCompressor().decompress(blob, len(bookmarks_json)) == bookmarks_json

    def test_corrupt_input(self):
        with pytest.raises(CodecError, match="decompression failed") as exc:
            Lz4BlockCompressor().decompress(b"\xff" * 8, 100)
        assert exc.value.status < 0

    def test_insufficient_capacity(self):
        blob = lz4.block.compress(b"a" * 90, store_size=False)
        with pytest.raises(CodecError) as exc:
            Lz4BlockCompressor().decompress(blob, 10)
        assert exc.value.status < 0

    def test_status_parsing(self):
        assert _status_from(Exception("corrupt input. Error code: 17")) == -17
        assert _status_from(Exception("something else")) == -1

    def test_allocation_failure(self, monkeypatch):
        def _no_memory(src, uncompressed_size):
            raise MemoryError

        monkeypatch.setattr(lz4.block, "decompress", _no_memory)
        with pytest.raises(CodecError, match="cannot allocate 4096 bytes") as exc:
            Lz4BlockCompressor().decompress(b"\x00", 4096)
        assert exc.value.status == -1


# ---------------------------------------------------------------------------
# TestDecode
# ---------------------------------------------------------------------------

class TestDecode:
    """Tests for ContainerCodec.decode."""

    def test_hello(self, codec):
        blob = (
            bytes([0x6D, 0x6F, 0x7A, 0x4C, 0x7A, 0x34, 0x30, 0x00])
            + bytes([0x05, 0x00, 0x00, 0x00])
            + lz4.block.compress(b"hello", store_size=False)
        )
        assert codec.decode(blob) == b"hello"

    def test_passes_declared_size(self):
        compressor = StoreCompressor()
        ContainerCodec(compressor=compressor).decode(build_header(3) + b"abc")
        assert compressor.calls == [("decompress", 3)]

    def test_too_short(self, codec):
        with pytest.raises(FormatError):
            codec.decode(b"moz\x00")

    def test_bad_magic(self, codec):
        with pytest.raises(FormatError, match="Bad magic"):
            codec.decode(b"xozLz40\x00" + b"\x05\x00\x00\x00" + b"\x50hello")

    def test_corrupt_payload(self, codec):
        with pytest.raises(CodecError) as exc:
            codec.decode(build_header(100) + b"\xff" * 8)
        assert exc.value.status < 0

    def test_undershoot_warns(self, codec, caplog):
        """Declared 100, actual 90: warning, the 90 bytes are returned."""
        data = bytes(range(90))
        blob = build_header(100) + lz4.block.compress(data, store_size=False)
        with caplog.at_level(logging.WARNING, logger="mozlz4.codec"):
            out = codec.decode(blob)
        assert out == data
        assert "decompressed size 90 differs from declared size 100" in caplog.text

    def test_overshoot_warns(self, caplog):
        """Mismatch in the other direction follows the same policy."""

        class GenerousCompressor(StoreCompressor):
            def decompress(self, src, max_out):
                return bytes(src) + b"!"

        codec = ContainerCodec(compressor=GenerousCompressor())
        with caplog.at_level(logging.WARNING, logger="mozlz4.codec"):
            out = codec.decode(build_header(3) + b"abc")
        assert out == b"abc!"
        assert "differs from declared size 3" in caplog.text

    def test_exact_size_no_warning(self, codec, caplog):
        blob = codec.encode(b"exact")
        with caplog.at_level(logging.WARNING, logger="mozlz4.codec"):
            codec.decode(blob)
        assert [r for r in caplog.records if r.levelno >= logging.WARNING] == []

    def test_store_empty_payload(self, store_codec):
        assert store_codec.decode(build_header(0)) == b""


# ---------------------------------------------------------------------------
# TestEncode
# ---------------------------------------------------------------------------

class TestEncode:
    """Tests for ContainerCodec.encode."""

    def test_header(self, codec, bookmarks_json):
        blob = codec.encode(bookmarks_json)
        assert blob[:8] == MAGIC
        assert decode_size(blob[8:HEADER_SIZE]) == len(bookmarks_json)

    def test_no_slack_emitted(self, codec, bookmarks_json):
        blob = codec.encode(bookmarks_json)
        expected = lz4.block.compress(bookmarks_json, store_size=False)
        assert blob == build_header(len(bookmarks_json)) + expected

    def test_compresses(self, codec, bookmarks_json):
        assert len(codec.encode(bookmarks_json)) < len(bookmarks_json)

    def test_compression_failure(self):
        codec = ContainerCodec(compressor=StoreCompressor(fail_compress=True))
        with pytest.raises(CodecError, match="compression failed"):
            codec.encode(b"data")

    def test_bound_exceeded(self):
        class Bloated(StoreCompressor):
            def compress(self, src):
                return bytes(src) * 3

        codec = ContainerCodec(compressor=Bloated())
        with pytest.raises(CodecError, match="exceeds bound"):
            codec.encode(b"0123456789abcdef0123")

    def test_input_too_large(self):
        class NoBound(StoreCompressor):
            def compress_bound(self, n):
                return 0

        with pytest.raises(CodecError, match="too large"):
            ContainerCodec(compressor=NoBound()).encode(b"x")

    def test_store_layout(self, store_codec):
        assert store_codec.encode(b"abc") == MAGIC + b"\x03\x00\x00\x00" + b"abc"


# ---------------------------------------------------------------------------
# TestRoundTrip
# ---------------------------------------------------------------------------

class TestRoundTrip:
    """decode(encode(B)) == B."""

    @pytest.mark.parametrize("size", [1, 5, 255, 4096, 70_000])
    def test_random_bytes(self, codec, size):
        data = random.Random(size).randbytes(size)
        assert codec.decode(codec.encode(data)) == data

    def test_bookmarks(self, codec, bookmarks_json):
        assert codec.decode(codec.encode(bookmarks_json)) == bookmarks_json

    def test_module_level_helpers(self, bookmarks_json):
        assert mozlz4.decode(mozlz4.encode(bookmarks_json)) == bookmarks_json

    def test_empty(self, codec):
        blob = codec.encode(b"")
        assert blob[:HEADER_SIZE] == build_header(0)
        assert codec.decode(blob) == b""

    def test_store_empty_rejected(self, store_codec):
        """A compressor that yields no bytes for empty input is a failure."""
        with pytest.raises(CodecError, match="compression failed"):
            store_codec.encode(b"")


# ---------------------------------------------------------------------------
# TestFilePipelines
# ---------------------------------------------------------------------------

class TestFilePipelines:
    """Tests for decode_file / encode_file."""

    def test_encode_then_decode_files(self, codec, tmp_path, bookmarks_json):
        raw = tmp_path / "bookmarks.json"
        packed = tmp_path / "bookmarks.jsonlz4"
        unpacked = tmp_path / "roundtrip.json"
        raw.write_bytes(bookmarks_json)

        codec.encode_file(raw, packed)
        assert packed.read_bytes()[:8] == MAGIC
        assert codec.decode_file(packed, unpacked) == len(bookmarks_json)
        assert unpacked.read_bytes() == bookmarks_json

    def test_bad_input_writes_nothing(self, codec, tmp_path):
        src = tmp_path / "tiny.jsonlz4"
        dst = tmp_path / "out.json"
        src.write_bytes(b"moz\x00")
        with pytest.raises(FormatError):
            codec.decode_file(src, dst)
        assert not dst.exists()

    def test_small_initial_capacity(self, tmp_path, bookmarks_json):
        codec = ContainerCodec(initial_capacity=16)
        raw = tmp_path / "in.json"
        raw.write_bytes(bookmarks_json)
        packed = tmp_path / "in.jsonlz4"
        codec.encode_file(raw, packed)
        assert codec.decode(packed.read_bytes()) == bookmarks_json
