"""
Reader - pulls an entire input source into memory.

Growth strategy:
  - Start at INITIAL_READ_CAPACITY (32 KiB)
  - Fill the unused tail with readinto() until it is full or a read returns 0
  - Tail full: double the capacity and keep reading
  - Read returned 0 before the tail was full: clean end of input

Failure modes (all raise ReadError, never a truncated buffer):
  - open/read OSError
  - MemoryError while growing
  - input larger than max_size
"""

from __future__ import annotations

import io
import logging
import os
import sys
from typing import BinaryIO, Union

from mozlz4 import INITIAL_READ_CAPACITY, MAX_INPUT_SIZE, STDIN_NAME

log = logging.getLogger(__name__)

Source = Union[str, "os.PathLike[str]", None]


class ReadError(OSError):
    """Input could not be read completely."""

    def __init__(self, message: str, *, source: str = "") -> None:
        super().__init__(message)
        self.source = source


class Buffer:
    """Owned, growable byte container.

    ``capacity`` only ever grows; ``length`` counts the filled prefix and
    never exceeds ``capacity``. Use as a context manager to release the
    storage deterministically on scope exit.

    Usage:
        with Buffer(1024) as buf:
            buf.append(b"data")
            payload = buf.getvalue()
    """

    def __init__(self, capacity: int = 0) -> None:
        self._data = bytearray(capacity)
        self.length = 0
        self._released = False

    @property
    def capacity(self) -> int:
        return len(self._data)

    @property
    def released(self) -> bool:
        return self._released

    def reserve(self, capacity: int) -> None:
        """Grow storage to at least ``capacity`` bytes. Never shrinks."""
        self._check_live()
        extra = capacity - len(self._data)
        if extra > 0:
            self._data.extend(bytes(extra))

    def writable(self) -> memoryview:
        """View of the unused tail. Release it before calling reserve()."""
        self._check_live()
        return memoryview(self._data)[self.length:]

    def commit(self, n: int) -> None:
        """Mark ``n`` more bytes of the tail as filled."""
        if n < 0 or self.length + n > len(self._data):
            raise ValueError(
                f"Cannot commit {n} bytes: length {self.length}, capacity {len(self._data)}"
            )
        self.length += n

    def append(self, data: bytes) -> None:
        """Copy ``data`` after the filled prefix, growing if needed."""
        needed = self.length + len(data)
        if needed > len(self._data):
            self.reserve(max(needed, 2 * len(self._data)))
        self._data[self.length:needed] = data
        self.length = needed

    def view(self) -> memoryview:
        """Zero-copy view of the filled prefix."""
        self._check_live()
        return memoryview(self._data)[:self.length]

    def getvalue(self) -> bytes:
        with self.view() as v:
            return bytes(v)

    def release(self) -> None:
        """Drop the storage. Safe to call more than once."""
        self._data = bytearray()
        self.length = 0
        self._released = True

    def _check_live(self) -> None:
        if self._released:
            raise ValueError("Buffer has been released")

    def __len__(self) -> int:
        return self.length

    def __bytes__(self) -> bytes:
        return self.getvalue()

    def __enter__(self) -> Buffer:
        return self

    def __exit__(self, *args) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"Buffer(length={self.length}, capacity={self.capacity})"


def ensure_binary(stream: BinaryIO) -> bool:
    """Disable end-of-line translation on a standard stream.

    Only Windows translates; elsewhere this is a no-op. Returns False when
    the mode could not be switched.
    """
    if sys.platform != "win32":
        return True
    try:
        import msvcrt

        msvcrt.setmode(stream.fileno(), os.O_BINARY)
    except (OSError, ValueError, AttributeError, io.UnsupportedOperation):
        return False
    return True


def _fill(stream: BinaryIO, tail: memoryview) -> int:
    """Read into ``tail`` until it is full or the stream reports EOF."""
    got = 0
    while got < len(tail):
        n = stream.readinto(tail[got:])
        if n is None:
            raise BlockingIOError("source is non-blocking and has no data ready")
        if n == 0:
            break
        got += n
    return got


def read_stream(
    stream: BinaryIO,
    name: str = STDIN_NAME,
    initial_capacity: int = INITIAL_READ_CAPACITY,
    max_size: int = MAX_INPUT_SIZE,
) -> Buffer:
    """Read ``stream`` to EOF into a new Buffer.

    The buffer starts at ``initial_capacity`` and doubles whenever a fill
    leaves no room. Returns only after a clean end of input; any error
    releases the partial buffer and raises ReadError.
    """
    if initial_capacity < 1:
        raise ValueError(f"initial_capacity must be positive, got {initial_capacity}")

    try:
        buf = Buffer(min(initial_capacity, max_size + 1))
    except MemoryError as e:
        raise ReadError(f"cannot read file '{name}': out of memory", source=name) from e

    try:
        while True:
            with buf.writable() as tail:
                got = _fill(stream, tail)
            buf.commit(got)
            if buf.length < buf.capacity:
                break
            if buf.length > max_size:
                raise ReadError(
                    f"cannot read file '{name}': input exceeds {max_size} bytes",
                    source=name,
                )
            new_capacity = min(buf.capacity * 2, max_size + 1)
            log.debug("Growing read buffer for %s: %d -> %d", name, buf.capacity, new_capacity)
            buf.reserve(new_capacity)
    except ReadError:
        buf.release()
        raise
    except (OSError, MemoryError) as e:
        buf.release()
        reason = "out of memory" if isinstance(e, MemoryError) else (e.strerror or str(e))
        raise ReadError(f"cannot read file '{name}': {reason}", source=name) from e
    except Exception:
        buf.release()
        raise

    log.debug("Read %d bytes from %s", buf.length, name)
    return buf


def read_source(
    source: Source = None,
    initial_capacity: int = INITIAL_READ_CAPACITY,
    max_size: int = MAX_INPUT_SIZE,
) -> Buffer:
    """Read a named file, or standard input when ``source`` is None or "-"."""
    if source is None or source == "-":
        stream = sys.stdin.buffer
        if not ensure_binary(stream):
            log.warning("cannot set stdin to binary mode")
        return read_stream(stream, STDIN_NAME, initial_capacity, max_size)

    name = os.fspath(source)
    try:
        f = open(name, "rb")
    except OSError as e:
        raise ReadError(
            f"cannot read file '{name}': {e.strerror or e}", source=name
        ) from e
    with f:
        return read_stream(f, name, initial_capacity, max_size)
