"""
Writer - emits a finished byte buffer to a file or standard output.

Sinks:
  - "-" / None: sys.stdout.buffer, switched to binary mode first
  - named path: opened with "wb" (created or truncated in place)

Every write loops until all bytes are out; a short write that makes no
progress raises WriteError instead of silently dropping the tail.
"""

from __future__ import annotations

import contextlib
import logging
import os
import sys
from typing import BinaryIO, Union

from mozlz4 import STDOUT_NAME
from mozlz4._format.reader import ensure_binary

log = logging.getLogger(__name__)

Destination = Union[str, "os.PathLike[str]", None]


class WriteError(OSError):
    """Output could not be written completely."""

    def __init__(self, message: str, *, destination: str = "") -> None:
        super().__init__(message)
        self.destination = destination


def _write_all(sink: BinaryIO, data: bytes, name: str) -> int:
    """Write every byte of ``data`` to ``sink``. Returns bytes written."""
    total = len(data)
    written = 0
    with memoryview(data) as view:
        while written < total:
            n = sink.write(view[written:])
            if not n:
                raise WriteError(
                    f"cannot write to '{name}': wrote {written} of {total} bytes",
                    destination=name,
                )
            written += n
    sink.flush()
    return written


def write_output(data: bytes, destination: Destination = None) -> int:
    """Write ``data`` to a named path, or stdout when ``destination`` is None or "-".

    A named path is created or truncated in place, so symlinks are followed
    and an existing file keeps its permission bits. Returns the number of
    bytes written. Raises WriteError naming the sink on any failure.
    """
    if destination is None or destination == "-":
        sink = sys.stdout.buffer
        if not ensure_binary(sink):
            log.warning("cannot set stdout to binary mode")
        name = STDOUT_NAME
    else:
        name = os.fspath(destination)
        try:
            sink = open(name, "wb")
        except OSError as e:
            raise WriteError(
                f"cannot open '{name}' for writing: {e.strerror or e}", destination=name
            ) from e

    try:
        with sink if name != STDOUT_NAME else contextlib.nullcontext(sink) as f:
            written = _write_all(f, data, name)
    except WriteError:
        raise
    except OSError as e:
        raise WriteError(
            f"cannot write to '{name}': {e.strerror or e}", destination=name
        ) from e
    log.debug("Wrote %d bytes to %s", written, name)
    return written
