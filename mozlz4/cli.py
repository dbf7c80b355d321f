"""
mozlz4 CLI - decode and encode Firefox mozLz4 containers.

Commands:
  dejsonlz4 [-h] IN_FILE [OUT_FILE]   - Decompress a container (stdin/stdout for "-" or omitted)
  jsonlz4   [-h] IN_FILE OUT_FILE     - Compress into a container ("-" for stdin/stdout)
  mozlz4 decode ...                   - Same as dejsonlz4
  mozlz4 encode ...                   - Same as jsonlz4

Exit codes: 0 on success (a size-mismatch warning still exits 0),
1 on usage, I/O, format or codec errors. "-h" alone prints usage and exits 0.
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, Sequence

DECODE_USAGE = """\
Usage: dejsonlz4 [-h] IN_FILE [OUT_FILE]
   -h: Display this help and exit.
Decompress Mozilla bookmark backup file IN_FILE to OUT_FILE.
If IN_FILE is not provided or is '-' then decompress from standard input.
If OUT_FILE is not provided or is '-' then decompress to standard output.
"""

ENCODE_USAGE = """\
Usage: jsonlz4 [-h] IN_FILE OUT_FILE
   -h: Display this help and exit.
Compress IN_FILE to OUT_FILE with same format as Firefox bookmarks backup.
If IN_FILE is '-', compress from standard input.
If OUT_FILE is '-', compress to standard output.
Note: IN_FILE is transferred to memory entirely before compressing.
Compression is also done in memory entirely before output.
"""

MAIN_USAGE = """\
Usage: mozlz4 {decode|encode} [-h] IN_FILE [OUT_FILE]
  mozlz4 decode bookmarks.jsonlz4 bookmarks.json
  mozlz4 encode bookmarks.json bookmarks.jsonlz4
Run 'mozlz4 <command> -h' for details on any command.
"""


class UsageError(Exception):
    """Malformed command line."""


def _parse_operands(argv: Sequence[str], min_count: int, max_count: int) -> list[str]:
    """Take operands verbatim, so a file named "-in.json" is still a file.

    "-h" is only meaningful on its own; alongside other operands it is a
    usage error.
    """
    operands = list(argv)
    if "-h" in operands:
        raise UsageError("-h takes no operands")
    count = len(operands)
    if not min_count <= count <= max_count:
        raise UsageError(
            f"expected {min_count}-{max_count} operands, got {count}"
        )
    return operands


def _usage(text: str, code: int) -> int:
    print(text, end="", file=sys.stdout if code == 0 else sys.stderr)
    return code


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def _run(action: Callable[[str | None, str | None], int], source: str | None, destination: str | None) -> int:
    """Run a file pipeline, mapping its failures to one stderr line and exit 1."""
    from mozlz4._format.reader import ReadError
    from mozlz4._format.spec import FormatError
    from mozlz4._format.writer import WriteError
    from mozlz4.block import CodecError

    try:
        action(source, destination)
    except (ReadError, WriteError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except FormatError as e:
        print(f"Error: incorrect header or file too small ({e})", file=sys.stderr)
        return 1
    except CodecError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_decode(argv: Sequence[str]) -> int:
    """dejsonlz4: container -> raw bytes."""
    from mozlz4.codec import ContainerCodec

    if list(argv) == ["-h"]:
        return _usage(DECODE_USAGE, 0)
    try:
        operands = _parse_operands(argv, 0, 2)
    except UsageError:
        return _usage(DECODE_USAGE, 1)

    source = operands[0] if operands else None
    destination = operands[1] if len(operands) > 1 else None
    _configure_logging()
    return _run(ContainerCodec().decode_file, source, destination)


def cmd_encode(argv: Sequence[str]) -> int:
    """jsonlz4: raw bytes -> container."""
    from mozlz4.codec import ContainerCodec

    if list(argv) == ["-h"]:
        return _usage(ENCODE_USAGE, 0)
    try:
        source, destination = _parse_operands(argv, 2, 2)
    except UsageError:
        return _usage(ENCODE_USAGE, 1)

    _configure_logging()
    return _run(ContainerCodec().encode_file, source, destination)


def decode_main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``dejsonlz4``."""
    return cmd_decode(sys.argv[1:] if argv is None else argv)


def encode_main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``jsonlz4``."""
    return cmd_encode(sys.argv[1:] if argv is None else argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``mozlz4 {decode|encode}``."""
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv or argv == ["-h"] or argv == ["--help"]:
        return _usage(MAIN_USAGE, 0)

    commands = {
        "decode": cmd_decode,
        "encode": cmd_encode,
    }
    command = commands.get(argv[0])
    if command is None:
        return _usage(MAIN_USAGE, 1)
    return command(argv[1:])


if __name__ == "__main__":
    sys.exit(main())
