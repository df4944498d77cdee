"""Command line entry point: ``pipe-lines echo`` and ``pipe-lines count`` over stdin."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import ALLOWED_ERROR_POLICIES, ReaderConfig, load_reader_config
from .consumers import LineCounter, echo_lines, transcode_lines
from .errors import ConfigError, StreamReadError
from .reader import LineStreamReader

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_READ_FAILURE = 1
EXIT_USAGE = 2


def command_echo(args: argparse.Namespace, config: ReaderConfig) -> int:
    reader = LineStreamReader.from_config(args.stdin, config)
    lines = transcode_lines(reader, config) if args.text else reader
    written = echo_lines(lines, args.stdout, number=args.number)
    LOGGER.debug("echoed %d line(s)", written)
    return EXIT_OK


def command_count(args: argparse.Namespace, config: ReaderConfig) -> int:
    reader = LineStreamReader.from_config(args.stdin, config)
    total = LineCounter().consume(reader)
    args.stdout.write(b"%d\n" % total)
    args.stdout.flush()
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pipe-lines", description="Read lines piped into standard input")
    parser.add_argument("--config", help="JSON file with reader settings")
    parser.add_argument("--chunk-size", type=int, help="bytes requested per read")
    parser.add_argument("--terminator", help="line terminator byte, escapes such as '\\0' allowed")
    parser.add_argument("--encoding", help="input encoding for 'echo --text'")
    parser.add_argument(
        "--error-policy",
        choices=sorted(ALLOWED_ERROR_POLICIES),
        help="how 'echo --text' treats undecodable bytes",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="stderr logging level",
    )
    subparsers = parser.add_subparsers(dest="command")

    echo = subparsers.add_parser("echo", help="Copy every line to stdout")
    echo.add_argument("--number", action="store_true", help="prefix each line with its number")
    echo.add_argument("--text", action="store_true", help="decode input with --encoding and write UTF-8")
    echo.set_defaults(func=command_echo)

    count = subparsers.add_parser("count", help="Print the number of lines")
    count.set_defaults(func=command_count)
    return parser


def main(argv: Optional[List[str]] = None, *, stdin=None, stdout=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_USAGE

    logging.basicConfig(level=args.log_level, stream=sys.stderr, format="%(name)s: %(levelname)s: %(message)s")
    args.stdin = stdin if stdin is not None else sys.stdin.buffer
    args.stdout = stdout if stdout is not None else sys.stdout.buffer

    try:
        config = load_reader_config(
            Path(args.config) if args.config else None,
            overrides={
                "chunk_size": args.chunk_size,
                "terminator": args.terminator,
                "encoding": args.encoding,
                "error_policy": args.error_policy,
            },
        )
    except ConfigError as exc:
        print(f"pipe-lines: {exc}", file=sys.stderr)
        return EXIT_USAGE

    try:
        return args.func(args, config)
    except StreamReadError as exc:
        print(f"pipe-lines: error reading standard input: {exc.cause}", file=sys.stderr)
        return EXIT_READ_FAILURE
    except UnicodeDecodeError as exc:
        print(f"pipe-lines: input is not valid {config.encoding}: {exc.reason}", file=sys.stderr)
        return EXIT_READ_FAILURE
    except BrokenPipeError:
        # Downstream closed early (e.g. `| head`)
        return EXIT_READ_FAILURE


if __name__ == "__main__":
    sys.exit(main())
