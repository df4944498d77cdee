"""Echo every line piped into this script: ``printf 'a\\nb\\n' | python examples/echo_lines.py``."""

import sys

from pipe_lines import END_OF_STREAM, Line, stdin_reader


if __name__ == "__main__":
    reader = stdin_reader()
    while True:
        result = reader.produce_next_line()
        if isinstance(result, Line):
            print(result.text(errors="replace"))
        elif result is END_OF_STREAM:
            break
        else:
            print(f"read failed: {result.cause}", file=sys.stderr)
            sys.exit(1)
