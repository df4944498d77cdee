"""Consumers of line sequences: count, echo, transcode."""

from typing import BinaryIO, Iterable, Iterator

from .config import ReaderConfig
from .lines import Line


class LineCounter:
    def __init__(self):
        self.count = 0

    def feed(self, line: Line) -> None:
        self.count += 1

    def consume(self, lines: Iterable[Line]) -> int:
        """Count every line in ``lines`` and return the running total.

        Read failures raised by the iterable propagate; lines seen before the
        failure stay counted.
        """
        for line in lines:
            self.feed(line)
        return self.count


def transcode_lines(lines: Iterable[Line], config: ReaderConfig, *, target: str = "utf-8") -> Iterator[Line]:
    """Re-encode each line from ``config.encoding`` to ``target``; terminators pass through untouched."""
    for line in lines:
        text = line.trimmed.decode(config.encoding, config.decode_errors)
        content = text.encode(target)
        if line.raw_mode and line.terminated:
            content += line.terminator
        yield Line(content, line.terminated, line.terminator, line.raw_mode)


def echo_lines(lines: Iterable[Line], out: BinaryIO, *, number: bool = False, flush: bool = True) -> int:
    """Write each line to ``out`` as it arrives and return how many were written."""
    written = 0
    for line in lines:
        written += 1
        if number:
            out.write(b"%6d\t" % written)
        out.write(line.raw)
        if flush:
            out.flush()
    return written
