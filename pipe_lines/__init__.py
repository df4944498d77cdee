"""Line-by-line reading of piped byte streams."""

from .lines import END_OF_STREAM, EndOfStream, Line, ReadFailure
from .reader import LineStreamReader, ReaderState, stdin_reader
from .streams import AsyncLineStreamReader, stdin_async_reader
from .consumers import LineCounter, echo_lines, transcode_lines
from .config import ReaderConfig, load_reader_config
from .errors import ConfigError, ErrorCode, PipeLinesError, StreamReadError

__all__ = [
    "END_OF_STREAM",
    "EndOfStream",
    "Line",
    "ReadFailure",
    "LineStreamReader",
    "ReaderState",
    "stdin_reader",
    "AsyncLineStreamReader",
    "stdin_async_reader",
    "LineCounter",
    "echo_lines",
    "transcode_lines",
    "ReaderConfig",
    "load_reader_config",
    "ConfigError",
    "ErrorCode",
    "PipeLinesError",
    "StreamReadError",
]
