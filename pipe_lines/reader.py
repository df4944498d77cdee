import logging
import sys
from enum import Enum
from typing import BinaryIO, Optional, Union

from .config import DEFAULT_CHUNK_SIZE, ReaderConfig
from .errors import StreamReadError
from .lines import END_OF_STREAM, EndOfStream, Line, ReadFailure

LOGGER = logging.getLogger(__name__)

Produced = Union[Line, EndOfStream, ReadFailure]


class ReaderState(str, Enum):
    READING = "reading"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class LineStreamReader:
    """Pull lines from a blocking byte stream, one call at a time.

    The stream is borrowed: the reader never closes it. Lines may be of any
    length; the pending bytes live in a growable buffer that is trimmed after
    every line handed out. Not thread-safe.
    """

    def __init__(
        self,
        stream: BinaryIO,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        terminator: bytes = b"\n",
        keep_terminator: bool = False,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        if len(terminator) != 1:
            raise ValueError("terminator must be a single byte")
        self._stream = stream
        self._read = getattr(stream, "read1", None) or stream.read
        self._chunk_size = chunk_size
        self._terminator = terminator
        self._keep_terminator = keep_terminator
        self._buffer = bytearray()
        # Offset up to which the buffer is known to hold no terminator
        self._scanned = 0
        self._eof = False
        self._state = ReaderState.READING
        self._failure: Optional[ReadFailure] = None

    @classmethod
    def from_config(cls, stream: BinaryIO, config: ReaderConfig) -> "LineStreamReader":
        return cls(
            stream,
            chunk_size=config.chunk_size,
            terminator=config.terminator,
            keep_terminator=config.keep_terminator,
        )

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def failure(self) -> Optional[ReadFailure]:
        return self._failure

    def produce_next_line(self) -> Produced:
        """Return the next Line, END_OF_STREAM or the ReadFailure that ended the stream."""
        if self._state is ReaderState.EXHAUSTED:
            return END_OF_STREAM
        if self._state is ReaderState.FAILED:
            return self._failure

        while True:
            end = self._buffer.find(self._terminator, self._scanned)
            if end != -1:
                return self._take(end + 1, terminated=True)
            if self._eof:
                if self._buffer:
                    return self._take(len(self._buffer), terminated=False)
                self._state = ReaderState.EXHAUSTED
                LOGGER.debug("stream exhausted")
                return END_OF_STREAM
            self._scanned = len(self._buffer)

            try:
                data = self._read(self._chunk_size)
                if data is None:
                    raise BlockingIOError("stream is in non-blocking mode and has no data ready")
            except Exception as exc:
                return self._fail(exc)
            if data:
                self._buffer.extend(data)
            else:
                self._eof = True

    def _take(self, size: int, *, terminated: bool) -> Line:
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        self._scanned = 0
        if terminated and not self._keep_terminator:
            data = data[:-1]
        return Line(data, terminated, self._terminator, self._keep_terminator)

    def _fail(self, exc: BaseException) -> ReadFailure:
        self._failure = ReadFailure(exc)
        self._state = ReaderState.FAILED
        # Unterminated bytes are dropped, never reported as a line
        self._buffer = bytearray()
        LOGGER.warning("read from stream failed: %r", exc)
        return self._failure

    def __iter__(self):
        return self

    def __next__(self) -> Line:
        result = self.produce_next_line()
        if isinstance(result, Line):
            return result
        if isinstance(result, ReadFailure):
            raise StreamReadError(result.cause) from result.cause
        raise StopIteration


def stdin_reader(config: Optional[ReaderConfig] = None) -> LineStreamReader:
    """Reader bound to the process's standard input."""
    return LineStreamReader.from_config(sys.stdin.buffer, config or ReaderConfig())
