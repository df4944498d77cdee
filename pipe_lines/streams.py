import os
import sys
import asyncio
import logging
from typing import Optional

from .config import DEFAULT_CHUNK_SIZE, ReaderConfig
from .errors import StreamReadError
from .lines import END_OF_STREAM, Line, ReadFailure
from .reader import Produced, ReaderState

LOGGER = logging.getLogger(__name__)


class AsyncLineStreamReader:
    """Line reader for a non-blocking file descriptor on an asyncio loop.

    Readability is watched only while a caller is waiting for bytes, so the
    reader never reads ahead on its own. Descriptors the loop cannot poll
    (regular files) are read directly.

    With ``manage_blocking=True`` the reader switches ``fd`` to non-blocking
    mode itself and puts the previous mode back once the stream ends, fails
    or the reader is closed.
    """

    def __init__(
        self,
        loop,
        fd: int,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        terminator: bytes = b"\n",
        keep_terminator: bool = False,
        manage_blocking: bool = False,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        if len(terminator) != 1:
            raise ValueError("terminator must be a single byte")
        self._loop = loop
        self._fd = fd
        self._chunk_size = chunk_size
        self._terminator = terminator
        self._keep_terminator = keep_terminator
        self._buffer = bytearray()
        self._scanned = 0
        self._eof = False
        self._pending_failure: Optional[ReadFailure] = None
        self._pollable = True
        self._waiter = None
        self._state = ReaderState.READING
        self._failure: Optional[ReadFailure] = None
        self._saved_blocking: Optional[bool] = None
        if manage_blocking:
            self._saved_blocking = os.get_blocking(fd)
            os.set_blocking(fd, False)

    @classmethod
    def from_config(cls, loop, fd: int, config: ReaderConfig, **kwargs) -> "AsyncLineStreamReader":
        return cls(
            loop,
            fd,
            chunk_size=config.chunk_size,
            terminator=config.terminator,
            keep_terminator=config.keep_terminator,
            **kwargs,
        )

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def failure(self) -> Optional[ReadFailure]:
        return self._failure

    def _wakeup(self):
        if self._waiter is not None and not self._waiter.done():
            self._waiter.set_result(True)
        self._waiter = None

    def _read_once(self):
        # Results land on the reader, never only in the waiter future, so a
        # caller cancelled after the read cannot lose them
        try:
            data = os.read(self._fd, self._chunk_size)
        except BlockingIOError:
            return
        except OSError as exc:
            self._pending_failure = ReadFailure(exc)
            return
        if data:
            self._buffer.extend(data)
        else:
            self._eof = True

    def _on_ready(self):
        self._loop.remove_reader(self._fd)
        self._read_once()
        self._wakeup()

    async def _wait_for_data(self):
        if not self._pollable:
            self._read_once()
            return
        try:
            self._loop.add_reader(self._fd, self._on_ready)
        except PermissionError:
            # epoll refuses regular files; they never block
            LOGGER.debug("fd %d cannot be polled, reading directly", self._fd)
            self._pollable = False
            self._read_once()
            return
        except OSError as exc:
            self._pending_failure = ReadFailure(exc)
            return
        self._waiter = self._loop.create_future()
        try:
            await self._waiter
        finally:
            if self._waiter is not None:
                # Cancelled while waiting
                self._loop.remove_reader(self._fd)
                self._waiter = None

    async def produce_next_line(self) -> Produced:
        """Return the next Line, END_OF_STREAM or the ReadFailure that ended the stream."""
        if self._state is ReaderState.EXHAUSTED:
            return END_OF_STREAM
        if self._state is ReaderState.FAILED:
            return self._failure

        while True:
            if self._pending_failure is not None:
                return self._fail(self._pending_failure)
            end = self._buffer.find(self._terminator, self._scanned)
            if end != -1:
                return self._take(end + 1, terminated=True)
            if self._eof:
                if self._buffer:
                    return self._take(len(self._buffer), terminated=False)
                self._state = ReaderState.EXHAUSTED
                self._restore_blocking()
                LOGGER.debug("fd %d exhausted", self._fd)
                return END_OF_STREAM
            self._scanned = len(self._buffer)
            await self._wait_for_data()

    def _take(self, size: int, *, terminated: bool) -> Line:
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        self._scanned = 0
        if terminated and not self._keep_terminator:
            data = data[:-1]
        return Line(data, terminated, self._terminator, self._keep_terminator)

    def _fail(self, failure: ReadFailure) -> ReadFailure:
        self._failure = failure
        self._pending_failure = None
        self._state = ReaderState.FAILED
        self._buffer = bytearray()
        self._restore_blocking()
        LOGGER.warning("read from fd %d failed: %r", self._fd, failure.cause)
        return failure

    def _restore_blocking(self):
        if self._saved_blocking is not None:
            os.set_blocking(self._fd, self._saved_blocking)
            self._saved_blocking = None

    async def aclose(self):
        """Stop watching the descriptor and restore its blocking mode. The fd stays open."""
        if self._waiter is not None:
            self._loop.remove_reader(self._fd)
            self._wakeup()
        self._restore_blocking()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    def __aiter__(self):
        return self

    async def __anext__(self) -> Line:
        result = await self.produce_next_line()
        if isinstance(result, Line):
            return result
        if isinstance(result, ReadFailure):
            raise StreamReadError(result.cause) from result.cause
        raise StopAsyncIteration


def stdin_async_reader(config: Optional[ReaderConfig] = None, *, loop=None) -> AsyncLineStreamReader:
    """Async reader over standard input.

    The descriptor is switched to non-blocking mode until the stream ends or
    the reader is closed; use it as ``async with stdin_async_reader() as reader``.
    """
    if loop is None:
        loop = asyncio.get_running_loop()
    return AsyncLineStreamReader.from_config(
        loop, sys.stdin.fileno(), config or ReaderConfig(), manage_blocking=True
    )
