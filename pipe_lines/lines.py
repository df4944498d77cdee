from dataclasses import dataclass


@dataclass(frozen=True)
class Line:
    """A single line read from a stream.

    ``content`` holds the line bytes; it includes the terminator only when the
    reader runs in raw mode. ``terminated`` tells whether a terminator was
    seen at all (``False`` for a trailing line flushed at end-of-stream).
    """

    content: bytes
    terminated: bool
    terminator: bytes = b"\n"
    raw_mode: bool = False

    @property
    def raw(self) -> bytes:
        """The bytes exactly as they appeared in the stream."""
        if self.terminated and not self.raw_mode:
            return self.content + self.terminator
        return self.content

    @property
    def trimmed(self) -> bytes:
        if self.terminated and self.raw_mode:
            return self.content[: -len(self.terminator)]
        return self.content

    def text(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        return self.trimmed.decode(encoding, errors)


class EndOfStream:
    """Terminal signal: the stream has no more bytes."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "END_OF_STREAM"


END_OF_STREAM = EndOfStream()


@dataclass(frozen=True, eq=False)
class ReadFailure:
    """Terminal signal carrying the exception raised by the underlying stream."""

    cause: BaseException

    def __bool__(self) -> bool:
        return False
