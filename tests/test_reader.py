import sys, os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import errno
import io

import pytest

from pipe_lines import (
    END_OF_STREAM,
    Line,
    LineStreamReader,
    ReaderConfig,
    ReaderState,
    ReadFailure,
    StreamReadError,
)


class ScriptedStream:
    """Hands out the given chunks, then raises ``exc`` (or reports EOF)."""

    def __init__(self, chunks, exc=None):
        self.chunks = list(chunks)
        self.exc = exc
        self.reads = 0

    def read(self, n):
        self.reads += 1
        if self.chunks:
            return self.chunks.pop(0)
        if self.exc is not None:
            raise self.exc
        return b""


def drain(reader):
    lines = []
    while True:
        result = reader.produce_next_line()
        if not isinstance(result, Line):
            return lines, result
        lines.append(result)


def test_lines_without_trailing_terminator():
    reader = LineStreamReader(io.BytesIO(b"line1\nline2\nline3"))
    lines, end = drain(reader)
    assert [l.content for l in lines] == [b"line1", b"line2", b"line3"]
    assert [l.terminated for l in lines] == [True, True, False]
    assert end is END_OF_STREAM


def test_empty_stream_ends_immediately():
    reader = LineStreamReader(io.BytesIO(b""))
    assert reader.produce_next_line() is END_OF_STREAM
    assert reader.state is ReaderState.EXHAUSTED


def test_blank_lines_are_kept():
    lines, _ = drain(LineStreamReader(io.BytesIO(b"\n\n")))
    assert [(l.content, l.terminated) for l in lines] == [(b"", True), (b"", True)]


def test_end_of_stream_is_idempotent():
    stream = ScriptedStream([b"only\n"])
    reader = LineStreamReader(stream)
    drain(reader)
    reads = stream.reads
    for _ in range(3):
        assert reader.produce_next_line() is END_OF_STREAM
    assert stream.reads == reads


def test_long_line_is_not_split():
    payload = b"x" * 1_000_000
    reader = LineStreamReader(io.BytesIO(payload), chunk_size=4096)
    lines, _ = drain(reader)
    assert len(lines) == 1
    assert lines[0].content == payload
    assert not lines[0].terminated


@pytest.mark.parametrize(
    "payload",
    [b"", b"a", b"a\n", b"\n", b"a\nbb\n\nccc", b"\x00\xff\n\xfe", b"tail\n\n\nend"],
)
@pytest.mark.parametrize("chunk_size", [1, 3, 65536])
def test_raw_mode_reconstructs_input(payload, chunk_size):
    reader = LineStreamReader(io.BytesIO(payload), chunk_size=chunk_size, keep_terminator=True)
    lines, _ = drain(reader)
    assert b"".join(l.content for l in lines) == payload
    expected = payload.count(b"\n") + (1 if payload and not payload.endswith(b"\n") else 0)
    assert len(lines) == expected


def test_trimmed_lines_still_expose_raw_bytes():
    lines, _ = drain(LineStreamReader(io.BytesIO(b"a\nb")))
    assert b"".join(l.raw for l in lines) == b"a\nb"
    assert lines[0].trimmed == b"a"


def test_raw_mode_keeps_terminator_in_content():
    lines, _ = drain(LineStreamReader(io.BytesIO(b"a\nb"), keep_terminator=True))
    assert lines[0].content == b"a\n"
    assert lines[0].trimmed == b"a"
    assert lines[1].content == b"b"


def test_custom_terminator():
    reader = LineStreamReader(io.BytesIO(b"one\x00two\x00"), terminator=b"\x00")
    assert [l.content for l in reader] == [b"one", b"two"]


def test_terminator_split_across_chunks():
    stream = ScriptedStream([b"ab", b"c", b"\nd", b"e\n"])
    assert [l.content for l in LineStreamReader(stream)] == [b"abc", b"de"]


def test_read_failure_after_one_line():
    cause = OSError(errno.EIO, "input/output error")
    stream = ScriptedStream([b"first\nsecond-partial"], exc=cause)
    reader = LineStreamReader(stream)

    first = reader.produce_next_line()
    assert first == Line(b"first", True)

    failure = reader.produce_next_line()
    assert isinstance(failure, ReadFailure)
    assert failure.cause is cause
    assert reader.state is ReaderState.FAILED

    reads = stream.reads
    assert reader.produce_next_line() is failure
    assert reader.produce_next_line() is failure
    assert stream.reads == reads


def test_read_failure_is_logged_once(caplog):
    reader = LineStreamReader(ScriptedStream([], exc=OSError("gone")))
    with caplog.at_level("WARNING", logger="pipe_lines.reader"):
        reader.produce_next_line()
        reader.produce_next_line()
    assert len(caplog.records) == 1


def test_iteration_raises_stream_read_error():
    cause = OSError("broken")
    reader = LineStreamReader(ScriptedStream([b"ok\n"], exc=cause))
    seen = []
    with pytest.raises(StreamReadError) as info:
        for line in reader:
            seen.append(line.content)
    assert seen == [b"ok"]
    assert info.value.cause is cause
    assert info.value.__cause__ is cause


def test_iteration_is_single_pass():
    reader = LineStreamReader(io.BytesIO(b"a\nb\n"))
    assert len(list(reader)) == 2
    assert list(reader) == []


def test_none_from_nonblocking_stream_is_a_failure():
    class NonBlocking:
        def read(self, n):
            return None

    result = LineStreamReader(NonBlocking()).produce_next_line()
    assert isinstance(result, ReadFailure)
    assert isinstance(result.cause, BlockingIOError)


def test_prefers_read1():
    class Buffered:
        def __init__(self):
            self.calls = []

        def read(self, n):
            raise AssertionError("read() should not be used when read1() exists")

        def read1(self, n):
            self.calls.append(n)
            return b"" if len(self.calls) > 1 else b"x\n"

    stream = Buffered()
    assert [l.content for l in LineStreamReader(stream, chunk_size=10)] == [b"x"]
    assert stream.calls == [10, 10]


def test_reader_does_not_close_stream():
    stream = io.BytesIO(b"a\n")
    list(LineStreamReader(stream))
    assert not stream.closed


def test_from_config():
    config = ReaderConfig(chunk_size=2, terminator=b";", keep_terminator=True)
    reader = LineStreamReader.from_config(io.BytesIO(b"a;b"), config)
    assert [l.content for l in reader] == [b"a;", b"b"]


@pytest.mark.parametrize("kwargs", [{"chunk_size": 0}, {"terminator": b"\r\n"}, {"terminator": b""}])
def test_rejects_bad_arguments(kwargs):
    with pytest.raises(ValueError):
        LineStreamReader(io.BytesIO(b""), **kwargs)


def test_text_excludes_terminator_in_raw_mode():
    raw = LineStreamReader(io.BytesIO(b"caf\xc3\xa9\nend"), keep_terminator=True)
    trimmed = LineStreamReader(io.BytesIO(b"caf\xc3\xa9\nend"))
    assert [l.text() for l in raw] == ["café", "end"]
    assert [l.text() for l in trimmed] == ["café", "end"]
