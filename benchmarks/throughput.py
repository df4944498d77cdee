import io
import time

from pipe_lines import LineStreamReader


def _payload(lines: int) -> bytes:
    return b"".join(b"line %d of the benchmark payload\n" % i for i in range(lines))


def bench_reader(lines: int = 100000, chunk_size: int = 65536) -> float:
    """Time LineStreamReader over an in-memory stream."""
    stream = io.BytesIO(_payload(lines))
    start = time.time()
    count = sum(1 for _ in LineStreamReader(stream, chunk_size=chunk_size))
    elapsed = time.time() - start
    assert count == lines
    return elapsed


def bench_fileiter(lines: int = 100000) -> float:
    """Time plain iteration over the same in-memory stream."""
    stream = io.BytesIO(_payload(lines))
    start = time.time()
    count = sum(1 for _ in stream)
    elapsed = time.time() - start
    assert count == lines
    return elapsed


def bench(lines: int = 100000) -> tuple[float, float]:
    """Return runtimes for (LineStreamReader, file iteration)."""
    return bench_reader(lines), bench_fileiter(lines)


if __name__ == "__main__":
    rtime, ftime = bench()
    print(f"LineStreamReader: {rtime:.6f}")
    print(f"file iteration: {ftime:.6f}")
