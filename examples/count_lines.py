"""Count the lines piped into this script: ``seq 1000 | python examples/count_lines.py``."""

import asyncio

from pipe_lines import LineCounter, stdin_async_reader


async def count():
    counter = LineCounter()
    async with stdin_async_reader() as reader:
        async for line in reader:
            counter.feed(line)
    return counter.count


if __name__ == "__main__":
    print(asyncio.run(count()))
