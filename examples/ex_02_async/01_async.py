"""Async usage: release waits for the awaited operation.

``use_with_async`` awaits the operation first and releases afterwards. Async
context managers are entered with ``__aenter__``, and objects with ``aclose()``
are awaited on release.
"""

from __future__ import annotations

import asyncio

from use_with import ausing, use_with_async


class Session:
    def __init__(self) -> None:
        self.events: list[str] = []

    async def __aenter__(self) -> Session:
        self.events.append("open")
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.events.append("close")


class Stream:
    def __init__(self) -> None:
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


async def main() -> None:
    session = Session()

    async def work(s: Session) -> str:
        await asyncio.sleep(0.01)
        s.events.append("done")
        return "done"

    result = await use_with_async(session, work)
    print(f"result={result}")  # => result=done
    print(">".join(session.events))  # => open>done>close

    stream = Stream()
    async with ausing(stream) as it:
        await asyncio.sleep(0)
        print(f"open_inside={not it.closed}")  # => open_inside=True
    print(f"closed_after={stream.closed}")  # => closed_after=True


if __name__ == "__main__":
    asyncio.run(main())
