"""Ownership: a consumed resource cannot be used again.

The executor records every resource it takes. Handing the same object to it a
second time raises before the operation runs.
"""

from __future__ import annotations

from use_with import UseExecutor, UseWithResourceConsumedError


class Handle:
    def __init__(self) -> None:
        self.uses = 0

    def close(self) -> None:
        pass


def main() -> None:
    executor = UseExecutor()
    handle = Handle()

    def bump(h: Handle) -> int:
        h.uses += 1
        return h.uses

    executor.use_with(handle, bump)
    print(f"consumed={executor.is_consumed(handle)}")  # => consumed=True

    try:
        executor.use_with(handle, bump)
    except UseWithResourceConsumedError:
        print(f"rejected uses={handle.uses}")  # => rejected uses=1

    relaxed = UseExecutor(track_ownership=False)
    relaxed.use_with(handle, bump)
    print(f"relaxed uses={handle.uses}")  # => relaxed uses=2


if __name__ == "__main__":
    main()
