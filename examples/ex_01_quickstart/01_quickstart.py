"""Quickstart: use a resource exactly once and let it be released.

Hand a resource and an operation to ``use_with``. The operation's result comes
back unchanged, and the resource is closed before the call returns, even when
the operation raises.
"""

from __future__ import annotations

from use_with import Use, use_with, using


class Counter:
    def __init__(self) -> None:
        self.value = 0
        self.closed = False

    def increment(self) -> int:
        self.value += 1
        return self.value

    def close(self) -> None:
        self.closed = True


class Connection(Use):
    def __init__(self) -> None:
        self.closed = False

    def query(self, sql: str) -> str:
        return f"rows for {sql!r}"

    def close(self) -> None:
        self.closed = True


def main() -> None:
    counter = Counter()
    result = use_with(counter, lambda c: c.increment())
    print(f"result={result} closed={counter.closed}")  # => result=1 closed=True

    failing = Counter()

    def explode(_: Counter) -> None:
        msg = "domain failure"
        raise ValueError(msg)

    try:
        use_with(failing, explode)
    except ValueError as error:
        print(f"error={error} closed={failing.closed}")  # => error=domain failure closed=True

    connection = Connection()
    rows = connection.use_with(lambda conn: conn.query("select 1"))
    print(rows)  # => rows for 'select 1'

    scratch = Counter()
    with using(scratch) as it:
        total = it.increment() + 41
    print(f"total={total} closed={scratch.closed}")  # => total=42 closed=True


if __name__ == "__main__":
    main()
