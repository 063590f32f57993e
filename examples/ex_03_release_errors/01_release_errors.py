"""Release errors: choose which failure wins.

A release error after a successful operation is always raised. When the
operation fails too, the default ``SUPPRESS`` policy keeps the operation error
and logs the release error. ``RAISE`` surfaces the release error and chains the
operation error as its cause.
"""

from __future__ import annotations

from use_with import ReleaseErrorPolicy, UseExecutor


class FlakyResource:
    def close(self) -> None:
        msg = "close failed"
        raise OSError(msg)


def fail(_: FlakyResource) -> None:
    msg = "operation failed"
    raise ValueError(msg)


def main() -> None:
    executor = UseExecutor()
    try:
        executor.use_with(FlakyResource(), lambda _: "ok")
    except OSError as error:
        print(f"after_success={error}")  # => after_success=close failed

    raising = UseExecutor(release_error_policy=ReleaseErrorPolicy.RAISE)
    try:
        raising.use_with(FlakyResource(), fail)
    except OSError as error:
        print(f"raised={error} cause={error.__cause__}")  # => raised=close failed cause=operation failed


if __name__ == "__main__":
    main()
