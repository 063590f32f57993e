"""Tests for failures raised by the release step itself."""

from __future__ import annotations

import logging

import pytest

from use_with import ReleaseErrorPolicy, UseExecutor


class DomainError(Exception):
    """Error raised by operations under test."""


class ReleaseError(Exception):
    """Error raised while releasing a resource."""


class FailingResource:
    """Resource whose close() always raises."""

    def __init__(self) -> None:
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        msg = "close failed"
        raise ReleaseError(msg)


class AsyncFailingResource:
    """Resource whose aclose() always raises."""

    def __init__(self) -> None:
        self.close_calls = 0

    async def aclose(self) -> None:
        self.close_calls += 1
        msg = "aclose failed"
        raise ReleaseError(msg)


def _fail(_: object) -> None:
    msg = "operation failed"
    raise DomainError(msg)


class TestReleaseErrorAfterSuccess:
    """A release error after a successful operation is always raised."""

    def test_sync_release_error_is_raised(self, executor: UseExecutor) -> None:
        resource = FailingResource()

        with pytest.raises(ReleaseError, match="close failed"):
            executor.use_with(resource, lambda r: "result")

        assert resource.close_calls == 1

    async def test_async_release_error_is_raised(self, executor: UseExecutor) -> None:
        resource = AsyncFailingResource()

        with pytest.raises(ReleaseError, match="aclose failed"):
            await executor.use_with_async(resource, lambda r: "result")

        assert resource.close_calls == 1


class TestSuppressPolicy:
    """The default policy keeps the operation error and logs the release error."""

    def test_operation_error_wins(
        self,
        executor: UseExecutor,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        resource = FailingResource()

        with caplog.at_level(logging.WARNING, logger="use_with.executor"), pytest.raises(
            DomainError,
            match="operation failed",
        ):
            executor.use_with(resource, _fail)

        assert resource.close_calls == 1
        assert "Suppressed error while releasing FailingResource" in caplog.text
        assert caplog.records[-1].exc_info is not None
        assert caplog.records[-1].exc_info[0] is ReleaseError

    async def test_operation_error_wins_async(
        self,
        executor: UseExecutor,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        resource = AsyncFailingResource()

        async def operation(_: object) -> None:
            msg = "operation failed"
            raise DomainError(msg)

        with caplog.at_level(logging.WARNING, logger="use_with.executor"), pytest.raises(
            DomainError,
        ):
            await executor.use_with_async(resource, operation)

        assert resource.close_calls == 1
        assert "AsyncFailingResource" in caplog.text


class TestRaisePolicy:
    """The RAISE policy surfaces the release error and chains the operation error."""

    def test_release_error_chained_to_operation_error(
        self,
        raising_executor: UseExecutor,
    ) -> None:
        resource = FailingResource()

        with pytest.raises(ReleaseError) as exc_info:
            raising_executor.use_with(resource, _fail)

        assert isinstance(exc_info.value.__cause__, DomainError)
        assert resource.close_calls == 1

    async def test_release_error_chained_async(self, raising_executor: UseExecutor) -> None:
        resource = AsyncFailingResource()

        with pytest.raises(ReleaseError) as exc_info:
            await raising_executor.use_with_async(resource, _fail)

        assert isinstance(exc_info.value.__cause__, DomainError)

    def test_policy_accepts_string_value(self) -> None:
        executor = UseExecutor(release_error_policy="raise")  # type: ignore[arg-type]

        assert executor.release_error_policy is ReleaseErrorPolicy.RAISE
        assert "ReleaseErrorPolicy.RAISE" in repr(executor)
