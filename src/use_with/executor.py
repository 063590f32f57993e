from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import Any, TypeVar, overload

from typing_extensions import Self

from use_with._internal.ownership import OwnershipLedger
from use_with._internal.release import Release
from use_with.defaults import DEFAULT_RELEASE_ERROR_POLICY, DEFAULT_TRACK_OWNERSHIP
from use_with.exceptions import UseWithInvalidOperationError
from use_with.policies import ReleaseErrorPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def _ensure_callable(value: object, *, role: str) -> None:
    if not callable(value):
        msg = f"{role} must be callable, got {value!r}."
        raise UseWithInvalidOperationError(msg)


class ResourceLease:
    """Own one resource for the duration of a ``with`` / ``async with`` block.

    The lease takes ownership on enter and releases on exit, exactly once, on
    every exit path. It never suppresses the exception raised inside the block.
    """

    def __init__(
        self,
        executor: UseExecutor,
        resource: Any,
        *,
        release: Callable[[Any], Any] | None = None,
    ) -> None:
        if release is not None:
            _ensure_callable(release, role="Release callback")
        self._executor = executor
        self._resource = resource
        self._callback = release
        self._release: Release | None = None
        self._spent = False

    def __enter__(self) -> Any:
        self._mark_spent()
        self._release = self._executor._acquire(  # noqa: SLF001
            self._resource,
            callback=self._callback,
            is_async=False,
        )
        return self._release.enter()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        release = self._pop_release()
        release_error: Exception | None = None
        try:
            release.exit(exc_type, exc_value, traceback)
        except Exception as error:  # noqa: BLE001
            release_error = error
        self._executor._settle(release, exc_value, release_error)  # noqa: SLF001

    async def __aenter__(self) -> Any:
        self._mark_spent()
        self._release = self._executor._acquire(  # noqa: SLF001
            self._resource,
            callback=self._callback,
            is_async=True,
        )
        return await self._release.aenter()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        release = self._pop_release()
        release_error: Exception | None = None
        try:
            await release.aexit(exc_type, exc_value, traceback)
        except Exception as error:  # noqa: BLE001
            release_error = error
        self._executor._settle(release, exc_value, release_error)  # noqa: SLF001

    def _mark_spent(self) -> None:
        if self._spent:
            msg = "Resource lease cannot be entered more than once."
            raise RuntimeError(msg)
        self._spent = True

    def _pop_release(self) -> Release:
        release = self._release
        if release is None:
            msg = "Resource lease exit called without a matching enter."
            raise RuntimeError(msg)
        self._release = None
        # Drop the lease's reference so only the caller's names keep the resource alive.
        self._resource = None
        return release


class UseExecutor:
    """Run an operation against an owned resource and release it afterwards.

    The executor is the sole holder of the resource for the duration of a call.
    Release runs exactly once after the operation, whether it returned, raised
    or was cancelled. Errors raised by the operation propagate unchanged.

    Args:
        track_ownership: Reject resources this executor has already consumed.
        release_error_policy: Decide which error wins when the operation and
            the release step both fail.

    Examples:
        .. code-block:: python

            executor = UseExecutor(release_error_policy=ReleaseErrorPolicy.RAISE)
            size = executor.use_with(open("data.bin", "rb"), lambda f: len(f.read()))

    """

    def __init__(
        self,
        *,
        track_ownership: bool = DEFAULT_TRACK_OWNERSHIP,
        release_error_policy: ReleaseErrorPolicy = DEFAULT_RELEASE_ERROR_POLICY,
    ) -> None:
        self.track_ownership = track_ownership
        self.release_error_policy = ReleaseErrorPolicy(release_error_policy)
        self._ledger = OwnershipLedger()

    def use_with(
        self,
        resource: R,
        operation: Callable[[Any], T],
        *,
        release: Callable[[R], Any] | None = None,
    ) -> T:
        """Call ``operation`` with ``resource`` and release the resource afterwards.

        Args:
            resource: Resource to take ownership of. Context managers are
                entered and the operation receives the entered value.
            operation: Callable invoked once with the resource.
            release: Optional explicit cleanup callable, called with the
                resource instead of the detected cleanup.

        Returns:
            The value returned by ``operation``.

        Raises:
            UseWithInvalidOperationError: If ``operation`` or ``release`` is
                not callable.
            UseWithResourceConsumedError: If the resource was already consumed.
            UseWithAsyncReleaseInSyncContextError: If the resource only has
                asynchronous cleanup.

        """
        _ensure_callable(operation, role="Operation")
        with self.using(resource, release=release) as bound:
            return operation(bound)

    @overload
    async def use_with_async(
        self,
        resource: R,
        operation: Callable[[Any], Awaitable[T]],
        *,
        release: Callable[[R], Any] | None = None,
    ) -> T: ...

    @overload
    async def use_with_async(
        self,
        resource: R,
        operation: Callable[[Any], T],
        *,
        release: Callable[[R], Any] | None = None,
    ) -> T: ...

    async def use_with_async(
        self,
        resource: Any,
        operation: Callable[[Any], Any],
        *,
        release: Callable[[Any], Any] | None = None,
    ) -> Any:
        """Await ``operation`` with ``resource`` and release the resource afterwards.

        The release step is a continuation of the awaited operation: it runs
        only after the returned awaitable resolves, and also when the awaiting
        task is cancelled.

        Args:
            resource: Resource to take ownership of. Async context managers are
                entered with ``__aenter__``.
            operation: Callable invoked once with the resource. An awaitable
                result is awaited; any other result is returned as-is.
            release: Optional explicit cleanup callable. An awaitable result is
                awaited.

        Returns:
            The resolved result of ``operation``.

        Raises:
            UseWithInvalidOperationError: If ``operation`` or ``release`` is
                not callable.
            UseWithResourceConsumedError: If the resource was already consumed.

        """
        _ensure_callable(operation, role="Operation")
        async with self.ausing(resource, release=release) as bound:
            result = operation(bound)
            if inspect.isawaitable(result):
                result = await result
            return result

    def using(
        self,
        resource: R,
        *,
        release: Callable[[R], Any] | None = None,
    ) -> ResourceLease:
        """Return a lease usable as ``with executor.using(resource) as bound:``."""
        return ResourceLease(self, resource, release=release)

    def ausing(
        self,
        resource: R,
        *,
        release: Callable[[R], Any] | None = None,
    ) -> ResourceLease:
        """Return a lease usable as ``async with executor.ausing(resource) as bound:``."""
        return ResourceLease(self, resource, release=release)

    def is_consumed(self, resource: object) -> bool:
        """Return whether this executor has already taken ``resource``."""
        return self._ledger.is_consumed(resource)

    def _acquire(
        self,
        resource: Any,
        *,
        callback: Callable[[Any], Any] | None,
        is_async: bool,
    ) -> Release:
        release = Release.detect(resource, callback=callback, is_async=is_async)
        if self.track_ownership:
            self._ledger.take(resource)
        logger.debug(
            "Took ownership of %s resource (release=%s)",
            type(resource).__qualname__,
            release.kind.value,
        )
        return release

    def _settle(
        self,
        release: Release,
        exc_value: BaseException | None,
        release_error: Exception | None,
    ) -> None:
        resource_name = type(release.resource).__qualname__
        if release_error is None:
            logger.debug("Released %s resource", resource_name)
            return
        if exc_value is None:
            raise release_error
        if self.release_error_policy is ReleaseErrorPolicy.RAISE:
            raise release_error from exc_value
        logger.warning(
            "Suppressed error while releasing %s resource after the operation failed",
            resource_name,
            exc_info=release_error,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(track_ownership={self.track_ownership}, "
            f"release_error_policy={self.release_error_policy!r})"
        )


default_executor = UseExecutor()
"""Executor used by the module-level helpers and the ``Use`` mixin."""


def use_with(
    resource: R,
    operation: Callable[[Any], T],
    *,
    release: Callable[[R], Any] | None = None,
) -> T:
    """Call ``operation`` with ``resource``, then release the resource.

    Examples:
        .. code-block:: python

            counter = Counter()
            assert use_with(counter, lambda c: c.increment()) == 1
            assert counter.closed

    """
    return default_executor.use_with(resource, operation, release=release)


@overload
async def use_with_async(
    resource: R,
    operation: Callable[[Any], Awaitable[T]],
    *,
    release: Callable[[R], Any] | None = None,
) -> T: ...


@overload
async def use_with_async(
    resource: R,
    operation: Callable[[Any], T],
    *,
    release: Callable[[R], Any] | None = None,
) -> T: ...


async def use_with_async(
    resource: Any,
    operation: Callable[[Any], Any],
    *,
    release: Callable[[Any], Any] | None = None,
) -> Any:
    """Await ``operation`` with ``resource``, then release the resource.

    Examples:
        .. code-block:: python

            async def fetch(client: Client) -> bytes:
                return await client.get("/status")

            body = await use_with_async(Client(), fetch)

    """
    return await default_executor.use_with_async(resource, operation, release=release)


def using(resource: R, *, release: Callable[[R], Any] | None = None) -> ResourceLease:
    """Bind ``resource`` for a ``with`` block and release it at block exit.

    Examples:
        .. code-block:: python

            with using(Resource(10)) as it:
                total = it.value + 32

    """
    return default_executor.using(resource, release=release)


def ausing(resource: R, *, release: Callable[[R], Any] | None = None) -> ResourceLease:
    """Bind ``resource`` for an ``async with`` block and release it at block exit."""
    return default_executor.ausing(resource, release=release)


class Use:
    """Mixin giving a resource type its own use-once methods.

    Examples:
        .. code-block:: python

            class Connection(Use):
                def close(self) -> None: ...

            rows = Connection().use_with(lambda conn: conn.query("select 1"))

    """

    __slots__ = ()

    def use_with(self, operation: Callable[[Self], T]) -> T:
        """Consume ``self`` with ``operation`` and release it afterwards."""
        return default_executor.use_with(self, operation)

    @overload
    async def use_with_async(self, operation: Callable[[Self], Awaitable[T]]) -> T: ...

    @overload
    async def use_with_async(self, operation: Callable[[Self], T]) -> T: ...

    async def use_with_async(self, operation: Callable[[Self], Any]) -> Any:
        """Consume ``self`` with ``operation``, awaiting it before release."""
        return await default_executor.use_with_async(self, operation)
