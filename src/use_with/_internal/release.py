from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Any

from typing_extensions import Self

from use_with.exceptions import UseWithAsyncReleaseInSyncContextError
from use_with.policies import ReleaseKind


def _has_type_methods(resource: Any, *names: str) -> bool:
    resource_type = type(resource)
    return all(callable(getattr(resource_type, name, None)) for name in names)


def _has_method(resource: Any, name: str) -> bool:
    return callable(getattr(resource, name, None))


def _has_sync_close(resource: Any) -> bool:
    close = getattr(resource, "close", None)
    return callable(close) and not inspect.iscoroutinefunction(close)


def _detect_sync_kind(resource: Any) -> ReleaseKind:
    if _has_type_methods(resource, "__enter__", "__exit__"):
        return ReleaseKind.CONTEXT_MANAGER
    if _has_sync_close(resource):
        return ReleaseKind.CLOSE
    # Only async cleanup is left; these kinds are rejected by ``Release.detect``.
    if _has_type_methods(resource, "__aenter__", "__aexit__"):
        return ReleaseKind.ASYNC_CONTEXT_MANAGER
    if _has_method(resource, "aclose"):
        return ReleaseKind.ACLOSE
    return ReleaseKind.NONE


def _detect_async_kind(resource: Any) -> ReleaseKind:
    if _has_type_methods(resource, "__aenter__", "__aexit__"):
        return ReleaseKind.ASYNC_CONTEXT_MANAGER
    if _has_type_methods(resource, "__enter__", "__exit__"):
        return ReleaseKind.CONTEXT_MANAGER
    if _has_method(resource, "aclose"):
        return ReleaseKind.ACLOSE
    if _has_method(resource, "close"):
        return ReleaseKind.CLOSE
    return ReleaseKind.NONE


def _discard_awaitable(result: Any) -> None:
    close = getattr(result, "close", None)
    if callable(close):
        close()


def _async_only_error(resource: Any, cleanup: str) -> UseWithAsyncReleaseInSyncContextError:
    msg = (
        f"Resource of type '{type(resource).__qualname__}' only supports async "
        f"cleanup ({cleanup}). Use 'use_with_async' or 'ausing'."
    )
    return UseWithAsyncReleaseInSyncContextError(msg)


@dataclass(frozen=True, slots=True)
class Release:
    """Bind a resource to the cleanup strategy detected for it.

    Context-manager kinds are looked up on the resource type, the same way the
    ``with`` statement does. ``close``/``aclose`` are looked up on the instance.
    A ``close`` that returns an awaitable is awaited by the async form and
    rejected by the sync form.
    """

    resource: Any
    kind: ReleaseKind
    callback: Callable[[Any], Any] | None = None

    @classmethod
    def detect(
        cls,
        resource: Any,
        *,
        callback: Callable[[Any], Any] | None = None,
        is_async: bool,
    ) -> Self:
        """Select the release strategy for ``resource``.

        Raises:
            UseWithAsyncReleaseInSyncContextError: If ``is_async`` is false and
                the only cleanup available is asynchronous.

        """
        if callback is not None:
            if not is_async and inspect.iscoroutinefunction(callback):
                msg = (
                    f"Release callback {callback!r} is a coroutine function and "
                    "cannot run in sync context. Use 'use_with_async' or 'ausing'."
                )
                raise UseWithAsyncReleaseInSyncContextError(msg)
            return cls(resource=resource, kind=ReleaseKind.CALLBACK, callback=callback)

        if is_async:
            return cls(resource=resource, kind=_detect_async_kind(resource))

        kind = _detect_sync_kind(resource)
        if kind.is_async_only:
            raise _async_only_error(resource, kind.value)
        if kind is ReleaseKind.NONE and _has_method(resource, "close"):
            raise _async_only_error(resource, "close() is a coroutine function")
        return cls(resource=resource, kind=kind)

    def enter(self) -> Any:
        if self.kind is ReleaseKind.CONTEXT_MANAGER:
            return type(self.resource).__enter__(self.resource)
        return self.resource

    async def aenter(self) -> Any:
        if self.kind is ReleaseKind.ASYNC_CONTEXT_MANAGER:
            return await type(self.resource).__aenter__(self.resource)
        return self.enter()

    def exit(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        # __exit__ return values are ignored: operation errors are never swallowed.
        if self.kind is ReleaseKind.CONTEXT_MANAGER:
            type(self.resource).__exit__(self.resource, exc_type, exc_value, traceback)
            return

        result = self._call_cleanup()
        if inspect.isawaitable(result):
            _discard_awaitable(result)
            raise _async_only_error(self.resource, "cleanup returned an awaitable")

    async def aexit(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if self.kind is ReleaseKind.ASYNC_CONTEXT_MANAGER:
            await type(self.resource).__aexit__(self.resource, exc_type, exc_value, traceback)
        elif self.kind is ReleaseKind.CONTEXT_MANAGER:
            type(self.resource).__exit__(self.resource, exc_type, exc_value, traceback)
        else:
            result = self._call_cleanup()
            if inspect.isawaitable(result):
                await result

    def _call_cleanup(self) -> Any:
        if self.callback is not None:
            return self.callback(self.resource)
        if self.kind is ReleaseKind.ACLOSE:
            return self.resource.aclose()
        if self.kind is ReleaseKind.CLOSE:
            return self.resource.close()
        return None
