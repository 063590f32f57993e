class UseWithError(Exception):
    """Represent a base class for all use-with specific failures.

    Every subclass is raised before the executor takes ownership of the
    resource, so catching this type never hides an error raised by the
    caller's operation. Those always propagate unchanged.
    """


class UseWithResourceConsumedError(UseWithError):
    """Signal that a resource was handed to an executor a second time.

    Raised by ``use_with``, ``use_with_async``, ``using`` and ``ausing`` when
    ownership tracking is enabled and the same object was already taken and
    released by the executor.

    Typical fix is creating a fresh resource for each use instead of keeping
    a reference to one that was already consumed.
    """


class UseWithAsyncReleaseInSyncContextError(UseWithError):
    """Signal sync use of a resource whose cleanup is asynchronous.

    Raised by ``use_with`` and ``using`` when the resource only exposes
    ``__aexit__`` or ``aclose`` and no synchronous cleanup.

    Typical fix is switching to ``await use_with_async(...)`` or
    ``async with ausing(...)``.
    """


class UseWithInvalidOperationError(UseWithError):
    """Signal an operation or release callback that cannot be called.

    Raised by the executor entry points when ``operation`` or ``release`` is
    not callable.
    """
