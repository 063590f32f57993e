from __future__ import annotations

from enum import Enum


class ReleaseErrorPolicy(str, Enum):
    """Select which failure wins when both the operation and release raise.

    The policy only matters when the release step itself raises. A release
    error after a successful operation is always raised.
    """

    SUPPRESS = "suppress"
    """Keep the operation error, log the release error as a warning and drop it."""

    RAISE = "raise"
    """Raise the release error, chaining the operation error as its ``__cause__``."""


class ReleaseKind(str, Enum):
    """Strategy used to run a resource's cleanup after the operation."""

    CALLBACK = "callback"
    """Call the explicit ``release=`` callable with the resource."""

    ASYNC_CONTEXT_MANAGER = "async_context_manager"
    """Enter with ``__aenter__`` and release with ``__aexit__``. Async form only."""

    CONTEXT_MANAGER = "context_manager"
    """Enter with ``__enter__`` and release with ``__exit__``."""

    ACLOSE = "aclose"
    """Await ``resource.aclose()``. Async form only."""

    CLOSE = "close"
    """Call ``resource.close()``."""

    NONE = "none"
    """No cleanup logic; release only ends ownership."""

    @property
    def is_async_only(self) -> bool:
        return self in (ReleaseKind.ASYNC_CONTEXT_MANAGER, ReleaseKind.ACLOSE)
