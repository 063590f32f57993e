from use_with.exceptions import (
    UseWithAsyncReleaseInSyncContextError,
    UseWithError,
    UseWithInvalidOperationError,
    UseWithResourceConsumedError,
)
from use_with.executor import (
    ResourceLease,
    Use,
    UseExecutor,
    ausing,
    default_executor,
    use_with,
    use_with_async,
    using,
)
from use_with.policies import ReleaseErrorPolicy, ReleaseKind

__all__ = [
    "ReleaseErrorPolicy",
    "ReleaseKind",
    "ResourceLease",
    "Use",
    "UseExecutor",
    "UseWithAsyncReleaseInSyncContextError",
    "UseWithError",
    "UseWithInvalidOperationError",
    "UseWithResourceConsumedError",
    "ausing",
    "default_executor",
    "use_with",
    "use_with_async",
    "using",
]
