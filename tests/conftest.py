"""Shared pytest fixtures for use_with tests."""

import pytest

from use_with.executor import UseExecutor
from use_with.policies import ReleaseErrorPolicy

pytest_plugins = ["use_with.integrations.pytest_plugin"]


@pytest.fixture()
def executor() -> UseExecutor:
    """Executor with default settings and its own ownership ledger."""
    return UseExecutor()


@pytest.fixture()
def raising_executor() -> UseExecutor:
    """Executor that raises release errors even when the operation failed."""
    return UseExecutor(release_error_policy=ReleaseErrorPolicy.RAISE)


@pytest.fixture()
def untracked_executor() -> UseExecutor:
    """Executor with ownership tracking disabled."""
    return UseExecutor(track_ownership=False)
