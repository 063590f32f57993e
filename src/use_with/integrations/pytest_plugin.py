from __future__ import annotations

from dataclasses import dataclass, field

import pytest


@dataclass(eq=False)
class ProbeResource:
    """Resource stand-in that records how it was used and released.

    ``close`` and ``aclose`` both count as a release, so a probe works with the
    sync and async executor forms. ``aclose`` is only exposed by async probes.
    """

    name: str
    tracker: ReleaseTracker
    value: int = 0
    release_count: int = 0

    @property
    def closed(self) -> bool:
        return self.release_count > 0

    def touch(self) -> int:
        """Increment the probe value and record the use."""
        self.value += 1
        self.tracker.events.append(f"use:{self.name}")
        return self.value

    def close(self) -> None:
        self.release_count += 1
        self.tracker.events.append(f"release:{self.name}")


@dataclass(eq=False)
class AsyncProbeResource(ProbeResource):
    """Probe whose only cleanup is ``aclose``."""

    close = None  # type: ignore[assignment]

    async def aclose(self) -> None:
        self.release_count += 1
        self.tracker.events.append(f"release:{self.name}")


@dataclass
class ReleaseTracker:
    """Create probe resources and collect their use and release events in order."""

    events: list[str] = field(default_factory=list)
    probes: list[ProbeResource] = field(default_factory=list)

    def probe(self, name: str = "resource", *, is_async: bool = False) -> ProbeResource:
        probe_type = AsyncProbeResource if is_async else ProbeResource
        probe = probe_type(name=name, tracker=self)
        self.probes.append(probe)
        return probe

    def assert_released_once(self) -> None:
        """Assert every probe created by this tracker was released exactly once."""
        for probe in self.probes:
            assert probe.release_count == 1, (  # noqa: S101
                f"Probe {probe.name!r} was released {probe.release_count} times."
            )


@pytest.fixture()
def release_tracker() -> ReleaseTracker:
    """Create a per-test tracker for probe resources.

    Returns:
        A new ``ReleaseTracker`` with no recorded events.

    """
    return ReleaseTracker()
