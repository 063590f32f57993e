from __future__ import annotations

import threading
import weakref
from typing import Any

from use_with.exceptions import UseWithResourceConsumedError


class OwnershipLedger:
    """Remember which resources an executor has already taken.

    Entries are keyed by ``id()`` and hold weak references, so the ledger never
    keeps a resource alive and works for unhashable objects. Objects that do not
    support weak references are not tracked. The lock is reentrant because
    weak reference callbacks may fire during garbage collection inside ``take``.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._refs: dict[int, weakref.ref[Any]] = {}

    def take(self, resource: Any) -> None:
        """Record ownership of ``resource``.

        Raises:
            UseWithResourceConsumedError: If ``resource`` was already taken.

        """
        key = id(resource)
        with self._lock:
            existing = self._refs.get(key)
            if existing is not None and existing() is resource:
                msg = (
                    f"Resource {resource!r} was already consumed by a previous use. "
                    "Create a new resource for each use."
                )
                raise UseWithResourceConsumedError(msg)
            try:
                ref = weakref.ref(resource, lambda dead, key=key: self._forget(key, dead))
            except TypeError:
                return
            self._refs[key] = ref

    def is_consumed(self, resource: Any) -> bool:
        with self._lock:
            existing = self._refs.get(id(resource))
            return existing is not None and existing() is resource

    def _forget(self, key: int, dead: weakref.ref[Any]) -> None:
        with self._lock:
            # The slot may already hold a newer object that reused the same id.
            if self._refs.get(key) is dead:
                del self._refs[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._refs)
