# app/services/lock_manager.py
"""
In-process exclusive-access windows for the allocation path.

One threading.Lock per key, created on first use. Keys are tuples whose
first element is a tier; hold() always acquires in ascending key order, so
zone-pointer locks (tier 0) are taken before search-space locks (tier 1)
and both before individual spot locks (tier 2). That fixed order is what
keeps concurrent allocators deadlock-free.

Cross-process safety comes from the conditional UPDATE in spot_registry;
these locks keep same-process callers from burning retries against each other.
"""

import threading
import time
from contextlib import contextmanager

from app.services.errors import ContentionTimeout

FLOOR_TIER = 0
SEARCH_TIER = 1
SPOT_TIER = 2


def floor_key(floor_id: int) -> tuple:
    return (FLOOR_TIER, "floor", floor_id)


def search_key(spot_type: str, scope) -> tuple:
    return (SEARCH_TIER, "search", f"{spot_type}:{scope}")


def spot_key(spot_id: int) -> tuple:
    return (SPOT_TIER, "spot", spot_id)


class KeyedLockManager:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[tuple, threading.Lock] = {}

    def _lock_for(self, key: tuple) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def is_locked(self, key: tuple) -> bool:
        return self._lock_for(key).locked()

    @contextmanager
    def hold(self, keys, timeout: float):
        """
        Acquire every key in strict order, or none of them.
        Raises ContentionTimeout when the combined wait exceeds `timeout`.
        """
        deadline = time.monotonic() + timeout
        acquired = []
        try:
            for key in sorted(set(keys)):
                lock = self._lock_for(key)
                remaining = max(0.0, deadline - time.monotonic())
                if not lock.acquire(timeout=remaining):
                    raise ContentionTimeout(key, timeout)
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


# Shared by every request thread in this process
lock_manager = KeyedLockManager()
