"""Per-key mutual exclusion for read-modify-write sequences."""

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager


class KeyedLockRegistry:
    """
    Hands out one lock per key.

    A key's lock lives only while some caller holds or waits for it, so the
    registry does not keep an entry for every key it has ever seen.
    Holding the lock for one key never blocks callers using another key.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, threading.Lock] = {}
        self._claims: dict[Hashable, int] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for key for the duration of the with block."""
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._claims[key] = self._claims.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._claims[key] -= 1
                if not self._claims[key]:
                    del self._claims[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
