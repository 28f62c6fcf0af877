from __future__ import annotations

import threading
from collections.abc import Hashable
from contextlib import contextmanager
from typing import Iterator


class KeyedLock:
    """One mutex per key, e.g. per (employee_id, work_date).

    Entries are reference counted and dropped once no thread holds or waits
    on them, so the map does not grow with every day of history.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[Hashable, list] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1

        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
