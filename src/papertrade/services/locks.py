"""Per-user mutual exclusion for ledger writes."""

import threading
from contextlib import contextmanager
from typing import Iterator


class _UserLock:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class UserLockRegistry:
    """
    Hands out one lock per user id; trades for the same user run one at a time.

    Entries are reference counted and dropped once no thread holds or waits
    on them, so the registry only grows with the number of users trading
    right now.
    """

    def __init__(self) -> None:
        self._locks: dict[str, _UserLock] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(user_id)
            if entry is None:
                entry = _UserLock()
                self._locks[user_id] = entry
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[user_id]
