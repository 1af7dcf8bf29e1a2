from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    user_id: int
    expires_at: float
    result: T


class ResultCache(Generic[T]):
    """
    Per-user memo of the last computed recommendation result.

    Expiry is lazy: an entry is checked against the clock when read and is
    otherwise only replaced by the next `put` for the same user. The lock is
    held for single dictionary operations only, so callers compute outside it.
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Optional[Callable[[], float]] = None) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._entries: Dict[int, CacheEntry[T]] = {}

    def get(self, user_id: int) -> Optional[T]:
        """Return the live result for `user_id`, or None on a miss or expiry."""
        with self._lock:
            entry = self._entries.get(user_id)

        if entry is None or entry.expires_at <= self._clock():
            return None
        return entry.result

    def put(self, user_id: int, result: T, ttl_seconds: Optional[float] = None) -> CacheEntry[T]:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        entry = CacheEntry(user_id=user_id, expires_at=self._clock() + ttl, result=result)
        with self._lock:
            self._entries[user_id] = entry
        return entry

    def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [user_id for user_id, entry in self._entries.items() if entry.expires_at <= now]
            for user_id in expired:
                del self._entries[user_id]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
