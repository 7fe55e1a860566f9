"""Availability cache with explicit expiry."""

import threading
import time
from collections.abc import Callable

from .types import CachedAvailability

DEFAULT_TTL_SECONDS = 300.0


def is_expired(now: float, entry: CachedAvailability, ttl: float) -> bool:
    """True once an entry is at least ttl seconds old."""
    return now - entry.checked_at >= ttl


class AvailabilityCache:
    """Thread-safe map of tool identity to cached availability.

    Expired entries are never returned; they are dropped on access.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CachedAvailability] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> CachedAvailability | None:
        """Return the live entry for key, or None if missing or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if is_expired(now, entry, self.ttl_seconds):
                del self._entries[key]
                return None
            return entry

    def put(self, key: str, available: bool) -> CachedAvailability:
        entry = CachedAvailability(available=available, checked_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> bool:
        """Drop one entry. Returns True if it was cached."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def live_count(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(
                1 for entry in self._entries.values() if not is_expired(now, entry, self.ttl_seconds)
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
