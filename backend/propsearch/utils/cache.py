"""In-memory TTL cache.

Process-level store for hot data (nearby amenity lists). Each entry carries
its own expiry; expired entries are dropped lazily on read and in bulk by
``sweep()``. Thread-safe: every operation holds an internal lock for the
duration of a dict operation only.
"""

import threading
import time
from typing import Any, Callable, Optional


class TTLCache:
    """Thread-safe cache with per-entry TTL."""

    def __init__(
        self,
        default_ttl: int = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._data: dict[str, tuple[float, Any]] = {}
        self._default_ttl = default_ttl
        self._clock = clock
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            expires_at, value = item
            if self._clock() >= expires_at:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        with self._lock:
            self._data[key] = (self._clock() + ttl, value)

    def delete_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix``. Returns the count removed."""
        with self._lock:
            doomed = [k for k in self._data if k.startswith(prefix)]
            for key in doomed:
                del self._data[key]
            return len(doomed)

    def sweep(self) -> int:
        """Drop all expired entries. Returns the count removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, (expires_at, _) in self._data.items() if now >= expires_at]
            for key in expired:
                del self._data[key]
            return len(expired)

    def keys(self) -> list[str]:
        """Live (unexpired) keys. Does not evict anything."""
        with self._lock:
            now = self._clock()
            return [k for k, (expires_at, _) in self._data.items() if now < expires_at]

    def __len__(self) -> int:
        return len(self.keys())
