"""
Query cache for backend reads.

Entries expire after `ttl_seconds` and the least recently used entry is
evicted once `max_entries` is reached. Repositories invalidate a table's
keys after every write to that table.
"""

import time
from collections import OrderedDict
from typing import Any, Callable

_MISSING = object()


def cache_key(*parts: Any) -> str:
    """Join key parts with ':'. The first part should be the table name."""
    return ":".join(str(part) for part in parts)


class QueryCache:
    """TTL + size bounded key/value cache. Not thread-safe."""

    def __init__(
        self,
        ttl_seconds: float | None = 60.0,
        max_entries: int | None = 512,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float | None, Any]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default

        expires_at, value = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return default

        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: Any) -> None:
        expires_at = None if self.ttl_seconds is None else self._clock() + self.ttl_seconds
        self._entries[key] = (expires_at, value)
        self._entries.move_to_end(key)

        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate(self, key: str) -> bool:
        """Remove one key. Returns whether it was present."""
        return self._entries.pop(key, _MISSING) is not _MISSING

    def invalidate_prefix(self, prefix: str) -> int:
        """Remove every key starting with `prefix`. Returns how many were removed."""
        stale = [key for key in self._entries if key.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
