"""Tuple-keyed cache of API reads.

Entries never go stale on their own; callers invalidate after writes. A
failed fetch is cached as the error and re-raised until invalidated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class CacheEntry:
    data: Any = None
    error: Exception | None = None


class QueryCache:
    def __init__(self) -> None:
        self._entries: dict[tuple, CacheEntry] = {}

    def __contains__(self, key: tuple) -> bool:
        return key in self._entries

    def get(self, key: tuple) -> CacheEntry | None:
        return self._entries.get(key)

    def fetch(self, key: tuple, fn: Callable[[], Any]) -> Any:
        """Return the cached data for ``key`` or call ``fn`` once to load it."""
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry()
            try:
                entry.data = fn()
            except Exception as e:
                entry.error = e
            self._entries[key] = entry
        if entry.error is not None:
            raise entry.error
        return entry.data

    def set(self, key: tuple, data: Any) -> None:
        self._entries[key] = CacheEntry(data=data)

    def invalidate(self, prefix: tuple) -> int:
        """Drop every key that starts with ``prefix``. Returns how many."""
        n = len(prefix)
        stale = [key for key in self._entries if key[:n] == prefix]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
