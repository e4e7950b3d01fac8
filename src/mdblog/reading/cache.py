"""In-memory cache for category counts."""

# mdblog:domain=reading

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

DEFAULT_TTL = 3600.0


@dataclass
class CacheEntry:
    """Cached category counts with creation time."""

    counts: dict[str, int]
    created_at: float


class CategoryCache:
    """Time-bounded cache of ``{category: article count}``.

    Entries expire after *ttl* seconds and are dropped explicitly by
    :meth:`invalidate`, which ``sync()`` calls after mutating the store.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entry: CacheEntry | None = None
        self._lock = threading.Lock()

    def get(self) -> dict[str, int] | None:
        """Return cached counts, or None if missing or expired."""
        with self._lock:
            entry = self._entry
            if entry is None:
                return None
            if self._clock() - entry.created_at >= self._ttl:
                self._entry = None
                return None
            return dict(entry.counts)

    def put(self, counts: dict[str, int]) -> None:
        with self._lock:
            self._entry = CacheEntry(counts=dict(counts), created_at=self._clock())

    def get_or_load(self, loader: Callable[[], dict[str, int]]) -> dict[str, int]:
        """Return cached counts, calling *loader* on a miss."""
        cached = self.get()
        if cached is not None:
            return cached
        counts = loader()
        self.put(counts)
        return dict(counts)

    def invalidate(self) -> None:
        """Drop the cached entry (e.g., after sync)."""
        with self._lock:
            self._entry = None

    def stats(self) -> dict[str, int]:
        """Return cache statistics."""
        with self._lock:
            return {"entries": 0 if self._entry is None else 1}
