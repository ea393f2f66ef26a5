"""In-memory key → result cache with per-entry expiry."""

from __future__ import annotations

import copy
import logging
from datetime import timedelta
from typing import Any

from med_notes.core.types import CacheEntry
from med_notes.temporal.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class BoundedCache:
    """TTL cache shared by the matcher, canonicalizer and stats lookups.

    Values are deep-copied on the way in and on the way out, so a caller
    mutating a returned result never changes what the next caller sees.
    Expired entries are dropped lazily when touched; ``purge_expired``
    sweeps them all. When ``max_entries`` is reached the entry closest to
    expiry is evicted.
    """

    def __init__(
        self,
        default_ttl_ms: int = 300_000,
        max_entries: int | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._default_ttl_ms = default_ttl_ms
        self._max_entries = max_entries
        self._clock = clock or SystemClock()
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str) -> Any | None:
        """Return a copy of the cached value, or None on miss/expiry."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if entry.is_expired(self._clock.now()):
            del self._entries[key]
            self._misses += 1
            return None
        self._hits += 1
        return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any, ttl_ms: int | None = None) -> None:
        """Store a copy of ``value`` under ``key`` for ``ttl_ms``."""
        ttl = self._default_ttl_ms if ttl_ms is None else ttl_ms
        if (
            self._max_entries is not None
            and key not in self._entries
            and len(self._entries) >= self._max_entries
        ):
            if not self.purge_expired():
                self._evict_one()
        self._entries[key] = CacheEntry(
            key=key,
            value=copy.deepcopy(value),
            expires_at=self._clock.now() + timedelta(milliseconds=ttl),
        )

    def contains(self, key: str) -> bool:
        """True if a live entry exists (expired entries are dropped)."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry.is_expired(self._clock.now()):
            del self._entries[key]
            return False
        return True

    def invalidate(self, key: str) -> bool:
        """Remove one key. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def invalidate_prefix(self, prefix: str) -> int:
        """Remove every entry whose key starts with ``prefix``."""
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        if doomed:
            logger.debug("Invalidated %d cache entries with prefix %r", len(doomed), prefix)
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        """Drop all expired entries now. Returns how many were removed."""
        now = self._clock.now()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    @property
    def size(self) -> int:
        """Number of stored entries, including not-yet-swept expired ones."""
        return len(self._entries)

    def keys(self) -> list[str]:
        return list(self._entries)

    def stats(self) -> dict[str, Any]:
        return {
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
        }

    def _evict_one(self) -> None:
        if not self._entries:
            return
        victim = min(self._entries.values(), key=lambda entry: entry.expires_at)
        del self._entries[victim.key]
        self._evictions += 1
