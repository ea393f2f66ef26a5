"""Cached per-entity statistics for the Quick Peek panel."""

from __future__ import annotations

import logging

from med_notes.core.protocols import StatsLookup
from med_notes.core.types import EntityStats
from med_notes.resolution.cache import BoundedCache
from med_notes.resolution.config import ResolutionConfig

logger = logging.getLogger(__name__)

STATS_PREFIX = "stats:"


def stats_cache_key(entity_id: str) -> str:
    return f"{STATS_PREFIX}{entity_id}"


class EntityStatsLookup:
    """Fetches entity statistics once per TTL window."""

    def __init__(
        self,
        lookup: StatsLookup,
        cache: BoundedCache,
        config: ResolutionConfig | None = None,
    ) -> None:
        self._lookup = lookup
        self._cache = cache
        self._config = config or ResolutionConfig()

    async def get_stats(self, entity_id: str) -> EntityStats | None:
        """Return cached stats or fetch them. Raises LookupUnavailable."""
        key = stats_cache_key(entity_id)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        stats = await self._lookup.lookup_entity_stats(entity_id)
        if stats is not None:
            self._cache.set(key, stats, self._config.stats_ttl_ms)
        return stats

    def invalidate(self, entity_id: str) -> bool:
        return self._cache.invalidate(stats_cache_key(entity_id))
