"""Autocomplete suggestion matcher (debounced, cached)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from med_notes.core.exceptions import LookupUnavailable
from med_notes.core.protocols import FeatureLookup
from med_notes.core.types import Suggestion
from med_notes.resolution.cache import BoundedCache
from med_notes.resolution.config import ResolutionConfig
from med_notes.resolution.debounce import Debouncer

logger = logging.getLogger(__name__)

SEARCH_PREFIX = "search:"


def search_cache_key(term: str, limit: int) -> str:
    return f"{SEARCH_PREFIX}{term}:{limit}"


@dataclass
class SuggestionState:
    """What the input box renders: spinner, error, dropdown contents."""

    query: str = ""
    loading: bool = False
    error: LookupUnavailable | None = None
    results: list[Suggestion] = field(default_factory=list)


class SuggestionMatcher:
    """Resolves the word being typed to candidate canonical features.

    One matcher serves one input stream. A newer call supersedes any older
    call still waiting out the debounce window or still waiting on the
    lookup service; superseded calls return None instead of results.
    Lookup ordering is passed through untouched.
    """

    def __init__(
        self,
        lookup: FeatureLookup,
        cache: BoundedCache,
        config: ResolutionConfig | None = None,
        debouncer: Debouncer | None = None,
    ) -> None:
        self._lookup = lookup
        self._cache = cache
        self._config = config or ResolutionConfig()
        self._debouncer = debouncer or Debouncer(self._config.debounce_seconds)
        self.state = SuggestionState()
        self._lookup_count = 0

    @property
    def lookup_count(self) -> int:
        """Number of calls that reached the lookup service."""
        return self._lookup_count

    async def suggest(self, partial: str, limit: int | None = None) -> list[Suggestion] | None:
        """Suggest features for ``partial``.

        Returns the lookup results, ``[]`` for queries too short to search,
        or None when a newer call superseded this one. Raises
        LookupUnavailable only for the call that is still current.
        """
        if limit is None:
            limit = self._config.max_results
        term = partial.strip()
        self.state.query = term

        if len(term) < self._config.min_query_length:
            self._debouncer.supersede_all()
            self._deliver([])
            return []

        key = search_cache_key(term, limit)
        cached = self._cache.get(key)
        if cached is not None:
            self._debouncer.supersede_all()
            self._deliver(cached)
            return cached

        request = self._debouncer.issue()
        self.state.loading = True
        self.state.error = None

        if not await self._debouncer.settle(request):
            logger.debug("Suggestion request for %r superseded during debounce", term)
            return None

        self._lookup_count += 1
        try:
            results = await self._lookup.lookup_suggestions(term, limit)
        except LookupUnavailable as exc:
            if not self._debouncer.is_current(request):
                return None
            logger.warning("Suggestion lookup failed for %r: %s", term, exc)
            self.state.loading = False
            self.state.error = exc
            self.state.results = []
            raise

        # Still a valid answer for its own key even if no longer wanted.
        self._cache.set(key, results, self._config.cache_ttl_ms)

        if not self._debouncer.is_current(request):
            logger.debug("Discarding superseded suggestions for %r", term)
            return None

        self._deliver(results)
        return list(results)

    def cancel(self) -> None:
        """Drop any pending request (e.g. the input lost focus)."""
        self._debouncer.supersede_all()
        self.state.loading = False

    def _deliver(self, results: list[Suggestion]) -> None:
        self.state.loading = False
        self.state.error = None
        self.state.results = list(results)
