"""Clean token text → canonical feature, with a short-lived cache."""

from __future__ import annotations

import logging

from med_notes.core.protocols import FeatureLookup
from med_notes.core.types import CanonicalFeature
from med_notes.resolution.cache import BoundedCache
from med_notes.resolution.config import ResolutionConfig

logger = logging.getLogger(__name__)

CANONICAL_PREFIX = "canonical:"


def canonical_cache_key(text: str) -> str:
    return f"{CANONICAL_PREFIX}{text.strip().lower()}"


class Canonicalizer:
    """Maps a token's clean text (or an alias like "SOB") to its feature.

    Only hits are cached; a miss is looked up again next time so a
    feature created in the meantime is picked up.
    """

    def __init__(
        self,
        lookup: FeatureLookup,
        cache: BoundedCache,
        config: ResolutionConfig | None = None,
    ) -> None:
        self._lookup = lookup
        self._cache = cache
        self._config = config or ResolutionConfig()

    async def canonicalize(self, clean_text: str) -> CanonicalFeature | None:
        """Return the canonical feature, or None when nothing matches.

        Raises LookupUnavailable when the lookup itself fails.
        """
        if not clean_text.strip():
            return None

        key = canonical_cache_key(clean_text)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        feature = await self._lookup.lookup_canonical(clean_text)
        if feature is None:
            logger.debug("No canonical feature for %r", clean_text)
            return None

        self._cache.set(key, feature, self._config.canonical_ttl_ms)
        return feature
