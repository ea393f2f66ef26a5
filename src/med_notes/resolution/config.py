"""Configuration for suggestion matching, canonicalization and caching."""

from __future__ import annotations

from dataclasses import dataclass, field


def _default_invalidation_prefixes() -> dict[str, list[str]]:
    return {
        "features": ["search:", "canonical:"],
        "diseases": ["stats:"],
        "disease_feature": ["stats:"],
    }


@dataclass
class ResolutionConfig:
    """Latency and cache settings.

    Defaults match the interactive input box: 300ms debounce and a five
    minute search cache.
    """

    debounce_ms: int = 300
    cache_ttl_ms: int = 300_000  # 5 minutes
    canonical_ttl_ms: int = 60_000
    stats_ttl_ms: int = 300_000
    max_results: int = 10
    min_query_length: int = 2
    max_cache_entries: int = 1024
    max_sessions: int = 256  # per-session autocomplete matchers kept alive

    # Change notifications for an entity class drop these key prefixes
    invalidation_prefixes: dict[str, list[str]] = field(
        default_factory=_default_invalidation_prefixes
    )

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000
