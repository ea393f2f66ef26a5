"""Dependency injection: resolution services, per-session matchers."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any

from fastapi import Depends, Header, Request

from med_notes.clients.change_feed import WebhookChangeFeed
from med_notes.resolution.cache import BoundedCache
from med_notes.resolution.canonicalizer import Canonicalizer
from med_notes.resolution.config import ResolutionConfig
from med_notes.resolution.invalidation import CacheInvalidator
from med_notes.resolution.matcher import SuggestionMatcher
from med_notes.resolution.stats import EntityStatsLookup
from med_notes.resolution.workflow import ResolutionWorkflow
from med_notes.server.errors import ServiceNotReadyError

logger = logging.getLogger(__name__)


class ResolutionServices:
    """Everything one server process shares: cache, workflow, feeds.

    ``feature_service`` must implement FeatureLookup, EntityWriter and
    StatsLookup. Suggestion matchers are per input session because each
    owns its own debounce state; they all share the one cache.
    """

    def __init__(
        self,
        feature_service: Any,
        config: ResolutionConfig,
        feed: WebhookChangeFeed | None = None,
    ) -> None:
        self.config = config
        self.feature_service = feature_service
        self.cache = BoundedCache(
            default_ttl_ms=config.cache_ttl_ms,
            max_entries=config.max_cache_entries,
        )
        self.feed = feed or WebhookChangeFeed()
        self.canonicalizer = Canonicalizer(feature_service, self.cache, config)
        self.workflow = ResolutionWorkflow(self.canonicalizer, feature_service, self.cache)
        self.stats = EntityStatsLookup(feature_service, self.cache, config)
        self.invalidator = CacheInvalidator(self.feed, self.cache, config)
        self._matchers: OrderedDict[str, SuggestionMatcher] = OrderedDict()

    def matcher(self, session_id: str) -> SuggestionMatcher:
        """Get or create the matcher for one input session.

        At most ``config.max_sessions`` matchers are kept; the least
        recently used one is cancelled and dropped to make room.
        """
        existing = self._matchers.get(session_id)
        if existing is not None:
            self._matchers.move_to_end(session_id)
            return existing

        while len(self._matchers) >= max(self.config.max_sessions, 1):
            evicted_id, evicted = self._matchers.popitem(last=False)
            evicted.cancel()
            logger.debug("Evicted idle suggestion matcher for session %s", evicted_id)

        created = SuggestionMatcher(self.feature_service, self.cache, self.config)
        self._matchers[session_id] = created
        logger.debug("Created suggestion matcher for session %s", session_id)
        return created

    @property
    def session_count(self) -> int:
        return len(self._matchers)

    async def start(self, entity_classes: list[str]) -> None:
        for entity_class in entity_classes:
            await self.invalidator.subscribe(entity_class)

    async def close(self) -> None:
        for matcher in self._matchers.values():
            matcher.cancel()
        self._matchers.clear()
        await self.invalidator.close()
        self.cache.clear()


def get_services(request: Request) -> ResolutionServices:
    """Get the ResolutionServices from app state."""
    services: ResolutionServices | None = getattr(request.app.state, "services", None)
    if services is None:
        raise ServiceNotReadyError("Resolution services not initialized")
    return services


def resolve_session_id(x_session_id: str = Header(default="default")) -> str:
    """Input session from request headers (one per autocomplete box)."""
    return x_session_id


def get_matcher(
    services: ResolutionServices = Depends(get_services),
    session_id: str = Depends(resolve_session_id),
) -> SuggestionMatcher:
    return services.matcher(session_id)
