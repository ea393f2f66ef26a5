"""Change notifications → coarse cache invalidation."""

from __future__ import annotations

import asyncio
import logging

from med_notes.core.protocols import ChangeFeed
from med_notes.core.types import ChangeEvent
from med_notes.resolution.cache import BoundedCache
from med_notes.resolution.config import ResolutionConfig

logger = logging.getLogger(__name__)


class CacheInvalidator:
    """Consumes change streams and drops cache entries by key prefix.

    There is no dependency graph between cache keys and records, so every
    change to an entity class invalidates all prefixes mapped to that
    class. One background task per subscribed class; the owner starts and
    stops them.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        cache: BoundedCache,
        config: ResolutionConfig | None = None,
    ) -> None:
        self._feed = feed
        self._cache = cache
        self._config = config or ResolutionConfig()
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._events_seen = 0

    @property
    def subscriptions(self) -> list[str]:
        return [name for name, task in self._tasks.items() if not task.done()]

    @property
    def events_seen(self) -> int:
        return self._events_seen

    def prefixes_for(self, entity_class: str) -> list[str]:
        return list(self._config.invalidation_prefixes.get(entity_class, []))

    def handle(self, event: ChangeEvent) -> int:
        """Apply one change event. Returns the number of entries removed."""
        self._events_seen += 1
        removed = 0
        for prefix in self.prefixes_for(event.entity_class):
            removed += self._cache.invalidate_prefix(prefix)
        logger.debug(
            "%s on %s invalidated %d cache entries",
            event.event,
            event.entity_class,
            removed,
        )
        return removed

    async def subscribe(self, entity_class: str) -> None:
        """Start listening for changes to ``entity_class``."""
        existing = self._tasks.get(entity_class)
        if existing is not None and not existing.done():
            return
        self._tasks[entity_class] = asyncio.create_task(
            self._consume(entity_class), name=f"invalidate-{entity_class}"
        )
        logger.info("Subscribed to %s changes", entity_class)

    async def unsubscribe(self, entity_class: str) -> None:
        task = self._tasks.pop(entity_class, None)
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Unsubscribed from %s changes", entity_class)

    async def close(self) -> None:
        """Cancel every subscription."""
        for entity_class in list(self._tasks):
            await self.unsubscribe(entity_class)

    async def _consume(self, entity_class: str) -> None:
        try:
            async for event in self._feed.change_notifications(entity_class):
                self.handle(event)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Change stream for %s failed", entity_class)
