"""In-process change feed fed by database webhooks."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator

from med_notes.core.types import ChangeEvent

logger = logging.getLogger(__name__)


class WebhookChangeFeed:
    """ChangeFeed whose events are pushed in by ``publish``.

    Every listener of an entity class gets its own queue, so two
    subscribers to the same class both see every event.
    """

    def __init__(self, max_queue_size: int = 1000) -> None:
        self._max_queue_size = max_queue_size
        self._listeners: dict[str, list[asyncio.Queue[ChangeEvent]]] = {}
        self._published = 0

    @property
    def published_count(self) -> int:
        return self._published

    def listener_count(self, entity_class: str) -> int:
        return len(self._listeners.get(entity_class, []))

    def publish(self, event: ChangeEvent) -> int:
        """Fan an event out to listeners. Returns how many received it."""
        self._published += 1
        delivered = 0
        for queue in self._listeners.get(event.entity_class, []):
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("Change listener for %s is full, dropping event", event.entity_class)
        return delivered

    async def change_notifications(self, entity_class: str) -> AsyncIterator[ChangeEvent]:
        queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=self._max_queue_size)
        self._listeners.setdefault(entity_class, []).append(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            self._listeners[entity_class].remove(queue)
