"""Debounce as explicit pending requests.

Each logical input stream (one autocomplete box) owns a ``Debouncer``.
Issuing a request marks every earlier request from the same stream stale
and wakes it, so only the most recent keystroke can reach the lookup
service or deliver a result.
"""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class PendingRequest:
    """One issued request; becomes stale when a newer one is issued."""

    def __init__(self, sequence: int) -> None:
        self.sequence = sequence
        self._superseded = asyncio.Event()

    @property
    def superseded(self) -> bool:
        return self._superseded.is_set()

    def supersede(self) -> None:
        self._superseded.set()

    async def wait(self, delay_seconds: float) -> bool:
        """Sleep out the debounce window.

        Returns True if the request is still current afterwards, False as
        soon as it is superseded (without waiting out the window).
        """
        if self.superseded:
            return False
        if delay_seconds <= 0:
            return True
        try:
            await asyncio.wait_for(self._superseded.wait(), timeout=delay_seconds)
        except TimeoutError:
            return not self.superseded
        return False


class Debouncer:
    """Issues PendingRequests; only the latest one is ever current."""

    def __init__(self, delay_seconds: float = 0.3) -> None:
        self._delay_seconds = delay_seconds
        self._sequence = 0
        self._current: PendingRequest | None = None
        self._superseded_count = 0

    @property
    def delay_seconds(self) -> float:
        return self._delay_seconds

    @property
    def superseded_count(self) -> int:
        return self._superseded_count

    def issue(self) -> PendingRequest:
        """Start a new request, superseding the previous one."""
        self.supersede_all()
        self._sequence += 1
        self._current = PendingRequest(self._sequence)
        return self._current

    def supersede_all(self) -> None:
        """Mark any outstanding request stale."""
        if self._current is not None and not self._current.superseded:
            self._current.supersede()
            self._superseded_count += 1
            logger.debug("Superseded pending request #%d", self._current.sequence)
        self._current = None

    def is_current(self, request: PendingRequest) -> bool:
        return request is self._current and not request.superseded

    async def settle(self, request: PendingRequest) -> bool:
        """Wait out the debounce window for ``request``."""
        return await request.wait(self._delay_seconds)
