"""Time sources for cache expiry."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol, runtime_checkable

from med_notes.core.utils import utc_now


@runtime_checkable
class Clock(Protocol):
    """Anything that can tell BoundedCache the current UTC time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock UTC time."""

    def now(self) -> datetime:
        return utc_now()


class FakeClock:
    """Manually driven clock; entries expire only when a test moves it."""

    def __init__(self, start: datetime | None = None) -> None:
        self._current = start or utc_now()

    def now(self) -> datetime:
        return self._current

    def advance(self, seconds: float) -> None:
        self._current += timedelta(seconds=seconds)

    def advance_ms(self, ms: int) -> None:
        """Move forward in the same unit cache TTLs are configured in."""
        self._current += timedelta(milliseconds=ms)
