"""Pytest fixtures for med-notes tests.

Provides fixtures for:
- Fake clock for cache expiry
- In-memory feature registry (lookup + attach + stats)
- Shared cache and fast-debounce configuration
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from med_notes.resolution.cache import BoundedCache
from med_notes.resolution.config import ResolutionConfig
from med_notes.temporal.clock import FakeClock

from tests.feature_registry import InMemoryFeatureService


# ============================================================================
# Core fixtures
# ============================================================================


@pytest.fixture
def fake_clock() -> FakeClock:
    """Create a fake clock for testing."""
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def config() -> ResolutionConfig:
    """Short debounce so timing tests stay fast."""
    return ResolutionConfig(debounce_ms=50, cache_ttl_ms=300_000)


@pytest.fixture
def cache(fake_clock: FakeClock, config: ResolutionConfig) -> BoundedCache:
    return BoundedCache(default_ttl_ms=config.cache_ttl_ms, clock=fake_clock)


@pytest.fixture
def registry() -> InMemoryFeatureService:
    return InMemoryFeatureService()
