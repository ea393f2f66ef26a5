"""Protocols (interfaces) for the external collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, AsyncIterator, Protocol, runtime_checkable

if TYPE_CHECKING:
    from med_notes.core.types import (
        CanonicalFeature,
        ChangeEvent,
        EntityStats,
        FeatureAttachment,
        Suggestion,
    )


@runtime_checkable
class FeatureLookup(Protocol):
    """Full-text lookup over the canonical feature registry."""

    async def lookup_suggestions(self, term: str, limit: int) -> list[Suggestion]:
        """Ranked candidates for a partial word.

        Raises LookupUnavailable on transport or service failure.
        """
        ...

    async def lookup_canonical(self, text: str) -> CanonicalFeature | None:
        """Best canonical match for a clean token, or None for no match.

        Raises LookupUnavailable on transport or service failure.
        """
        ...


@runtime_checkable
class EntityWriter(Protocol):
    """Writes feature links onto a target entity."""

    async def attach_feature(
        self,
        entity_id: str,
        feature_id: str,
        attachment: FeatureAttachment,
    ) -> dict[str, Any]:
        """Link a feature to an entity. Raises AttachFailed on failure."""
        ...


@runtime_checkable
class StatsLookup(Protocol):
    """Per-entity statistics (Quick Peek)."""

    async def lookup_entity_stats(self, entity_id: str) -> EntityStats | None:
        ...


@runtime_checkable
class ChangeFeed(Protocol):
    """Source of change notifications per entity class."""

    def change_notifications(self, entity_class: str) -> AsyncIterator[ChangeEvent]:
        ...
