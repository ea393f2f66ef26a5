"""In-memory feature registry standing in for the lookup/attach service.

Implements FeatureLookup, EntityWriter and StatsLookup with call tracking,
configurable latency and injectable failures, so tests can exercise the
debounce, cache and per-token failure paths without a network.
"""

from __future__ import annotations

import asyncio
from typing import Any

from med_notes.core.exceptions import AttachFailed, LookupUnavailable
from med_notes.core.types import (
    CanonicalFeature,
    EntityStats,
    FeatureAttachment,
    FeatureType,
    MatchType,
    Suggestion,
)

SEED_FEATURES: list[tuple[str, str, FeatureType, list[str]]] = [
    ("f-dyspnea", "Dyspnea", FeatureType.SYMPTOM, ["SOB", "Shortness of breath"]),
    ("f-murmur", "Murmur", FeatureType.SIGN, []),
    ("f-ferritin", "Ferritin", FeatureType.LAB, []),
    ("f-mcv", "MCV", FeatureType.LAB, ["Mean corpuscular volume"]),
    ("f-koilonychia", "Koilonychia", FeatureType.SIGN, ["Spoon nails"]),
    ("f-tibc", "TIBC", FeatureType.LAB, []),
]


class InMemoryFeatureService:
    """Fake registry. Names and aliases match case-insensitively."""

    def __init__(self, latency: float = 0.0) -> None:
        self.latency = latency
        self.features: dict[str, CanonicalFeature] = {}
        self.aliases: dict[str, str] = {}
        self.links: dict[tuple[str, str], dict[str, Any]] = {}
        self.stats_rows: dict[str, EntityStats] = {}

        self.search_calls: list[tuple[str, int]] = []
        self.canonical_calls: list[str] = []
        self.attach_calls: list[tuple[str, str, FeatureAttachment]] = []
        self.stats_calls: list[str] = []

        self.fail_search = False
        self.fail_canonical_for: set[str] = set()
        self.fail_attach_for: set[str] = set()
        self.fail_stats = False

        for feature_id, name, feature_type, aliases in SEED_FEATURES:
            self.add_feature(feature_id, name, feature_type, aliases)

    def add_feature(
        self,
        feature_id: str,
        name: str,
        feature_type: FeatureType,
        aliases: list[str] | None = None,
    ) -> None:
        self.features[feature_id] = CanonicalFeature(id=feature_id, name=name, type=feature_type)
        self.aliases[name.lower()] = feature_id
        for alias in aliases or []:
            self.aliases[alias.lower()] = feature_id

    async def _pause(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)

    async def lookup_suggestions(self, term: str, limit: int) -> list[Suggestion]:
        self.search_calls.append((term, limit))
        await self._pause()
        if self.fail_search:
            raise LookupUnavailable("search_features_advanced", "search backend down")

        needle = term.lower()
        results: list[Suggestion] = []
        for alias, feature_id in self.aliases.items():
            if needle not in alias:
                continue
            feature = self.features[feature_id]
            is_alias = alias != feature.name.lower()
            if any(s.id == feature_id for s in results):
                continue
            results.append(
                Suggestion(
                    id=feature.id,
                    name=feature.name,
                    type=feature.type or FeatureType.SYMPTOM,
                    match_type=MatchType.ALIAS if is_alias else MatchType.EXACT,
                    matched_alias=alias if is_alias else None,
                )
            )
        return results[:limit]

    async def lookup_canonical(self, text: str) -> CanonicalFeature | None:
        self.canonical_calls.append(text)
        await self._pause()
        if text.lower() in self.fail_canonical_for:
            raise LookupUnavailable("canonicalize_feature", f"timeout looking up {text}")
        feature_id = self.aliases.get(text.lower())
        return self.features.get(feature_id) if feature_id else None

    async def attach_feature(
        self,
        entity_id: str,
        feature_id: str,
        attachment: FeatureAttachment,
    ) -> dict[str, Any]:
        self.attach_calls.append((entity_id, feature_id, attachment))
        await self._pause()
        if feature_id in self.fail_attach_for:
            raise AttachFailed(entity_id, feature_id, "row-level security rejected write")
        record = {
            "disease_id": entity_id,
            "feature_id": feature_id,
            "is_present": attachment.is_present,
            "value_text": attachment.value_text or None,
            "typicality": "common",
            "weight": 1,
        }
        self.links[(entity_id, feature_id)] = record
        return record

    async def lookup_entity_stats(self, entity_id: str) -> EntityStats | None:
        self.stats_calls.append(entity_id)
        await self._pause()
        if self.fail_stats:
            raise LookupUnavailable("get_disease_stats", "stats backend down")
        if entity_id in self.stats_rows:
            return self.stats_rows[entity_id]
        linked = [r for (eid, _), r in self.links.items() if eid == entity_id]
        if not linked and entity_id.startswith("missing"):
            return None
        present = sum(1 for r in linked if r["is_present"])
        return EntityStats(
            entity_id=entity_id,
            feature_count=len(linked),
            present_count=present,
            absent_count=len(linked) - present,
        )
