"""Core types, protocols and exceptions."""

from med_notes.core.exceptions import (
    AttachFailed,
    LookupUnavailable,
    MedNotesError,
    ValidationError,
)
from med_notes.core.protocols import ChangeFeed, EntityWriter, FeatureLookup, StatsLookup
from med_notes.core.types import (
    CacheEntry,
    CanonicalFeature,
    ChangeEvent,
    EntityStats,
    FeatureAttachment,
    FeatureType,
    MatchType,
    ResolutionStatus,
    ResolvedToken,
    Suggestion,
    Token,
    ValueModifier,
)

__all__ = [
    # Types
    "CacheEntry",
    "CanonicalFeature",
    "ChangeEvent",
    "EntityStats",
    "FeatureAttachment",
    "FeatureType",
    "MatchType",
    "ResolutionStatus",
    "ResolvedToken",
    "Suggestion",
    "Token",
    "ValueModifier",
    # Protocols
    "ChangeFeed",
    "EntityWriter",
    "FeatureLookup",
    "StatsLookup",
    # Exceptions
    "AttachFailed",
    "LookupUnavailable",
    "MedNotesError",
    "ValidationError",
]
