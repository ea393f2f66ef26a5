"""Core data types for Med Notes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ValueModifier(str, Enum):
    """Directional arrow or comparison operator attached to a token.

    A ``str`` enum so it compares equal to the glyph as typed.
    """

    NONE = ""
    UP = "↑"
    DOWN = "↓"
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="

    @property
    def is_directional(self) -> bool:
        return self in (ValueModifier.UP, ValueModifier.DOWN)

    @property
    def is_comparison(self) -> bool:
        return self in (
            ValueModifier.LT,
            ValueModifier.LTE,
            ValueModifier.GT,
            ValueModifier.GTE,
        )


class FeatureType(Enum):
    """Kind of clinical feature in the canonical registry."""

    SYMPTOM = "symptom"
    SIGN = "sign"
    LAB = "lab"
    IMAGING = "imaging"
    CRITERION = "criterion"
    PATHOGNOMONIC = "pathognomonic"


class MatchType(Enum):
    """How the lookup service matched a suggestion."""

    EXACT = "exact"
    ALIAS = "alias"
    FUZZY = "fuzzy"


class ResolutionStatus(Enum):
    """Outcome of resolving a single token."""

    ATTACHED = "attached"  # Canonical match linked to the target entity
    ATTACH_FAILED = "attach_failed"  # Canonical match, but the write failed
    LOOKUP_FAILED = "lookup_failed"  # Lookup service unavailable (retryable)
    NOT_FOUND = "not_found"  # Lookup succeeded with zero matches
    EMPTY = "empty"  # Nothing left after stripping sign/modifier
    PREVIEW = "preview"  # Matched, attach not attempted


@dataclass(frozen=True)
class Token:
    """One whitespace-delimited unit of shorthand input."""

    original_text: str
    clean_text: str
    is_present: bool = True
    value_modifier: ValueModifier = ValueModifier.NONE
    numeric_value: int | None = None

    @property
    def is_empty(self) -> bool:
        return not self.clean_text

    @property
    def display_value(self) -> str:
        """Modifier rendered back as text, e.g. ``"↓"`` or ``"<80"``."""
        if self.value_modifier.is_comparison and self.numeric_value is not None:
            return f"{self.value_modifier.value}{self.numeric_value}"
        return self.value_modifier.value

    def as_dict(self) -> dict[str, Any]:
        return {
            "original_text": self.original_text,
            "clean_text": self.clean_text,
            "is_present": self.is_present,
            "value_modifier": self.value_modifier.value or None,
            "numeric_value": self.numeric_value,
        }


@dataclass
class Suggestion:
    """A candidate canonical feature returned for a partial word."""

    id: str
    name: str
    type: FeatureType
    match_type: MatchType = MatchType.EXACT
    matched_alias: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Suggestion:
        """Build from a lookup-service row (``matched_text`` holds the alias)."""
        return cls(
            id=str(row["id"]),
            name=row["name"],
            type=FeatureType(row["type"]),
            match_type=MatchType(row.get("match_type") or "exact"),
            matched_alias=row.get("matched_alias") or row.get("matched_text"),
        )


@dataclass
class CanonicalFeature:
    """The authoritative identity a token resolves to."""

    id: str
    name: str
    type: FeatureType | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> CanonicalFeature:
        feature_id = row.get("feature_id", row.get("id"))
        name = row.get("canonical_name", row.get("name", ""))
        raw_type = row.get("feature_type", row.get("type"))
        return cls(
            id=str(feature_id),
            name=name,
            type=FeatureType(raw_type) if raw_type else None,
        )


@dataclass(frozen=True)
class FeatureAttachment:
    """Attributes derived from a token when it is linked to an entity.

    Typicality and weight are left to the writer's defaults.
    """

    is_present: bool
    value_text: str = ""

    @classmethod
    def from_token(cls, token: Token) -> FeatureAttachment:
        return cls(is_present=token.is_present, value_text=token.display_value)


@dataclass
class ResolvedToken:
    """A token enriched with its canonical reference and attach outcome."""

    token: Token
    status: ResolutionStatus
    canonical_feature_id: str | None = None
    canonical_name: str | None = None
    attached: bool = False
    needs_manual_creation: bool = False
    error: str | None = None
    record: dict[str, Any] | None = None

    @property
    def is_resolved(self) -> bool:
        return self.canonical_feature_id is not None

    @property
    def is_retryable(self) -> bool:
        return self.status in (
            ResolutionStatus.LOOKUP_FAILED,
            ResolutionStatus.ATTACH_FAILED,
        )


@dataclass
class CacheEntry:
    """A cached value with its absolute expiry time."""

    key: str
    value: Any
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass
class EntityStats:
    """Quick Peek summary of a target entity's attached features."""

    entity_id: str
    feature_count: int = 0
    present_count: int = 0
    absent_count: int = 0
    pathognomonic_count: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, entity_id: str, row: dict[str, Any]) -> EntityStats:
        known = {
            "feature_count",
            "present_count",
            "absent_count",
            "pathognomonic_count",
        }
        return cls(
            entity_id=entity_id,
            feature_count=int(row.get("feature_count") or 0),
            present_count=int(row.get("present_count") or 0),
            absent_count=int(row.get("absent_count") or 0),
            pathognomonic_count=int(row.get("pathognomonic_count") or 0),
            extra={k: v for k, v in row.items() if k not in known},
        )


@dataclass
class ChangeEvent:
    """A change notification for one entity class (table)."""

    entity_class: str
    event: str = "*"
    record_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
