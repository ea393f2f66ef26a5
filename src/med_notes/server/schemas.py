"""Pydantic request/response models for the REST API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from med_notes.core.types import ResolvedToken, Suggestion, Token
from med_notes.resolution.workflow import ResolutionReport


# ========== Tokens ==========

class TextRequest(BaseModel):
    text: str = Field(description="Shorthand such as '+Dyspnea -Murmur Ferritin↓ MCV<80'")


class TokenItem(BaseModel):
    original_text: str
    clean_text: str
    is_present: bool
    value_modifier: str | None = None
    numeric_value: int | None = None
    display_value: str = ""

    @classmethod
    def from_token(cls, token: Token) -> TokenItem:
        return cls(
            original_text=token.original_text,
            clean_text=token.clean_text,
            is_present=token.is_present,
            value_modifier=token.value_modifier.value or None,
            numeric_value=token.numeric_value,
            display_value=token.display_value,
        )


class ParseResponse(BaseModel):
    tokens: list[TokenItem]


class ResolvedTokenItem(BaseModel):
    token: TokenItem
    status: str
    canonical_feature_id: str | None = None
    canonical_name: str | None = None
    attached: bool = False
    needs_manual_creation: bool = False
    error: str | None = None

    @classmethod
    def from_resolved(cls, resolved: ResolvedToken) -> ResolvedTokenItem:
        return cls(
            token=TokenItem.from_token(resolved.token),
            status=resolved.status.value,
            canonical_feature_id=resolved.canonical_feature_id,
            canonical_name=resolved.canonical_name,
            attached=resolved.attached,
            needs_manual_creation=resolved.needs_manual_creation,
            error=resolved.error,
        )


class SummaryItem(BaseModel):
    total: int
    recognized: int
    attached: int
    needs_manual_creation: int
    failed: int
    empty: int

    @classmethod
    def from_report(cls, report: ResolutionReport) -> SummaryItem:
        return cls(
            total=report.total,
            recognized=report.recognized,
            attached=report.attached,
            needs_manual_creation=report.needs_manual_creation,
            failed=report.failed,
            empty=report.empty,
        )


class ResolveResponse(BaseModel):
    entity_id: str | None = None
    results: list[ResolvedTokenItem]
    summary: SummaryItem


# ========== Suggestions ==========

class SuggestionItem(BaseModel):
    id: str
    name: str
    type: str
    match_type: str
    matched_alias: str | None = None

    @classmethod
    def from_suggestion(cls, suggestion: Suggestion) -> SuggestionItem:
        return cls(
            id=suggestion.id,
            name=suggestion.name,
            type=suggestion.type.value,
            match_type=suggestion.match_type.value,
            matched_alias=suggestion.matched_alias,
        )


class SuggestResponse(BaseModel):
    query: str
    suggestions: list[SuggestionItem] = Field(default_factory=list)
    superseded: bool = False
    error: str | None = None


# ========== Entity stats ==========

class EntityStatsResponse(BaseModel):
    entity_id: str
    feature_count: int
    present_count: int
    absent_count: int
    pathognomonic_count: int
    extra: dict[str, Any] = Field(default_factory=dict)


# ========== Cache ==========

class InvalidateRequest(BaseModel):
    prefix: str


class InvalidateResponse(BaseModel):
    prefix: str
    removed: int


class ChangeNotification(BaseModel):
    """Database webhook payload (one row change)."""

    table: str
    type: str = "*"
    record: dict[str, Any] | None = None
    old_record: dict[str, Any] | None = None


class ChangeAccepted(BaseModel):
    entity_class: str
    delivered: int


# ========== Health ==========

class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    uptime_seconds: float


class StatusResponse(BaseModel):
    status: str = "ok"
    version: str
    uptime_seconds: float
    cache: dict[str, Any]
    sessions: int
    subscriptions: list[str]
