"""Autocomplete endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from med_notes.core.exceptions import LookupUnavailable
from med_notes.resolution.matcher import SuggestionMatcher
from med_notes.server.dependencies import get_matcher
from med_notes.server.schemas import SuggestionItem, SuggestResponse

router = APIRouter()


@router.get("/features/suggest")
async def suggest(
    q: str = Query(default="", description="Partial word being typed"),
    limit: int | None = Query(default=None, ge=1, le=100),
    matcher: SuggestionMatcher = Depends(get_matcher),
) -> SuggestResponse:
    """Debounced, cached suggestions for the current session.

    A lookup failure is not fatal for autocomplete: it yields no
    suggestions plus an error message.
    """
    try:
        results = await matcher.suggest(q, limit)
    except LookupUnavailable as exc:
        return SuggestResponse(query=q, error=str(exc))

    if results is None:
        return SuggestResponse(query=q, superseded=True)
    return SuggestResponse(
        query=q,
        suggestions=[SuggestionItem.from_suggestion(s) for s in results],
    )
