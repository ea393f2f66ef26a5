"""Token parsing and resolution endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from med_notes.resolution.workflow import summarize
from med_notes.server.dependencies import ResolutionServices, get_services
from med_notes.server.schemas import (
    ParseResponse,
    ResolvedTokenItem,
    ResolveResponse,
    SummaryItem,
    TextRequest,
    TokenItem,
)
from med_notes.tokens.tokenizer import tokenize

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/tokens/parse")
async def parse_tokens(body: TextRequest) -> ParseResponse:
    """Tokenize shorthand without any lookups."""
    return ParseResponse(tokens=[TokenItem.from_token(t) for t in tokenize(body.text)])


@router.post("/tokens/preview")
async def preview_tokens(
    body: TextRequest,
    services: ResolutionServices = Depends(get_services),
) -> ResolveResponse:
    """Tokenize and canonicalize, without attaching anything."""
    results = await services.workflow.parse(body.text)
    return ResolveResponse(
        results=[ResolvedTokenItem.from_resolved(r) for r in results],
        summary=SummaryItem.from_report(summarize(results)),
    )


@router.post("/entities/{entity_id}/resolve")
async def resolve_tokens(
    entity_id: str,
    body: TextRequest,
    services: ResolutionServices = Depends(get_services),
) -> ResolveResponse:
    """Resolve shorthand and attach recognized features to the entity."""
    results = await services.workflow.resolve(body.text, entity_id)
    return ResolveResponse(
        entity_id=entity_id,
        results=[ResolvedTokenItem.from_resolved(r) for r in results],
        summary=SummaryItem.from_report(summarize(results)),
    )
