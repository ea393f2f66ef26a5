"""Cache invalidation and change-webhook endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from med_notes.core.types import ChangeEvent
from med_notes.server.dependencies import ResolutionServices, get_services
from med_notes.server.schemas import (
    ChangeAccepted,
    ChangeNotification,
    InvalidateRequest,
    InvalidateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/cache/invalidate")
async def invalidate(
    body: InvalidateRequest,
    services: ResolutionServices = Depends(get_services),
) -> InvalidateResponse:
    removed = services.cache.invalidate_prefix(body.prefix)
    return InvalidateResponse(prefix=body.prefix, removed=removed)


@router.post("/changes", status_code=202)
async def change_webhook(
    body: ChangeNotification,
    services: ResolutionServices = Depends(get_services),
) -> ChangeAccepted:
    """Receive a row-change webhook and fan it out to cache invalidation."""
    record = body.record or body.old_record or {}
    record_id = record.get("id")
    event = ChangeEvent(
        entity_class=body.table,
        event=body.type,
        record_id=str(record_id) if record_id is not None else None,
        payload=record,
    )
    delivered = services.feed.publish(event)
    logger.debug("Change on %s delivered to %d listener(s)", body.table, delivered)
    return ChangeAccepted(entity_class=body.table, delivered=delivered)
