"""Entity statistics (Quick Peek) endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from med_notes.server.dependencies import ResolutionServices, get_services
from med_notes.server.schemas import EntityStatsResponse

router = APIRouter()


@router.get("/entities/{entity_id}/stats")
async def entity_stats(
    entity_id: str,
    services: ResolutionServices = Depends(get_services),
) -> EntityStatsResponse:
    stats = await services.stats.get_stats(entity_id)
    if stats is None:
        raise HTTPException(status_code=404, detail=f"No statistics for '{entity_id}'")
    return EntityStatsResponse(
        entity_id=stats.entity_id,
        feature_count=stats.feature_count,
        present_count=stats.present_count,
        absent_count=stats.absent_count,
        pathognomonic_count=stats.pathognomonic_count,
        extra=stats.extra,
    )
