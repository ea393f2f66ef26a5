"""Health and status endpoints."""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from med_notes import __version__
from med_notes.server.schemas import HealthResponse, StatusResponse

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> HealthResponse:
    elapsed = time.monotonic() - request.app.state.start_time
    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(elapsed, 1),
    )


@router.get("/status")
async def status(request: Request) -> StatusResponse:
    elapsed = time.monotonic() - request.app.state.start_time
    services = request.app.state.services
    return StatusResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(elapsed, 1),
        cache=services.cache.stats(),
        sessions=services.session_count,
        subscriptions=services.invalidator.subscriptions,
    )
