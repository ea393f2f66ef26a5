"""Error types and exception-to-HTTP mapping for the server."""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from med_notes.core.exceptions import AttachFailed, LookupUnavailable, ValidationError


class ServiceNotReadyError(Exception):
    """The app state has not been initialized by the lifespan yet."""


async def lookup_unavailable_handler(request: Request, exc: LookupUnavailable) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={
            "error": "lookup_unavailable",
            "detail": str(exc),
            "operation": exc.operation,
            "retryable": True,
        },
    )


async def attach_failed_handler(request: Request, exc: AttachFailed) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={
            "error": "attach_failed",
            "detail": str(exc),
            "entity_id": exc.entity_id,
            "feature_id": exc.feature_id,
        },
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "invalid_request", "detail": str(exc)},
    )


async def service_not_ready_handler(request: Request, exc: ServiceNotReadyError) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"error": "service_unavailable", "detail": str(exc)},
    )


EXCEPTION_HANDLERS = {
    LookupUnavailable: lookup_unavailable_handler,
    AttachFailed: attach_failed_handler,
    ValidationError: validation_error_handler,
    ServiceNotReadyError: service_not_ready_handler,
}
