"""FastAPI application factory."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from med_notes import __version__
from med_notes.clients.feature_service import FeatureServiceClient
from med_notes.server.config import ServerConfig
from med_notes.server.dependencies import ResolutionServices
from med_notes.server.errors import EXCEPTION_HANDLERS
from med_notes.server.rest.middleware import RequestTimingMiddleware
from med_notes.server.rest.routers import cache, entities, features, health, tokens

logger = logging.getLogger(__name__)


def create_app(config: ServerConfig, feature_service: Any | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``feature_service`` replaces the HTTP client (tests pass an in-memory
    registry). A client built here is also closed here.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Startup
        app.state.config = config
        app.state.start_time = time.monotonic()

        owned_client: FeatureServiceClient | None = None
        service = feature_service
        if service is None:
            owned_client = FeatureServiceClient(config=config.feature_service)
            service = owned_client
            logger.info("Feature service client → %s", owned_client.base_url)

        app.state.services = ResolutionServices(service, config.resolution)
        await app.state.services.start(config.subscribe_to)

        logger.info(
            "Med Notes resolution server started (debounce=%dms, cache_ttl=%dms)",
            config.resolution.debounce_ms,
            config.resolution.cache_ttl_ms,
        )
        yield

        # Shutdown
        await app.state.services.close()
        app.state.services = None
        if owned_client is not None:
            await owned_client.close()
            logger.info("Feature service client closed")
        logger.info("Med Notes resolution server stopped")

    app = FastAPI(
        title="Med Notes",
        description="Clinical shorthand parsing and feature resolution",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestTimingMiddleware)

    # Exception handlers
    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    # Routers
    prefix = "/api/v1"
    app.include_router(health.router, prefix=prefix, tags=["health"])
    app.include_router(tokens.router, prefix=prefix, tags=["tokens"])
    app.include_router(features.router, prefix=prefix, tags=["features"])
    app.include_router(entities.router, prefix=prefix, tags=["entities"])
    app.include_router(cache.router, prefix=prefix, tags=["cache"])

    return app
