"""FastAPI application for the landsurvey parcel resolution API.

Provides REST endpoints for local parcel search, map-click lookup, full
address resolution with external geocoding fallback, autocomplete, and a
health check.

Run with::

    uvicorn landsurvey.web.app:create_app --factory --port 8080

For local development against the bundled fixtures::

    export LANDSURVEY_DATASET_FIXTURES_PATH=config/parcel_fixtures.yml
    uvicorn landsurvey.web.app:create_app --factory --reload
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from landsurvey import __version__
from landsurvey.core.config import Settings
from landsurvey.core.errors import DataStoreError, InvalidInput
from landsurvey.parcels.service import ParcelResolutionService, create_resolution_service
from landsurvey.web.address_router import router as address_router
from landsurvey.web.parcel_router import router as parcel_router

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = __version__
    store: dict[str, Any] = Field(default_factory=dict)


def create_app(
    settings: Settings | None = None,
    resolution_service: ParcelResolutionService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with fake stores and fake geocoding providers.

    Args:
        settings: Application settings. Defaults to Settings().
        resolution_service: Optional pre-built ParcelResolutionService.

    Returns:
        A configured FastAPI instance.
    """
    if settings is None:
        settings = Settings()

    logging.getLogger("landsurvey").setLevel(settings.log_level.upper())

    if resolution_service is None:
        resolution_service = create_resolution_service(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await resolution_service.close()

    app = FastAPI(
        title="Land Survey Parcel API",
        description="Address and cadastral parcel resolution",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.resolution_service = resolution_service

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(DataStoreError)
    async def data_store_handler(request: Request, exc: DataStoreError) -> JSONResponse:
        logger.error("Data store failure on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"detail": "Parcel data store unavailable"},
        )

    app.include_router(parcel_router)
    app.include_router(address_router)

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint, including reference-data counts."""
        try:
            store = await resolution_service.store.health()
        except DataStoreError as exc:
            return HealthResponse(
                status="degraded",
                service="landsurvey",
                store={"error": str(exc)},
            )
        return HealthResponse(status="healthy", service="landsurvey", store=store)

    return app
