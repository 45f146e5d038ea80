"""FastAPI router for local parcel search and map-click lookup."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from landsurvey.parcels.compose import compose_candidates, compose_nearest

router = APIRouter()


@router.get("/api/search")
async def search_parcels(request: Request, q: str | None = None) -> list[dict[str, Any]]:
    """Local-only address/identifier search (at most five candidates)."""
    service = request.app.state.resolution_service
    candidates = await service.search(q)
    return compose_candidates(candidates)


@router.get("/api/parcels")
async def nearest_parcel(request: Request, lat: str, lng: str) -> list[dict[str, Any]]:
    """Parcel closest to a map click, as a one-element list (or empty)."""
    service = request.app.state.resolution_service
    candidate = await service.nearest(lat, lng)
    return compose_nearest(candidate)
