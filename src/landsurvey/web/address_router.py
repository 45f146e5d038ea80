"""FastAPI router for full address resolution and autocomplete."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from landsurvey.parcels.compose import compose_resolution, compose_suggestions

router = APIRouter()


@router.get("/api/address/search")
async def resolve_address(request: Request, q: str | None = None) -> dict[str, Any]:
    """Local match if any, otherwise the external geocoding chain.

    A miss is ``{"error": "Address not found"}`` with HTTP 200.
    """
    service = request.app.state.resolution_service
    result = await service.resolve_address(q)
    return compose_resolution(result)


@router.get("/api/address/suggestions")
async def address_suggestions(request: Request, q: str | None = None) -> list[dict[str, Any]]:
    """Autocomplete from the first geocoding provider only."""
    service = request.app.state.resolution_service
    suggestions = await service.suggest(q)
    return compose_suggestions(suggestions)
