"""Result composer: merge resolution outputs into the wire response shapes.

None of these functions raise; every output is JSON-serializable.
"""

from __future__ import annotations

from typing import Any

from landsurvey.geocoding.models import GeocodeResult, GeocodeSuggestion
from landsurvey.parcels.models import SearchCandidate

ADDRESS_NOT_FOUND = {"error": "Address not found"}


def compose_candidates(candidates: list[SearchCandidate] | None) -> list[dict[str, Any]]:
    return [c.model_dump(mode="json") for c in candidates or []]


def compose_nearest(candidate: SearchCandidate | None) -> list[dict[str, Any]]:
    """One-element list for a hit, empty list for "not found"."""
    if candidate is None:
        return []
    return [candidate.model_dump(mode="json")]


def compose_resolution(
    result: SearchCandidate | GeocodeResult | None,
) -> dict[str, Any]:
    """Flatten a local candidate or geocode result into ``{lat, lng, address}``."""
    if isinstance(result, SearchCandidate) and result.has_location:
        return {
            "lat": result.lat,
            "lng": result.lng,
            "address": result.address,
            "source": "local",
        }
    if isinstance(result, GeocodeResult):
        return {
            "lat": result.lat,
            "lng": result.lng,
            "address": result.label,
            "source": result.source_provider,
        }
    return dict(ADDRESS_NOT_FOUND)


def compose_suggestions(suggestions: list[GeocodeSuggestion] | None) -> list[dict[str, Any]]:
    return [s.model_dump(mode="json") for s in suggestions or []]
