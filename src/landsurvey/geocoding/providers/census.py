"""US Census Bureau geocoder (authoritative, exact house-number matches)."""

from __future__ import annotations

import logging

from landsurvey.core.config import GeocodingConfig
from landsurvey.core.errors import ProviderUnavailable
from landsurvey.geocoding.client import GeocodingProvider
from landsurvey.geocoding.models import GeocodeSuggestion

logger = logging.getLogger(__name__)


class CensusGeocoder(GeocodingProvider):
    """Talks to the ``/geocoder/locations/onelineaddress`` endpoint.

    Coverage is limited to addressable US street segments and works best
    with "number street, city, state" input. Coordinates come back as
    ``x`` (longitude) / ``y`` (latitude).
    """

    name = "census"

    @classmethod
    def base_url_from(cls, config: GeocodingConfig) -> str:
        return config.census_base_url

    async def search(self, query: str, *, limit: int) -> list[GeocodeSuggestion]:
        data = await self._get_json(
            "/geocoder/locations/onelineaddress",
            {
                "address": query,
                "benchmark": self.config.census_benchmark,
                "format": "json",
            },
        )
        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, "unexpected response shape")
        result = data.get("result") or {}
        matches = result.get("addressMatches") if isinstance(result, dict) else None
        if not isinstance(matches, list):
            if "errors" in data:
                logger.debug("Census rejected %r: %s", query, data["errors"])
                return []
            raise ProviderUnavailable(self.name, "missing addressMatches")

        suggestions: list[GeocodeSuggestion] = []
        for match in matches:
            if not isinstance(match, dict):
                continue
            coords = match.get("coordinates")
            if not isinstance(coords, dict):
                continue
            suggestion = self._suggestion(
                match.get("matchedAddress") or query,
                coords.get("y"),
                coords.get("x"),
            )
            if suggestion is not None:
                suggestions.append(suggestion)
            if len(suggestions) >= limit:
                break
        return suggestions
