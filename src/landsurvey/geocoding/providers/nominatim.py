"""OpenStreetMap Nominatim geocoder (broad coverage, tolerant of partial input)."""

from __future__ import annotations

from typing import Any

from landsurvey.core.config import GeocodingConfig
from landsurvey.core.errors import ProviderUnavailable
from landsurvey.geocoding.client import GeocodingProvider
from landsurvey.geocoding.models import GeocodeSuggestion


class NominatimGeocoder(GeocodingProvider):
    """Talks to ``/search?format=jsonv2``; ``lat``/``lon`` arrive as strings."""

    name = "nominatim"

    @classmethod
    def base_url_from(cls, config: GeocodingConfig) -> str:
        return config.nominatim_base_url

    async def search(self, query: str, *, limit: int) -> list[GeocodeSuggestion]:
        params: dict[str, Any] = {"q": query, "format": "jsonv2", "limit": limit}
        if self.config.nominatim_country_codes:
            params["countrycodes"] = self.config.nominatim_country_codes
        if self.config.nominatim_viewbox:
            params["viewbox"] = self.config.nominatim_viewbox

        data = await self._get_json("/search", params)
        if not isinstance(data, list):
            raise ProviderUnavailable(self.name, "unexpected response shape")

        suggestions: list[GeocodeSuggestion] = []
        for place in data:
            if not isinstance(place, dict):
                continue
            suggestion = self._suggestion(
                place.get("display_name") or query,
                place.get("lat"),
                place.get("lon"),
            )
            if suggestion is not None:
                suggestions.append(suggestion)
            if len(suggestions) >= limit:
                break
        return suggestions
