"""Komoot Photon geocoder, used as the fuzzy last resort."""

from __future__ import annotations

from typing import Any

from landsurvey.core.config import GeocodingConfig
from landsurvey.core.errors import ProviderUnavailable
from landsurvey.geocoding.client import GeocodingProvider
from landsurvey.geocoding.models import GeocodeSuggestion
from landsurvey.parcels.normalize import compose_address


def photon_label(properties: dict[str, Any]) -> str:
    """Build a display label from Photon feature properties."""
    street_line = compose_address(properties.get("housenumber"), properties.get("street"))
    name = properties.get("name")
    if name and name != properties.get("street"):
        street_line = compose_address(name, street_line, sep=", ")
    return compose_address(
        street_line,
        properties.get("city"),
        properties.get("state"),
        properties.get("postcode"),
        sep=", ",
    )


class PhotonGeocoder(GeocodingProvider):
    """Talks to ``/api``; answers are a GeoJSON FeatureCollection.

    Feature coordinates are ``[lng, lat]`` and are swapped here.
    """

    name = "photon"

    @classmethod
    def base_url_from(cls, config: GeocodingConfig) -> str:
        return config.photon_base_url

    async def search(self, query: str, *, limit: int) -> list[GeocodeSuggestion]:
        data = await self._get_json("/api", {"q": query, "limit": limit})
        features = data.get("features") if isinstance(data, dict) else None
        if not isinstance(features, list):
            raise ProviderUnavailable(self.name, "unexpected response shape")

        suggestions: list[GeocodeSuggestion] = []
        for feature in features:
            if not isinstance(feature, dict):
                continue
            geometry = feature.get("geometry")
            coords = geometry.get("coordinates") if isinstance(geometry, dict) else None
            if not isinstance(coords, list) or len(coords) < 2:
                continue
            properties = feature.get("properties")
            label = photon_label(properties if isinstance(properties, dict) else {}) or query
            suggestion = self._suggestion(label, coords[1], coords[0])
            if suggestion is not None:
                suggestions.append(suggestion)
            if len(suggestions) >= limit:
                break
        return suggestions
