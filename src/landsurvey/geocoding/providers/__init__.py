"""Provider registry for geocoding backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from landsurvey.geocoding.client import GeocodingProvider

from landsurvey.geocoding.providers.census import CensusGeocoder
from landsurvey.geocoding.providers.nominatim import NominatimGeocoder
from landsurvey.geocoding.providers.photon import PhotonGeocoder

PROVIDER_REGISTRY: dict[str, type[GeocodingProvider]] = {
    "census": CensusGeocoder,
    "nominatim": NominatimGeocoder,
    "photon": PhotonGeocoder,
}

__all__ = ["PROVIDER_REGISTRY", "CensusGeocoder", "NominatimGeocoder", "PhotonGeocoder"]
