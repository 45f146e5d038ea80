"""Abstract geocoding provider interface and factory function."""

from __future__ import annotations

import abc
import logging
import math
from typing import Any

import httpx

from landsurvey.core.config import GeocodingConfig
from landsurvey.core.errors import ProviderUnavailable
from landsurvey.geocoding.models import GeocodeResult, GeocodeSuggestion

logger = logging.getLogger(__name__)


class GeocodingProvider(abc.ABC):
    """Base class for external geocoding providers.

    Subclasses issue exactly one request per call and translate their
    provider-specific payload into :class:`GeocodeResult`. Any transport
    failure, timeout, non-2xx status or undecodable body is raised as
    :class:`ProviderUnavailable`; "no match" is an empty return.
    """

    name: str = ""
    base_url: str = ""

    def __init__(
        self,
        config: GeocodingConfig,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._base_url = self.base_url_from(config).rstrip("/")
        self._owns_http = http is None
        self._http = http or create_http_client(config)

    @classmethod
    def base_url_from(cls, config: GeocodingConfig) -> str:
        return cls.base_url

    # -- public API ----------------------------------------------------------

    async def try_geocode(self, query: str, *, confidence: int = 1) -> GeocodeResult | None:
        """Return the provider's best match for ``query`` or ``None``."""
        candidates = await self.search(query, limit=1)
        if not candidates:
            return None
        best = candidates[0]
        return GeocodeResult(
            lat=best.lat,
            lng=best.lng,
            label=best.label,
            source_provider=self.name,
            confidence=confidence,
        )

    async def suggest(self, query: str, limit: int = 5) -> list[GeocodeSuggestion]:
        return (await self.search(query, limit=limit))[:limit]

    @abc.abstractmethod
    async def search(self, query: str, *, limit: int) -> list[GeocodeSuggestion]:
        """Query the provider and return usable candidates in provider rank order."""

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # -- helpers -------------------------------------------------------------

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        """GET ``path`` and decode JSON, mapping every failure to ProviderUnavailable."""
        try:
            resp = await self._http.get(f"{self._base_url}{path}", params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.TimeoutException as exc:
            raise ProviderUnavailable(self.name, f"timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise ProviderUnavailable(
                self.name, f"HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(self.name, f"transport error: {exc}") from exc
        except ValueError as exc:
            raise ProviderUnavailable(self.name, f"invalid JSON: {exc}") from exc

    def _suggestion(self, label: str, lat: Any, lng: Any) -> GeocodeSuggestion | None:
        """Build a suggestion, discarding unusable coordinates."""
        try:
            lat_f = float(lat)
            lng_f = float(lng)
        except (TypeError, ValueError):
            logger.debug("%s returned non-numeric coordinates %r, %r", self.name, lat, lng)
            return None
        if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
            return None
        if not (-90.0 <= lat_f <= 90.0 and -180.0 <= lng_f <= 180.0):
            logger.debug("%s returned out-of-range coordinates %r, %r", self.name, lat, lng)
            return None
        return GeocodeSuggestion(label=label, lat=lat_f, lng=lng_f)


def create_http_client(config: GeocodingConfig) -> httpx.AsyncClient:
    """Pooled outbound client; every request carries the configured timeout."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.timeout_seconds),
        headers={"User-Agent": config.user_agent, "Accept": "application/json"},
    )


def create_provider(
    name: str,
    config: GeocodingConfig,
    http: httpx.AsyncClient | None = None,
) -> GeocodingProvider:
    """Factory: instantiate a provider by registry name."""

    from landsurvey.geocoding.providers import PROVIDER_REGISTRY

    key = name.lower()
    if key not in PROVIDER_REGISTRY:
        available = ", ".join(sorted(PROVIDER_REGISTRY))
        raise ValueError(
            f"Unknown geocoding provider {name!r}. "
            f"Available: {available}"
        )
    return PROVIDER_REGISTRY[key](config, http=http)
