"""Parcel resolution service wiring the store and the geocoding chain.

This is the explicit context object every route handler goes through; it
holds the only shared resources (store handle and outbound provider clients)
and keeps no per-request state.
"""

from __future__ import annotations

import logging

from landsurvey.core.config import DatabaseConfig, DatasetConfig, SearchConfig, Settings
from landsurvey.geocoding.chain import GeocodingChain
from landsurvey.geocoding.models import GeocodeOutcome, GeocodeResult, GeocodeSuggestion
from landsurvey.parcels.models import SearchCandidate
from landsurvey.parcels.normalize import clean_query
from landsurvey.parcels.store import InMemoryParcelStore, ParcelStore

logger = logging.getLogger(__name__)


class ParcelResolutionService:
    """Address and map-click resolution.

    Args:
        store: Reference-data store (in-memory or PostGIS).
        geocoder: Provider chain used only by :meth:`resolve_address`.
        config: Result caps and placeholder labels.
    """

    def __init__(
        self,
        store: ParcelStore,
        geocoder: GeocodingChain,
        config: SearchConfig | None = None,
    ) -> None:
        self.store = store
        self.geocoder = geocoder
        self.config = config or SearchConfig()

    async def search(self, query: str | None) -> list[SearchCandidate]:
        """Local-only text search. A miss is an empty list, never a geocode."""
        raw = (query or "").strip()
        if len(raw) < max(1, self.config.min_query_length):
            return []
        cleaned = clean_query(raw)
        candidates = await self.store.search(
            cleaned,
            raw,
            limit=self.config.result_limit,
            include_address_only=self.config.include_address_only,
        )
        logger.debug("Local search %r (cleaned %r): %d candidates", raw, cleaned, len(candidates))
        return candidates

    async def nearest(self, lat: float | str, lng: float | str) -> SearchCandidate | None:
        """Parcel closest to a map click.

        Raises:
            InvalidCoordinate: for non-numeric or out-of-range input.
        """
        return await self.store.nearest(
            lat, lng, unknown_label=self.config.unknown_address_label
        )

    async def resolve_address(
        self, query: str | None
    ) -> SearchCandidate | GeocodeResult | None:
        """Full resolution: first located local candidate, else the geocoding chain."""
        for candidate in await self.search(query):
            if candidate.has_location:
                return candidate
        outcome = await self.geocode(query)
        return outcome.result

    async def geocode(self, query: str | None) -> GeocodeOutcome:
        outcome = await self.geocoder.geocode(query or "")
        if outcome.attempts:
            logger.info(
                "Geocoding %r: %s",
                query,
                ", ".join(f"{a.provider}={a.status.value}" for a in outcome.attempts),
            )
        return outcome

    async def suggest(self, query: str | None) -> list[GeocodeSuggestion]:
        return await self.geocoder.suggest(query or "")

    async def close(self) -> None:
        await self.geocoder.close()
        await self.store.close()


def create_parcel_store(db: DatabaseConfig, dataset: DatasetConfig) -> ParcelStore:
    """Factory: PostGIS when a database URL is configured, otherwise in-memory."""
    if db.database_url:
        from landsurvey.db.engine import DatabaseManager
        from landsurvey.parcels.postgis import PostgisParcelStore

        manager = DatabaseManager(db.database_url, echo=db.echo, pool_size=db.pool_size)
        return PostgisParcelStore(manager)

    if dataset.parcels_geojson_path:
        return InMemoryParcelStore.from_files(
            dataset.parcels_geojson_path, dataset.taxdata_csv_path
        )
    if dataset.fixtures_path:
        return InMemoryParcelStore.from_yaml(dataset.fixtures_path)

    logger.warning("No parcel datasets configured; starting with an empty store")
    return InMemoryParcelStore()


def create_resolution_service(settings: Settings) -> ParcelResolutionService:
    return ParcelResolutionService(
        store=create_parcel_store(settings.db, settings.dataset),
        geocoder=GeocodingChain.from_config(settings.geocoding),
        config=settings.search,
    )
