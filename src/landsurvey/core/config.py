"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class DatabaseConfig(BaseSettings):
    """Reference-data store configuration.

    When ``database_url`` is unset the in-memory store is used instead of
    PostGIS.
    """

    model_config = {"env_prefix": "LANDSURVEY_DB_"}

    database_url: str | None = None
    pool_size: int = 5
    echo: bool = False


class DatasetConfig(BaseSettings):
    """Static reference datasets for the in-memory store."""

    model_config = {"env_prefix": "LANDSURVEY_DATASET_"}

    fixtures_path: str | None = None
    parcels_geojson_path: str | None = None
    taxdata_csv_path: str | None = None


class SearchConfig(BaseSettings):
    """Local search configuration."""

    model_config = {"env_prefix": "LANDSURVEY_SEARCH_"}

    result_limit: int = 5
    min_query_length: int = 1
    include_address_only: bool = True
    unknown_address_label: str = "Address Unknown"


class GeocodingConfig(BaseSettings):
    """External geocoding provider chain configuration."""

    model_config = {"env_prefix": "LANDSURVEY_GEOCODING_"}

    # Comma-separated, in precedence order.
    providers: str = "census,nominatim,photon"
    timeout_seconds: float = 5.0
    user_agent: str = "landsurvey/0.1 (parcel lookup)"
    race: bool = False
    suggestion_limit: int = 5
    min_suggestion_length: int = 3

    census_base_url: str = "https://geocoding.geo.census.gov"
    census_benchmark: str = "Public_AR_Current"
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    nominatim_country_codes: str | None = "us"
    nominatim_viewbox: str | None = None
    photon_base_url: str = "https://photon.komoot.io"

    @property
    def provider_names(self) -> list[str]:
        return [p.strip().lower() for p in self.providers.split(",") if p.strip()]


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "LANDSURVEY_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    db: DatabaseConfig = Field(default_factory=DatabaseConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
