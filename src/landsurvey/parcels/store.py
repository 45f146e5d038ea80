"""Reference-data store protocol and in-memory implementation."""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml
from pydantic import ValidationError
from shapely.errors import ShapelyError

from landsurvey.core.errors import DataStoreError
from landsurvey.parcels.matcher import DEFAULT_RESULT_LIMIT, index_parcels, match_local
from landsurvey.parcels.models import AttributeRecord, Parcel, SearchCandidate
from landsurvey.parcels.nearest import (
    UNKNOWN_ADDRESS,
    SpatialIndex,
    index_attributes,
    nearest_parcel,
)

logger = logging.getLogger(__name__)

# Column names used by the county tax extract.
TAXDATA_COLUMNS = {
    "identifier": "PARID",
    "house_number": "ADRNO",
    "direction": "ADRDIR",
    "street_name": "ADRSTR",
    "street_suffix": "ADRSUF",
    "city": "CITYNAME",
}
PARCEL_ID_PROPERTY = "PIN"


@runtime_checkable
class ParcelStore(Protocol):
    """Read-only access to the geometry and tax/address datasets."""

    async def search(
        self,
        cleaned: str,
        raw: str,
        limit: int = DEFAULT_RESULT_LIMIT,
        include_address_only: bool = True,
    ) -> list[SearchCandidate]: ...

    async def nearest(
        self,
        lat: float,
        lng: float,
        unknown_label: str = UNKNOWN_ADDRESS,
    ) -> SearchCandidate | None: ...

    async def health(self) -> dict[str, Any]: ...

    async def close(self) -> None: ...


class InMemoryParcelStore:
    """Parcel store over datasets held in memory.

    Used for development, tests and small deployments that ship the
    reference data as static files.
    """

    def __init__(
        self,
        parcels: Iterable[Parcel] = (),
        records: Iterable[AttributeRecord] = (),
    ) -> None:
        self._parcels = list(parcels)
        self._records = list(records)
        self._parcels_by_key = index_parcels(self._parcels)
        self._records_by_key = index_attributes(self._records)
        self._spatial = SpatialIndex(self._parcels)

    @property
    def parcels(self) -> list[Parcel]:
        return list(self._parcels)

    @property
    def records(self) -> list[AttributeRecord]:
        return list(self._records)

    # -- loaders -------------------------------------------------------------

    @classmethod
    def from_yaml(cls, path: str | Path) -> InMemoryParcelStore:
        """Load ``parcels`` and ``taxdata`` lists from a YAML fixtures file.

        Parcels are ``{pin, geometry}`` mappings and tax rows use the county
        extract column names (``PARID``, ``ADRNO``, ``ADRSTR`` ...).
        """
        try:
            with open(path, encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise DataStoreError(f"Cannot read parcel fixtures {path}: {exc}") from exc

        parcels = []
        for i, row in enumerate(data.get("parcels") or []):
            if not isinstance(row, Mapping):
                continue
            parcel = _parcel_from_row(row.get("pin"), row.get("geometry"), row.get("id", i + 1))
            if parcel is not None:
                parcels.append(parcel)
        records = [
            r for row in data.get("taxdata") or [] if (r := _record_from_row(row))
        ]
        logger.info(
            "Loaded %d parcels and %d tax records from %s",
            len(parcels), len(records), path,
        )
        return cls(parcels, records)

    @classmethod
    def from_files(
        cls,
        parcels_geojson: str | Path,
        taxdata_csv: str | Path | None = None,
    ) -> InMemoryParcelStore:
        """Load a GeoJSON FeatureCollection of parcels and a tax-extract CSV."""
        try:
            with open(parcels_geojson, encoding="utf-8") as fh:
                collection = json.load(fh)
            rows: list[dict[str, str]] = []
            if taxdata_csv is not None:
                with open(taxdata_csv, encoding="utf-8-sig", newline="") as fh:
                    rows = list(csv.DictReader(fh))
        except (OSError, ValueError) as exc:
            raise DataStoreError(f"Cannot read parcel datasets: {exc}") from exc

        parcels = []
        for i, feature in enumerate(collection.get("features") or []):
            props = feature.get("properties") or {}
            parcel = _parcel_from_row(
                props.get(PARCEL_ID_PROPERTY),
                feature.get("geometry"),
                feature.get("id", i + 1),
            )
            if parcel is not None:
                parcels.append(parcel)
        records = [r for row in rows if (r := _record_from_row(row))]
        logger.info(
            "Loaded %d parcels from %s and %d tax records from %s",
            len(parcels), parcels_geojson, len(records), taxdata_csv,
        )
        return cls(parcels, records)

    # -- ParcelStore ---------------------------------------------------------

    async def search(
        self,
        cleaned: str,
        raw: str,
        limit: int = DEFAULT_RESULT_LIMIT,
        include_address_only: bool = True,
    ) -> list[SearchCandidate]:
        return match_local(
            cleaned,
            raw,
            self._records,
            self._parcels_by_key,
            limit=limit,
            include_address_only=include_address_only,
        )

    async def nearest(
        self,
        lat: float,
        lng: float,
        unknown_label: str = UNKNOWN_ADDRESS,
    ) -> SearchCandidate | None:
        return nearest_parcel(
            lat, lng, self._spatial, self._records_by_key, unknown_label=unknown_label
        )

    async def health(self) -> dict[str, Any]:
        return {
            "backend": "memory",
            "parcels": len(self._parcels),
            "taxdata": len(self._records),
        }

    async def close(self) -> None:
        return None


def _parcel_from_row(pin: Any, geometry: Any, row_id: Any) -> Parcel | None:
    if pin is None or not isinstance(geometry, Mapping):
        logger.warning("Skipping parcel row %r without identifier or geometry", row_id)
        return None
    try:
        return Parcel.from_geojson(str(pin), dict(geometry), id=row_id)
    except (ValidationError, ShapelyError, KeyError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Skipping malformed parcel %r: %s", pin, exc)
        return None


def _record_from_row(row: Any) -> AttributeRecord | None:
    if not isinstance(row, Mapping):
        return None
    values = {field: row.get(column) for field, column in TAXDATA_COLUMNS.items()}
    if values["identifier"] is None:
        logger.warning("Skipping tax row without %s: %r", TAXDATA_COLUMNS["identifier"], row)
        return None
    values = {k: (str(v) if v is not None and v != "" else None) for k, v in values.items()}
    try:
        return AttributeRecord(**values)
    except ValidationError as exc:
        logger.warning("Skipping malformed tax row %r: %s", row, exc)
        return None
