"""Spatial nearest-neighbor resolution for map clicks."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from shapely import STRtree
from shapely.geometry import Point, shape

from landsurvey.core.errors import InvalidCoordinate
from landsurvey.parcels.matcher import build_candidate
from landsurvey.parcels.models import AttributeRecord, Parcel, SearchCandidate
from landsurvey.parcels.normalize import normalize_key

UNKNOWN_ADDRESS = "Address Unknown"


def validate_coordinates(lat: Any, lng: Any) -> tuple[float, float]:
    """Coerce and range-check a (lat, lng) pair.

    Raises:
        InvalidCoordinate: when either value is non-numeric, non-finite or
            outside the WGS84 range. Swapped inputs (e.g. lat=-90.5) are caught
            by the range check.
    """
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError):
        raise InvalidCoordinate(lat, lng, "not numeric") from None
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        raise InvalidCoordinate(lat, lng, "not finite")
    if not -90.0 <= lat_f <= 90.0:
        raise InvalidCoordinate(lat, lng, "latitude out of range")
    if not -180.0 <= lng_f <= 180.0:
        raise InvalidCoordinate(lat, lng, "longitude out of range")
    return lat_f, lng_f


class SpatialIndex:
    """R-tree over parcel geometries, queried in the stored CRS (EPSG:4326).

    Distance is planar in lon/lat degrees, which orders results the same way
    PostGIS ``geom <-> point`` does for SRID 4326 geometry columns.
    """

    def __init__(self, parcels: Sequence[Parcel]) -> None:
        self._parcels = list(parcels)
        self._tree = STRtree([shape(p.geometry) for p in self._parcels])

    def __len__(self) -> int:
        return len(self._parcels)

    def nearest(self, lat: float, lng: float) -> Parcel | None:
        if not self._parcels:
            return None
        point = Point(lng, lat)
        # all_matches returns every equidistant geometry; the lowest index keeps
        # data-source order as the tie-breaker.
        indices = self._tree.query_nearest(point, all_matches=True)
        if len(indices) == 0:
            return None
        return self._parcels[int(min(indices))]


def index_attributes(records: Sequence[AttributeRecord]) -> dict[str, AttributeRecord]:
    """Index attribute records by normalized identifier. First record wins."""
    index: dict[str, AttributeRecord] = {}
    for record in records:
        index.setdefault(normalize_key(record.identifier), record)
    return index


def nearest_parcel(
    lat: Any,
    lng: Any,
    index: SpatialIndex,
    attributes_by_key: Mapping[str, AttributeRecord],
    unknown_label: str = UNKNOWN_ADDRESS,
) -> SearchCandidate | None:
    """Return the candidate for the parcel closest to ``(lat, lng)``.

    Points inside a polygon are at distance zero. ``None`` only when the
    geometry dataset is empty.
    """
    lat_f, lng_f = validate_coordinates(lat, lng)
    parcel = index.nearest(lat_f, lng_f)
    if parcel is None:
        return None
    record = attributes_by_key.get(normalize_key(parcel.identifier))
    return build_candidate(record, parcel, unknown_label=unknown_label)
