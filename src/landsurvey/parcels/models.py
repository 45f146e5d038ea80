"""Parcel, attribute and search-candidate data models."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict
from shapely.geometry import shape


class LatLng(BaseModel):
    """A geographic point in (latitude, longitude) order."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class Parcel(BaseModel):
    """A cadastral land unit from the geometry dataset.

    ``geometry`` is a GeoJSON geometry mapping in EPSG:4326 (lon/lat).
    ``identifier`` is stored exactly as the source provides it and may carry
    stray internal whitespace.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    geometry: dict[str, Any]
    centroid: LatLng
    id: int | str | None = None

    @classmethod
    def from_geojson(
        cls,
        identifier: str,
        geometry: dict[str, Any],
        id: int | str | None = None,
    ) -> Parcel:
        """Build a parcel, deriving the centroid from the geometry."""
        point = shape(geometry).centroid
        return cls(
            identifier=identifier,
            geometry=geometry,
            centroid=LatLng(lat=point.y, lng=point.x),
            id=id,
        )

    @property
    def geometry_json(self) -> str:
        return json.dumps(self.geometry, separators=(",", ":"))


class AttributeRecord(BaseModel):
    """A row from the tax/address dataset."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    house_number: str | None = None
    street_name: str | None = None
    street_suffix: str | None = None
    direction: str | None = None
    city: str | None = None


class SearchCandidate(BaseModel):
    """Zero-or-one attribute record joined with zero-or-one parcel.

    Serializes to the wire shape ``{id, owner_name, address, lat, lng,
    geometry}`` where ``geometry`` is GeoJSON text.
    """

    id: int | str | None = None
    owner_name: str = ""
    address: str = ""
    lat: float | None = None
    lng: float | None = None
    geometry: str | None = None

    @property
    def has_location(self) -> bool:
        return self.lat is not None and self.lng is not None

