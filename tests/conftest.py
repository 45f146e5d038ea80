"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from landsurvey.core.config import GeocodingConfig
from landsurvey.core.errors import ProviderUnavailable
from landsurvey.geocoding.client import GeocodingProvider
from landsurvey.geocoding.models import GeocodeSuggestion
from landsurvey.parcels.models import AttributeRecord, Parcel
from landsurvey.parcels.store import InMemoryParcelStore


def square(lng: float, lat: float, size: float = 0.001) -> dict:
    """GeoJSON polygon with its south-west corner at (lng, lat)."""
    return {
        "type": "Polygon",
        "coordinates": [[
            [lng, lat],
            [lng + size, lat],
            [lng + size, lat + size],
            [lng, lat + size],
            [lng, lat],
        ]],
    }


class FakeProvider(GeocodingProvider):
    """Scripted provider: returns canned suggestions or raises ProviderUnavailable."""

    def __init__(
        self,
        name: str,
        results: list[GeocodeSuggestion] | None = None,
        fail: bool = False,
    ) -> None:
        self.name = name
        self._results = results or []
        self._fail = fail
        self.calls: list[str] = []
        super().__init__(GeocodingConfig())

    async def search(self, query: str, *, limit: int) -> list[GeocodeSuggestion]:
        self.calls.append(query)
        if self._fail:
            raise ProviderUnavailable(self.name, "simulated outage")
        return self._results[:limit]


@pytest.fixture
def bradfield_parcels() -> list[Parcel]:
    return [
        Parcel.from_geojson("0401 23", square(-89.9010, 35.1010), id=1),
        Parcel.from_geojson("040124", square(-89.9000, 35.1010), id=2),
        Parcel.from_geojson("099999", square(-89.9700, 35.0500), id=5),
    ]


@pytest.fixture
def bradfield_records() -> list[AttributeRecord]:
    return [
        AttributeRecord(identifier="040123", house_number="5223", street_name="Bradfield"),
        AttributeRecord(
            identifier="0401 24",
            house_number="5227",
            street_name="Bradfield",
            street_suffix="Dr",
        ),
        AttributeRecord(identifier="077777", house_number="12", street_name="Old Hickory"),
    ]


@pytest.fixture
def store(bradfield_parcels, bradfield_records) -> InMemoryParcelStore:
    return InMemoryParcelStore(bradfield_parcels, bradfield_records)
