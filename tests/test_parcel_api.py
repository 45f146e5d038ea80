"""Tests for the parcel resolution HTTP API."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from landsurvey.core.config import SearchConfig, Settings
from landsurvey.core.errors import DataStoreError
from landsurvey.geocoding.chain import GeocodingChain
from landsurvey.geocoding.models import GeocodeSuggestion
from landsurvey.parcels.service import ParcelResolutionService
from landsurvey.parcels.store import InMemoryParcelStore
from landsurvey.web.app import create_app

from conftest import FakeProvider


@pytest.fixture
def providers():
    return [
        FakeProvider("census"),
        FakeProvider("nominatim", fail=True),
        FakeProvider(
            "photon",
            [
                GeocodeSuggestion(label="5223 Bradfield Drive, Memphis", lat=35.1015, lng=-89.9005),
                GeocodeSuggestion(label="Bradfield Cove, Memphis", lat=35.1020, lng=-89.9010),
            ],
        ),
    ]


@pytest.fixture
def service(store, providers):
    return ParcelResolutionService(store=store, geocoder=GeocodingChain(providers))


@pytest.fixture
def client(service):
    return TestClient(create_app(settings=Settings(), resolution_service=service))


class TestSearchEndpoint:
    def test_bradfield(self, client):
        resp = client.get("/api/search", params={"q": "5223 Bradfield"})
        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 1
        hit = data[0]
        assert set(hit) == {"id", "owner_name", "address", "lat", "lng", "geometry"}
        assert hit["address"] == "5223 Bradfield"
        assert hit["owner_name"] == "040123"
        assert hit["lat"] == pytest.approx(35.1015)
        assert hit["lng"] == pytest.approx(-89.9005)
        assert json.loads(hit["geometry"])["type"] == "Polygon"

    def test_missing_query_is_empty(self, client):
        resp = client.get("/api/search")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_blank_query_is_empty(self, client):
        assert client.get("/api/search", params={"q": "   "}).json() == []

    def test_miss_does_not_geocode(self, client, providers):
        resp = client.get("/api/search", params={"q": "nonexistent-place-xyz"})
        assert resp.json() == []
        assert all(p.calls == [] for p in providers)

    def test_address_only_hit(self, client):
        data = client.get("/api/search", params={"q": "Old Hickory"}).json()
        assert data == [
            {
                "id": None,
                "owner_name": "077777",
                "address": "12 Old Hickory",
                "lat": None,
                "lng": None,
                "geometry": None,
            }
        ]

    def test_min_query_length(self, store, providers):
        service = ParcelResolutionService(
            store=store,
            geocoder=GeocodingChain(providers),
            config=SearchConfig(min_query_length=3),
        )
        client = TestClient(create_app(settings=Settings(), resolution_service=service))
        assert client.get("/api/search", params={"q": "52"}).json() == []
        assert len(client.get("/api/search", params={"q": "5223"}).json()) == 1


class TestParcelsEndpoint:
    def test_point_inside_parcel(self, client):
        resp = client.get("/api/parcels", params={"lat": "35.1015", "lng": "-89.9005"})
        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 1
        assert data[0]["id"] == 1
        assert data[0]["address"] == "5223 Bradfield"

    def test_unmatched_parcel_gets_placeholder(self, client):
        data = client.get("/api/parcels", params={"lat": 35.0505, "lng": -89.9695}).json()
        assert data[0]["id"] == 5
        assert data[0]["address"] == "Address Unknown"

    def test_empty_store(self, providers):
        service = ParcelResolutionService(
            store=InMemoryParcelStore(), geocoder=GeocodingChain(providers)
        )
        client = TestClient(create_app(settings=Settings(), resolution_service=service))
        resp = client.get("/api/parcels", params={"lat": 35.0, "lng": -90.0})
        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.parametrize(
        "params",
        [
            {"lat": "abc", "lng": "-89.9"},
            {"lat": "91", "lng": "-89.9"},
            {"lat": "35.1", "lng": "-181"},
            {"lat": "nan", "lng": "-89.9"},
        ],
    )
    def test_invalid_coordinates(self, client, params):
        resp = client.get("/api/parcels", params=params)
        assert resp.status_code == 400
        assert "Invalid coordinate" in resp.json()["detail"]

    def test_missing_coordinates(self, client):
        resp = client.get("/api/parcels", params={"lat": "35.1"})
        assert resp.status_code == 422


class TestAddressSearchEndpoint:
    def test_local_hit_skips_geocoding(self, client, providers):
        resp = client.get("/api/address/search", params={"q": "5227 Bradfield Drive"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["source"] == "local"
        assert data["address"] == "5227 Bradfield Dr"
        assert data["lat"] == pytest.approx(35.1015)
        assert all(p.calls == [] for p in providers)

    def test_falls_through_to_last_provider(self, client, providers):
        resp = client.get("/api/address/search", params={"q": "5223 bradfeild"})
        data = resp.json()
        assert data == {
            "lat": 35.1015,
            "lng": -89.9005,
            "address": "5223 Bradfield Drive, Memphis",
            "source": "photon",
        }
        assert [len(p.calls) for p in providers] == [1, 1, 1]

    def test_address_only_local_hit_falls_through(self, client, providers):
        data = client.get("/api/address/search", params={"q": "Old Hickory"}).json()
        assert data["source"] == "photon"
        assert providers[0].calls == ["Old Hickory"]

    def test_not_found(self, store):
        providers = [
            FakeProvider("census", fail=True),
            FakeProvider("nominatim"),
            FakeProvider("photon", fail=True),
        ]
        service = ParcelResolutionService(store=store, geocoder=GeocodingChain(providers))
        client = TestClient(create_app(settings=Settings(), resolution_service=service))

        resp = client.get("/api/address/search", params={"q": "nonexistent-place-xyz"})

        assert resp.status_code == 200
        assert resp.json() == {"error": "Address not found"}
        assert all(p.calls == ["nonexistent-place-xyz"] for p in providers)

    def test_missing_query_is_not_found(self, client, providers):
        assert client.get("/api/address/search").json() == {"error": "Address not found"}
        assert all(p.calls == [] for p in providers)


class TestSuggestionsEndpoint:
    def test_short_query(self, client, providers):
        assert client.get("/api/address/suggestions", params={"q": "52"}).json() == []
        assert providers[0].calls == []

    def test_first_provider_only(self, client, providers):
        # The first provider has nothing; no fallback for autocomplete.
        resp = client.get("/api/address/suggestions", params={"q": "Bradfield"})
        assert resp.status_code == 200
        assert resp.json() == []
        assert providers[0].calls == ["Bradfield"]
        assert providers[2].calls == []

    def test_suggestions_shape(self, store):
        photon = FakeProvider(
            "photon",
            [GeocodeSuggestion(label="Bradfield Cove, Memphis", lat=35.102, lng=-89.901)],
        )
        service = ParcelResolutionService(store=store, geocoder=GeocodingChain([photon]))
        client = TestClient(create_app(settings=Settings(), resolution_service=service))
        assert client.get("/api/address/suggestions", params={"q": "Bradf"}).json() == [
            {"label": "Bradfield Cove, Memphis", "lat": 35.102, "lng": -89.901}
        ]


class TestHealthAndErrors:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["service"] == "landsurvey"
        assert data["store"] == {"backend": "memory", "parcels": 3, "taxdata": 3}

    @pytest.fixture
    def broken_client(self, providers):
        store = AsyncMock()
        store.search.side_effect = DataStoreError("connection refused")
        store.nearest.side_effect = DataStoreError("connection refused")
        store.health.side_effect = DataStoreError("connection refused")
        service = ParcelResolutionService(store=store, geocoder=GeocodingChain(providers))
        return TestClient(create_app(settings=Settings(), resolution_service=service))

    def test_store_failure_is_503(self, broken_client):
        resp = broken_client.get("/api/search", params={"q": "Bradfield"})
        assert resp.status_code == 503
        assert resp.json() == {"detail": "Parcel data store unavailable"}

        resp = broken_client.get("/api/parcels", params={"lat": 35.1, "lng": -89.9})
        assert resp.status_code == 503

    def test_store_failure_degrades_health(self, broken_client):
        data = broken_client.get("/api/health").json()
        assert data["status"] == "degraded"
        assert "connection refused" in data["store"]["error"]
