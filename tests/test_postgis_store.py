"""Tests for the PostGIS parcel store.

Statements are compiled against the PostgreSQL dialect; execution paths are
exercised with SQLite, which lacks the spatial functions, to check error
translation and the plain count queries.
"""

from __future__ import annotations

import pytest
from sqlalchemy import text
from sqlalchemy.dialects import postgresql

from landsurvey.core.errors import DataStoreError, InvalidCoordinate
from landsurvey.db.engine import DatabaseManager
from landsurvey.parcels.postgis import PostgisParcelStore, like_pattern
from landsurvey.parcels.store import ParcelStore


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


@pytest.fixture
async def db_manager():
    manager = DatabaseManager("sqlite+aiosqlite:///:memory:")
    yield manager
    await manager.close()


@pytest.fixture
def pg_store(db_manager):
    return PostgisParcelStore(db_manager)


class TestStatements:
    def test_search_joins_on_normalized_identifiers(self, pg_store):
        sql = _sql(pg_store.search_statement("5223 bradfield", "5223 Bradfield"))
        assert sql.count("regexp_replace(") >= 2
        assert 'taxdata."PARID"' in sql
        assert 'parcels."PIN"' in sql
        assert "LEFT OUTER JOIN parcels" in sql

    def test_search_composes_address_and_geometry(self, pg_store):
        sql = _sql(pg_store.search_statement("bradfield", "Bradfield"))
        assert "concat_ws(" in sql
        assert "nullif(" in sql
        assert "ST_AsGeoJSON(" in sql
        assert "ST_Centroid(" in sql
        assert "ILIKE" in sql.upper()
        assert "LIMIT" in sql

    def test_search_inner_join_when_address_only_excluded(self, pg_store):
        sql = _sql(pg_store.search_statement("x", "x", include_address_only=False))
        assert "LEFT OUTER JOIN" not in sql
        assert "JOIN parcels" in sql

    def test_search_without_cleaned_query_skips_cleaned_predicate(self, pg_store):
        with_cleaned = _sql(pg_store.search_statement("bradfield", "Bradfield"))
        without = _sql(pg_store.search_statement("", "Drive"))
        assert without.count("lower(") < with_cleaned.count("lower(")

    def test_nearest_orders_by_knn_distance(self, pg_store):
        sql = _sql(pg_store.nearest_statement(35.1015, -89.9005))
        assert "<->" in sql
        assert "ST_SetSRID(ST_Point(" in sql
        assert "LEFT OUTER JOIN taxdata" in sql
        assert "coalesce(" in sql
        assert "LIMIT" in sql


class TestLikePattern:
    def test_wraps_in_wildcards(self):
        assert like_pattern("elm") == "%elm%"

    def test_escapes_wildcards(self):
        assert like_pattern("50%_off") == "%50\\%\\_off%"
        assert like_pattern("a\\b") == "%a\\\\b%"


class TestExecution:
    def test_satisfies_protocol(self, pg_store):
        assert isinstance(pg_store, ParcelStore)

    async def test_query_failure_is_data_store_error(self, pg_store):
        with pytest.raises(DataStoreError):
            await pg_store.health()

    async def test_health_counts_rows(self, db_manager, pg_store):
        async with db_manager.engine.begin() as conn:
            await conn.execute(text('CREATE TABLE parcels (id INTEGER PRIMARY KEY, "PIN" TEXT, geom BLOB)'))
            await conn.execute(text('CREATE TABLE taxdata (id INTEGER PRIMARY KEY, "PARID" TEXT)'))
            await conn.execute(text("INSERT INTO taxdata (\"PARID\") VALUES ('040123'), ('077777')"))

        assert await pg_store.health() == {
            "backend": "postgis",
            "postgis_version": None,
            "parcels": 0,
            "taxdata": 2,
        }

    async def test_invalid_coordinates_rejected_before_query(self, pg_store):
        with pytest.raises(InvalidCoordinate):
            await pg_store.nearest("abc", -89.9)
        with pytest.raises(InvalidCoordinate):
            await pg_store.nearest(95.0, -89.9)

    async def test_zero_limit_skips_query(self, pg_store):
        assert await pg_store.search("bradfield", "Bradfield", limit=0) == []

    def test_malformed_row_is_data_store_error(self):
        with pytest.raises(DataStoreError):
            PostgisParcelStore._row_to_candidate({"id": 1, "lat": "north", "lng": -89.9})

    def test_row_mapping(self):
        candidate = PostgisParcelStore._row_to_candidate({
            "id": 3,
            "owner_name": "040123",
            "address": "5223 BRADFIELD DR",
            "lat": 35.1015,
            "lng": -89.9005,
            "geometry": '{"type":"Polygon","coordinates":[]}',
        })
        assert candidate.id == 3
        assert candidate.has_location

    def test_address_only_row(self):
        candidate = PostgisParcelStore._row_to_candidate({
            "id": None,
            "owner_name": "077777",
            "address": "12 OLD HICKORY LN",
            "lat": None,
            "lng": None,
            "geometry": None,
        })
        assert candidate.geometry is None
        assert not candidate.has_location
