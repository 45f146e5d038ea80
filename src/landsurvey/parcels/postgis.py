"""PostGIS-backed parcel store.

Pushes the matcher and nearest-neighbor semantics into SQL so that large
reference tables never leave the database:

* identifiers are joined on ``regexp_replace(id, '\\s', '', 'g')``;
* display addresses use ``concat_ws`` over ``NULLIF``-ed parts, which skips
  missing components the same way :func:`compose_address` does;
* map clicks are ordered by the KNN ``geom <-> point`` operator.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy import ColumnElement, func, literal, or_, select
from sqlalchemy.exc import SQLAlchemyError

from landsurvey.core.errors import DataStoreError
from landsurvey.db.engine import DatabaseManager
from landsurvey.db.models import SRID, ParcelRow, TaxRecordRow
from landsurvey.parcels.matcher import DEFAULT_RESULT_LIMIT
from landsurvey.parcels.models import SearchCandidate
from landsurvey.parcels.nearest import UNKNOWN_ADDRESS, validate_coordinates
from landsurvey.parcels.normalize import SUFFIX_WORDS

logger = logging.getLogger(__name__)

# Postgres ARE: \y is a word boundary.
PG_SUFFIX_PATTERN = r"\y(?:" + "|".join(SUFFIX_WORDS) + r")\y\.?"


def sql_normalize_key(column: Any) -> ColumnElement[str]:
    """SQL counterpart of :func:`normalize_key`."""
    return func.regexp_replace(column, r"\s", "", "g")


def sql_compose_address() -> ColumnElement[str]:
    """SQL counterpart of :func:`compose_address` over the tax columns."""
    parts = [
        TaxRecordRow.adrno,
        TaxRecordRow.adrdir,
        TaxRecordRow.adrstr,
        TaxRecordRow.adrsuf,
    ]
    return func.concat_ws(" ", *[func.nullif(func.trim(p), "") for p in parts])


def sql_clean_address(address: ColumnElement[str]) -> ColumnElement[str]:
    """SQL counterpart of :func:`clean_query` applied to a composed address."""
    stripped = func.regexp_replace(func.lower(address), PG_SUFFIX_PATTERN, " ", "g")
    return func.trim(func.regexp_replace(stripped, r"\s+", " ", "g"))


def like_pattern(text: str) -> str:
    """``%text%`` with LIKE wildcards in ``text`` escaped."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class PostgisParcelStore:
    """Parcel store over the ``parcels`` and ``taxdata`` PostGIS tables."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    def search_statement(
        self,
        cleaned: str,
        raw: str,
        limit: int = DEFAULT_RESULT_LIMIT,
        include_address_only: bool = True,
    ):
        address = sql_compose_address()
        join_on = sql_normalize_key(TaxRecordRow.parid) == sql_normalize_key(ParcelRow.pin)

        predicates = []
        if cleaned:
            predicates.append(sql_clean_address(address).like(like_pattern(cleaned), escape="\\"))
        if raw:
            predicates.append(address.ilike(like_pattern(raw), escape="\\"))
            predicates.append(TaxRecordRow.parid.ilike(like_pattern(raw), escape="\\"))

        stmt = (
            select(
                ParcelRow.id.label("id"),
                TaxRecordRow.parid.label("owner_name"),
                address.label("address"),
                func.ST_Y(func.ST_Centroid(ParcelRow.geom)).label("lat"),
                func.ST_X(func.ST_Centroid(ParcelRow.geom)).label("lng"),
                func.ST_AsGeoJSON(ParcelRow.geom).label("geometry"),
            )
            .select_from(TaxRecordRow)
            .join(ParcelRow, join_on, isouter=include_address_only)
            .where(or_(*predicates) if predicates else literal(False))
            .order_by(TaxRecordRow.id)
            .limit(limit)
        )
        return stmt

    def nearest_statement(self, lat: float, lng: float, unknown_label: str = UNKNOWN_ADDRESS):
        point = func.ST_SetSRID(func.ST_Point(lng, lat), SRID)
        address = func.coalesce(func.nullif(sql_compose_address(), ""), unknown_label)
        join_on = sql_normalize_key(ParcelRow.pin) == sql_normalize_key(TaxRecordRow.parid)
        return (
            select(
                ParcelRow.id.label("id"),
                func.coalesce(TaxRecordRow.parid, "").label("owner_name"),
                address.label("address"),
                func.ST_Y(func.ST_Centroid(ParcelRow.geom)).label("lat"),
                func.ST_X(func.ST_Centroid(ParcelRow.geom)).label("lng"),
                func.ST_AsGeoJSON(ParcelRow.geom).label("geometry"),
            )
            .select_from(ParcelRow)
            .join(TaxRecordRow, join_on, isouter=True)
            .order_by(ParcelRow.geom.distance_centroid(point), ParcelRow.id, TaxRecordRow.id)
            .limit(1)
        )

    # -- ParcelStore ---------------------------------------------------------

    async def search(
        self,
        cleaned: str,
        raw: str,
        limit: int = DEFAULT_RESULT_LIMIT,
        include_address_only: bool = True,
    ) -> list[SearchCandidate]:
        if limit <= 0:
            return []
        stmt = self.search_statement(cleaned, raw, limit, include_address_only)
        rows = await self._fetch(stmt)
        return [self._row_to_candidate(r) for r in rows]

    async def nearest(
        self,
        lat: float,
        lng: float,
        unknown_label: str = UNKNOWN_ADDRESS,
    ) -> SearchCandidate | None:
        lat_f, lng_f = validate_coordinates(lat, lng)
        rows = await self._fetch(self.nearest_statement(lat_f, lng_f, unknown_label))
        if not rows:
            return None
        return self._row_to_candidate(rows[0])

    async def health(self) -> dict[str, Any]:
        rows = await self._fetch(
            select(
                select(func.count()).select_from(ParcelRow).scalar_subquery().label("parcels"),
                select(func.count()).select_from(TaxRecordRow).scalar_subquery().label("taxdata"),
            )
        )
        counts = rows[0] if rows else {}
        try:
            postgis = await self._db.postgis_version()
        except SQLAlchemyError as exc:
            logger.exception("PostGIS version check failed")
            raise DataStoreError(f"PostGIS unavailable: {exc}") from exc
        return {
            "backend": "postgis",
            "postgis_version": postgis,
            "parcels": counts.get("parcels", 0),
            "taxdata": counts.get("taxdata", 0),
        }

    async def close(self) -> None:
        await self._db.close()

    # -- internals -----------------------------------------------------------

    async def _fetch(self, stmt) -> list[dict[str, Any]]:
        try:
            async with self._db.session() as session:
                result = await session.execute(stmt)
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            logger.exception("Parcel data store query failed")
            raise DataStoreError(f"Parcel data store query failed: {exc}") from exc

    @staticmethod
    def _row_to_candidate(row: dict[str, Any]) -> SearchCandidate:
        try:
            return SearchCandidate(
                id=row.get("id"),
                owner_name=row.get("owner_name") or "",
                address=row.get("address") or "",
                lat=row.get("lat"),
                lng=row.get("lng"),
                geometry=row.get("geometry"),
            )
        except ValidationError as exc:
            raise DataStoreError(f"Malformed parcel row {row!r}: {exc}") from exc
