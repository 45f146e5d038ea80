#!/usr/bin/env python3
"""Load parcel geometry and tax/address extracts into the PostGIS tables.

Usage:
    # Create the tables first:
    alembic upgrade head

    # From the GIS export and the assessor CSV:
    python3 scripts/load_reference_data.py \
        --geojson data/parcels.geojson --csv data/taxdata.csv

    # From the development fixtures:
    python3 scripts/load_reference_data.py --fixtures config/parcel_fixtures.yml

    # Replace existing rows instead of appending:
    python3 scripts/load_reference_data.py --fixtures config/parcel_fixtures.yml --replace

The database URL comes from LANDSURVEY_DB_DATABASE_URL unless --database-url
is given. Rows are parsed with the same loaders the in-memory store uses, so
malformed rows are skipped the same way.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Ensure the project source is importable when running the script directly.
_project_root = Path(__file__).resolve().parent.parent
_src = _project_root / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from geoalchemy2.shape import from_shape
from shapely.geometry import shape
from sqlalchemy import delete

from landsurvey.core.config import Settings
from landsurvey.db.engine import DatabaseManager
from landsurvey.db.models import SRID, ParcelRow, TaxRecordRow
from landsurvey.parcels.store import InMemoryParcelStore


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--fixtures", help="YAML fixtures file with parcels and taxdata")
    source.add_argument("--geojson", help="Parcel FeatureCollection (PIN property)")
    parser.add_argument("--csv", help="Tax extract CSV (PARID, ADRNO, ADRSTR ...)")
    parser.add_argument("--database-url", help="Overrides LANDSURVEY_DB_DATABASE_URL")
    parser.add_argument("--replace", action="store_true", help="Delete existing rows first")
    return parser.parse_args(argv)


async def load(db: DatabaseManager, store: InMemoryParcelStore, replace: bool) -> tuple[int, int]:
    async with db.session() as session:
        if replace:
            await session.execute(delete(TaxRecordRow))
            await session.execute(delete(ParcelRow))

        for parcel in store.parcels:
            session.add(ParcelRow(
                pin=parcel.identifier,
                geom=from_shape(shape(parcel.geometry), srid=SRID),
            ))
        for record in store.records:
            session.add(TaxRecordRow(
                parid=record.identifier,
                adrno=record.house_number,
                adrdir=record.direction,
                adrstr=record.street_name,
                adrsuf=record.street_suffix,
                cityname=record.city,
            ))
        await session.commit()
    return len(store.parcels), len(store.records)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    database_url = args.database_url or Settings().db.database_url
    if not database_url:
        print("No database URL; set LANDSURVEY_DB_DATABASE_URL or pass --database-url")
        return 2

    if args.fixtures:
        store = InMemoryParcelStore.from_yaml(args.fixtures)
    else:
        store = InMemoryParcelStore.from_files(args.geojson, args.csv)

    async def run() -> tuple[int, int]:
        db = DatabaseManager(database_url)
        try:
            return await load(db, store, args.replace)
        finally:
            await db.close()

    parcels, records = asyncio.run(run())
    print(f"Loaded {parcels} parcels and {records} tax records.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
