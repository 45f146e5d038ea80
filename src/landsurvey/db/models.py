"""SQLAlchemy ORM models for the reference datasets.

Both tables are loaded by an external import job; this service only reads
them. Column names follow the county extracts verbatim.
"""

from __future__ import annotations

from geoalchemy2 import Geometry
from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from landsurvey.db.base import Base

SRID = 4326


class ParcelRow(Base):
    """Parcel polygons from the GIS export."""

    __tablename__ = "parcels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pin: Mapped[str] = mapped_column("PIN", String(64))
    geom: Mapped[str] = mapped_column(
        Geometry("GEOMETRY", srid=SRID, spatial_index=False)
    )

    __table_args__ = (
        Index("ix_parcels_geom", "geom", postgresql_using="gist"),
        Index("ix_parcels_pin", "PIN"),
    )


class TaxRecordRow(Base):
    """Assessor tax/address rows."""

    __tablename__ = "taxdata"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    parid: Mapped[str] = mapped_column("PARID", String(64))
    adrno: Mapped[str | None] = mapped_column("ADRNO", String(16), nullable=True)
    adrdir: Mapped[str | None] = mapped_column("ADRDIR", String(8), nullable=True)
    adrstr: Mapped[str | None] = mapped_column("ADRSTR", String(128), nullable=True)
    adrsuf: Mapped[str | None] = mapped_column("ADRSUF", String(16), nullable=True)
    cityname: Mapped[str | None] = mapped_column("CITYNAME", String(64), nullable=True)

    __table_args__ = (
        Index("ix_taxdata_parid", "PARID"),
    )
