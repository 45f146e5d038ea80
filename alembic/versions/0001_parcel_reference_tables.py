"""Parcel geometry and tax/address reference tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute(sa.text("CREATE EXTENSION IF NOT EXISTS postgis"))

    # -- Parcels --
    op.create_table(
        "parcels",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("PIN", sa.String(64), nullable=False),
        sa.Column(
            "geom",
            Geometry("GEOMETRY", srid=4326, spatial_index=False),
            nullable=False,
        ),
    )
    op.create_index("ix_parcels_pin", "parcels", ["PIN"])
    op.create_index("ix_parcels_geom", "parcels", ["geom"], postgresql_using="gist")

    # -- Tax / address records --
    op.create_table(
        "taxdata",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("PARID", sa.String(64), nullable=False),
        sa.Column("ADRNO", sa.String(16), nullable=True),
        sa.Column("ADRDIR", sa.String(8), nullable=True),
        sa.Column("ADRSTR", sa.String(128), nullable=True),
        sa.Column("ADRSUF", sa.String(16), nullable=True),
        sa.Column("CITYNAME", sa.String(64), nullable=True),
    )
    op.create_index("ix_taxdata_parid", "taxdata", ["PARID"])

    # Join-key indexes on the whitespace-stripped identifiers.
    if bind.dialect.name == "postgresql":
        op.execute(sa.text(
            "CREATE INDEX ix_parcels_pin_normalized "
            "ON parcels (regexp_replace(\"PIN\", '\\s', '', 'g'))"
        ))
        op.execute(sa.text(
            "CREATE INDEX ix_taxdata_parid_normalized "
            "ON taxdata (regexp_replace(\"PARID\", '\\s', '', 'g'))"
        ))


def downgrade() -> None:
    op.drop_table("taxdata")
    op.drop_table("parcels")
