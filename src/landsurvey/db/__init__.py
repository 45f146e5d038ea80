"""Database layer for landsurvey: SQLAlchemy 2.0 async over PostGIS."""

from __future__ import annotations

from landsurvey.db.base import Base
from landsurvey.db.engine import DatabaseManager

__all__ = ["Base", "DatabaseManager"]
