"""Core type definitions shared across landsurvey modules."""

from __future__ import annotations

from enum import StrEnum


class AttemptStatus(StrEnum):
    """Outcome of a single geocoding provider call within the chain."""

    MATCHED = "matched"
    NO_MATCH = "no_match"
    UNAVAILABLE = "unavailable"
    CANCELLED = "cancelled"
