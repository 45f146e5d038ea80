"""Exception hierarchy for parcel and address resolution.

"No match" is deliberately absent: an empty result is a normal outcome and is
represented by empty lists, ``None`` or an error payload, never an exception.
"""

from __future__ import annotations


class LandSurveyError(Exception):
    """Base class for all service errors."""


class InvalidInput(LandSurveyError):
    """A query or coordinate parameter is missing or malformed."""


class InvalidCoordinate(InvalidInput):
    """Latitude/longitude are non-numeric, non-finite or out of range."""

    def __init__(self, lat: object, lng: object, reason: str) -> None:
        super().__init__(f"Invalid coordinate (lat={lat!r}, lng={lng!r}): {reason}")
        self.lat = lat
        self.lng = lng
        self.reason = reason


class ProviderUnavailable(LandSurveyError):
    """A geocoding provider timed out, failed at transport level or sent garbage.

    Recovered inside the fallback chain by advancing to the next provider.
    """

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"Geocoding provider {provider!r} unavailable: {reason}")
        self.provider = provider
        self.reason = reason


class DataStoreError(LandSurveyError):
    """The reference-data store is unreachable or returned malformed rows."""
