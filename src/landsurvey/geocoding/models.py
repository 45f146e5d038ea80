"""Geocoding data models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from landsurvey.core.types import AttemptStatus


class GeocodeResult(BaseModel):
    """A resolved address, normalized to (lat, lng) regardless of provider."""

    lat: float
    lng: float
    label: str
    source_provider: str
    # Chain position of the provider; 1 is the most authoritative.
    confidence: int = Field(default=1, ge=1)


class GeocodeSuggestion(BaseModel):
    """An autocomplete candidate."""

    label: str
    lat: float
    lng: float


class ProviderAttempt(BaseModel):
    """Diagnostic record of one provider call."""

    provider: str
    status: AttemptStatus
    error: str | None = None


class GeocodeOutcome(BaseModel):
    """Result of running the fallback chain. ``result is None`` means not found."""

    result: GeocodeResult | None = None
    attempts: list[ProviderAttempt] = Field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.result is not None
