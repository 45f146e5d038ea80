"""Ordered geocoding fallback chain.

Providers are tried in precedence order and the first usable match wins. A
provider that times out, fails at transport level or finds nothing is
skipped; the chain only reports "not found" once every provider is exhausted.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

import httpx

from landsurvey.core.config import GeocodingConfig
from landsurvey.core.errors import ProviderUnavailable
from landsurvey.core.types import AttemptStatus
from landsurvey.geocoding.client import GeocodingProvider, create_provider
from landsurvey.geocoding.models import (
    GeocodeOutcome,
    GeocodeResult,
    GeocodeSuggestion,
    ProviderAttempt,
)

logger = logging.getLogger(__name__)


class GeocodingChain:
    """Runs providers sequentially (default) or as a precedence-preserving race.

    Args:
        providers: Provider clients in precedence order.
        race: Start every provider at once. The highest-precedence success
            still wins; lower-precedence calls are cancelled once it is known.
        suggestion_limit: Maximum autocomplete suggestions.
        min_suggestion_length: Shorter suggestion queries make no request.
    """

    def __init__(
        self,
        providers: Sequence[GeocodingProvider],
        *,
        race: bool = False,
        suggestion_limit: int = 5,
        min_suggestion_length: int = 3,
    ) -> None:
        self._providers = list(providers)
        self._race = race
        self._suggestion_limit = suggestion_limit
        self._min_suggestion_length = min_suggestion_length

    @classmethod
    def from_config(
        cls,
        config: GeocodingConfig,
        http: httpx.AsyncClient | None = None,
    ) -> GeocodingChain:
        providers = [create_provider(name, config, http=http) for name in config.provider_names]
        return cls(
            providers,
            race=config.race,
            suggestion_limit=config.suggestion_limit,
            min_suggestion_length=config.min_suggestion_length,
        )

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self._providers]

    # -- public API ----------------------------------------------------------

    async def geocode(self, query: str) -> GeocodeOutcome:
        """Resolve ``query`` through the chain. Never raises for a miss."""
        query = (query or "").strip()
        if not query or not self._providers:
            return GeocodeOutcome()
        if self._race:
            return await self._geocode_race(query)
        return await self._geocode_sequential(query)

    async def suggest(self, query: str) -> list[GeocodeSuggestion]:
        """Autocomplete from the first provider only; never falls back."""
        query = (query or "").strip()
        if len(query) < self._min_suggestion_length or not self._providers:
            return []
        provider = self._providers[0]
        try:
            return await provider.suggest(query, limit=self._suggestion_limit)
        except ProviderUnavailable as exc:
            logger.warning("Suggestions unavailable: %s", exc)
            return []

    async def close(self) -> None:
        for provider in self._providers:
            await provider.close()

    # -- strategies ----------------------------------------------------------

    async def _geocode_sequential(self, query: str) -> GeocodeOutcome:
        outcome = GeocodeOutcome()
        for position, provider in enumerate(self._providers, start=1):
            attempt, result = await self._attempt(provider, query, position)
            outcome.attempts.append(attempt)
            if result is not None:
                outcome.result = result
                return outcome
        logger.info("No provider could geocode %r", query)
        return outcome

    async def _geocode_race(self, query: str) -> GeocodeOutcome:
        tasks = [
            asyncio.create_task(self._attempt(provider, query, position))
            for position, provider in enumerate(self._providers, start=1)
        ]
        outcome = GeocodeOutcome()
        try:
            for index, task in enumerate(tasks):
                attempt, result = await task
                outcome.attempts.append(attempt)
                if result is None:
                    continue
                outcome.result = result
                for loser, provider in zip(tasks[index + 1:], self._providers[index + 1:]):
                    if not loser.done():
                        loser.cancel()
                        outcome.attempts.append(
                            ProviderAttempt(provider=provider.name, status=AttemptStatus.CANCELLED)
                        )
                    elif not loser.cancelled() and loser.exception() is None:
                        outcome.attempts.append(loser.result()[0])
                return outcome
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("No provider could geocode %r", query)
        return outcome

    async def _attempt(
        self,
        provider: GeocodingProvider,
        query: str,
        position: int,
    ) -> tuple[ProviderAttempt, GeocodeResult | None]:
        try:
            result = await provider.try_geocode(query, confidence=position)
        except ProviderUnavailable as exc:
            logger.warning("%s; trying next provider", exc)
            return (
                ProviderAttempt(
                    provider=provider.name,
                    status=AttemptStatus.UNAVAILABLE,
                    error=exc.reason,
                ),
                None,
            )
        if result is None:
            logger.debug("%s found no match for %r", provider.name, query)
            return ProviderAttempt(provider=provider.name, status=AttemptStatus.NO_MATCH), None
        logger.debug("%s matched %r -> %s", provider.name, query, result.label)
        return ProviderAttempt(provider=provider.name, status=AttemptStatus.MATCHED), result
