"""Tiered resolution of city data: cache, live provider, synthesis, static fallback.

Each domain (weather, air quality, transport) runs the same chain:

    normalize -> cache lookup -> stage 1 -> stage 2 ... -> static fallback

Stages are tried in order; the first one to produce a payload wins and its
result is cached under the normalized city key with the stage's source tag.
When every stage fails the static fallback is returned and nothing is cached.
Only MissingParameter (blank city) escapes `resolve`.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Callable, Dict, Sequence, Type

from citydash.city import normalize_city
from citydash.domain import Domain, SourceTag
from citydash.errors import DashboardError, ProviderUnavailable, SynthesisFailure
from citydash.response_cache import ResponseCache
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="pipeline")

Payload = Dict[str, Any]
Producer = Callable[[str, str, dt.datetime], Payload]
"""(raw city, normalized key, now) -> JSON-ready payload."""
Fallback = Callable[[str, dt.datetime], Payload]


@dataclass(frozen=True)
class Stage:
    """One tier of the chain, tagged with the source it represents."""
    source: SourceTag
    produce: Producer
    failure: Type[DashboardError]


@dataclass(frozen=True)
class ResolvedPayload:
    """Outcome of a resolution: payload, where it came from, and whether it was cached."""
    payload: Payload
    source: SourceTag
    cache_hit: bool = False


class DomainPipeline:
    """The per-domain resolution chain."""

    def __init__(
        self,
        domain: Domain,
        cache: ResponseCache,
        stages: Sequence[Stage],
        fallback: Fallback,
    ) -> None:
        self.domain = domain
        self.cache = cache
        self.stages = tuple(stages)
        self.fallback = fallback

    def lookup(self, key: str):
        """Return a cached entry only if it belongs to `key`."""
        entry = self.cache.get(key)
        if entry is None:
            return None
        if entry.city_key != key:
            logger.warning(
                "Cached %s entry belongs to a different city; treating as miss",
                self.domain.value,
                extra={"key": key, "cached_key": entry.city_key},
            )
            return None
        return entry

    def resolve(self, city: str | None, now: dt.datetime) -> ResolvedPayload:
        """Resolve a raw city name to a payload. Raises MissingParameter for blank input."""
        key = normalize_city(city)
        raw_city = city.strip()

        entry = self.lookup(key)
        if entry is not None:
            logger.debug("%s cache hit for %r", self.domain.value, key)
            return ResolvedPayload(payload=entry.payload, source=entry.source, cache_hit=True)
        logger.debug("%s cache miss for %r", self.domain.value, key)

        for stage in self.stages:
            try:
                payload = stage.produce(raw_city, key, now)
            except Exception as exc:
                self._log_stage_failure(stage, key, exc)
                continue
            self.cache.put(key, payload, stage.source)
            logger.info("Resolved %s for %r from %s", self.domain.value, key, stage.source.value)
            return ResolvedPayload(payload=payload, source=stage.source)

        logger.warning("All %s stages failed for %r; serving static fallback", self.domain.value, key)
        return ResolvedPayload(payload=self.fallback(raw_city, now), source=SourceTag.STATIC_FALLBACK)

    def _log_stage_failure(self, stage: Stage, key: str, exc: Exception) -> None:
        """Log a failed stage at a level that reflects how expected the failure is."""
        if isinstance(exc, ProviderUnavailable):
            logger.info("%s provider unavailable for %r: %s", self.domain.value, key, exc)
        elif stage.failure is SynthesisFailure:
            logger.error("%s synthesis failed for %r: %r", self.domain.value, key, exc, exc_info=exc)
        else:
            logger.warning(
                "%s stage %s failed for %r: %s", self.domain.value, stage.source.value, key, exc, exc_info=True
            )
