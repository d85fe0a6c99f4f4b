"""Build the per-domain response caches from settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import redis

from citydash import config
from citydash.domain import Domain
from citydash.response_cache.base import ResponseCache
from citydash.response_cache.memory import InMemoryResponseCache
from citydash.response_cache.redis import RedisResponseCache
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="response_cache/factory")


@dataclass
class ResponseCaches:
    """One cache per domain; each carries its own TTL."""
    weather: ResponseCache
    air_quality: ResponseCache
    transport: ResponseCache

    def clear(self) -> None:
        """Drop every entry in all three caches."""
        for cache in (self.weather, self.air_quality, self.transport):
            cache.clear()

    def close(self) -> None:
        """Release all three cache backends."""
        for cache in (self.weather, self.air_quality, self.transport):
            cache.close()


def in_memory_caches(
    settings: config.Settings | None = None,
    *,
    clock: Optional[Callable[[], float]] = None,
) -> ResponseCaches:
    """In-memory caches with the configured TTLs and an optional test clock."""
    settings = settings or config.settings
    extra = {"clock": clock} if clock is not None else {}
    return ResponseCaches(
        weather=InMemoryResponseCache(settings.weather_ttl_seconds, name=Domain.WEATHER.value, **extra),
        air_quality=InMemoryResponseCache(settings.air_quality_ttl_seconds, name=Domain.AIR_QUALITY.value, **extra),
        transport=InMemoryResponseCache(settings.transport_ttl_seconds, name=Domain.TRANSPORT.value, **extra),
    )


def build_response_caches(settings: config.Settings | None = None) -> ResponseCaches:
    """Use Redis when configured and reachable, otherwise in-memory caches."""
    settings = settings or config.settings
    logger.debug(f"Initializing response caches: redis_url='{settings.cache_redis_url or 'None'}'")
    if settings.cache_redis_url:
        try:
            client = redis.Redis.from_url(settings.cache_redis_url)
            client.ping()
            logger.info("Using RedisResponseCache", extra={"redis_url": settings.cache_redis_url})
            prefix = settings.cache_key_prefix
            return ResponseCaches(
                weather=RedisResponseCache(
                    client, settings.weather_ttl_seconds, prefix=f"{prefix}{Domain.WEATHER.value}:"
                ),
                air_quality=RedisResponseCache(
                    client, settings.air_quality_ttl_seconds, prefix=f"{prefix}{Domain.AIR_QUALITY.value}:"
                ),
                transport=RedisResponseCache(
                    client, settings.transport_ttl_seconds, prefix=f"{prefix}{Domain.TRANSPORT.value}:"
                ),
            )
        except (redis.RedisError, ValueError) as exc:
            logger.warning("Falling back to InMemoryResponseCache (Redis unavailable)", extra={"error": str(exc)})
    return in_memory_caches(settings)
