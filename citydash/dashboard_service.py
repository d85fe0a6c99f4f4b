"""The service object that owns the caches, the live data source and the three pipelines.

One instance is created at application startup and injected into the request
handlers; `close()` releases the provider session and the cache backend at
shutdown.
"""
from __future__ import annotations

import datetime as dt
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from citydash import config
from citydash.data_sources import CityDataSource, build_data_source
from citydash.domain import InsightsResponse, to_payload
from citydash.domains import air_quality, transport, weather
from citydash.insights import build_insights
from citydash.pipeline import ResolvedPayload
from citydash.response_cache import ResponseCaches, build_response_caches
from citydash.synthesis import Jitter, default_jitter, iso_utc
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="dashboard_service")

Clock = Callable[[], dt.datetime]


def zone_clock(tz_name: str) -> Clock:
    """Wall clock in the configured timezone (drives time-of-day modulation)."""
    tz = ZoneInfo(tz_name)
    return lambda: dt.datetime.now(tz)


class DashboardService:
    """Resolve weather, air-quality, transport and insights for a city."""

    def __init__(
        self,
        data_source: CityDataSource,
        caches: ResponseCaches,
        *,
        clock: Optional[Clock] = None,
        jitter: Jitter = default_jitter,
    ) -> None:
        self.data_source = data_source
        self.caches = caches
        self.clock = clock or zone_clock("UTC")
        self.weather = weather.build_pipeline(caches.weather, data_source, jitter)
        self.air_quality = air_quality.build_pipeline(caches.air_quality, data_source, jitter)
        self.transport = transport.build_pipeline(caches.transport, jitter)

    @classmethod
    def from_settings(cls, settings: config.Settings | None = None) -> "DashboardService":
        """Build the service with the configured data source, caches and timezone."""
        settings = settings or config.settings
        return cls(
            build_data_source(settings),
            build_response_caches(settings),
            clock=zone_clock(settings.timezone),
        )

    def weather_for(self, city: str | None) -> ResolvedPayload:
        """Resolve weather for a raw city name."""
        return self.weather.resolve(city, self.clock())

    def air_quality_for(self, city: str | None) -> ResolvedPayload:
        """Resolve air quality for a raw city name."""
        return self.air_quality.resolve(city, self.clock())

    def transport_for(self, city: str | None) -> ResolvedPayload:
        """Resolve transport conditions for a raw city name."""
        return self.transport.resolve(city, self.clock())

    def insights_for(self, city: str | None) -> dict:
        """Insights computed from the (cache-backed) payloads of all three domains."""
        now = self.clock()
        weather_payload = self.weather.resolve(city, now).payload
        air_payload = self.air_quality.resolve(city, now).payload
        transport_payload = self.transport.resolve(city, now).payload
        response = InsightsResponse(
            city=city.strip(),
            insights=build_insights(weather_payload, air_payload, transport_payload, now),
            generated_at=iso_utc(now),
        )
        return to_payload(response)

    def close(self) -> None:
        """Close the caches and the provider session."""
        logger.info("Shutting down dashboard service")
        self.caches.close()
        self.data_source.close()
