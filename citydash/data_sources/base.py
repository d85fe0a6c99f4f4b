"""Interfaces and helpers for live city data sources."""

from __future__ import annotations

from typing import Protocol

from citydash.data_sources.openweather_client import LiveAirQuality, LiveWeather
from citydash.errors import ProviderUnavailable


class CityDataSource(Protocol):
    """Interface for anything that can provide live weather and air-quality data.

    Implementations raise ProviderUnavailable for every failure.
    """

    def fetch_weather(self, city: str) -> LiveWeather:
        """Return current weather for a raw city string."""
        ...

    def fetch_air_quality(self, city: str) -> LiveAirQuality:
        """Return current air quality for a raw city string."""
        ...

    def close(self) -> None:
        """Release network resources."""
        ...


class OfflineDataSource:
    """Data source with no live backend; every request falls through to synthesis."""

    def fetch_weather(self, city: str) -> LiveWeather:
        raise ProviderUnavailable("Live provider disabled (offline data source)")

    def fetch_air_quality(self, city: str) -> LiveAirQuality:
        raise ProviderUnavailable("Live provider disabled (offline data source)")

    def close(self) -> None:
        """Nothing to release."""
        return None
