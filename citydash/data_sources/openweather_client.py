"""Helpers for fetching live weather and air-quality data from OpenWeatherMap.

Each lookup geocodes the raw city string first, then queries the metric
endpoint by coordinates. A lookup is a single attempt; both requests share one
deadline of `timeout` seconds. Every failure mode is reported as
ProviderUnavailable so the caller can fall back to synthetic data.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

from citydash.errors import ProviderUnavailable
from utils.logging_utils import get_tagged_logger, mask_secret
logger = get_tagged_logger(__name__, tag="openweather_client")

DEFAULT_BASE_URL = "https://api.openweathermap.org"
GEOCODE_PATH = "/geo/1.0/direct"
WEATHER_PATH = "/data/2.5/weather"
AIR_POLLUTION_PATH = "/data/2.5/air_pollution"

# Payload problems that mean "the provider gave us something unusable".
_MALFORMED = (KeyError, IndexError, TypeError, ValueError)


@dataclass
class GeoLocation:
    """First geocoding match for a city query."""
    name: str
    latitude: float
    longitude: float
    country: Optional[str] = None


@dataclass
class LiveWeather:
    """Current weather as reported by OpenWeatherMap (metric units)."""
    city: str
    temperature: float
    humidity: float
    description: str
    icon: str
    wind_speed_ms: float
    pressure: float


@dataclass
class LiveAirQuality:
    """Current air pollution as reported by OpenWeatherMap.

    `index` is the provider's 1-5 scale; components are µg/m³.
    """
    city: str
    index: int
    pm2_5: float
    pm10: float
    no2: float
    so2: float
    co: float
    o3: float


class OpenWeatherClient:
    """Thin OpenWeatherMap client: geocoding, current weather, air pollution."""

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 4.0,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._clock = clock
        logger.info(
            "OpenWeatherMap client ready",
            extra={"base_url": self.base_url, "api_key": mask_secret(api_key), "timeout": timeout},
        )

    def _deadline(self) -> float:
        """Monotonic instant by which the whole lookup must finish."""
        return self._clock() + self.timeout

    def _get(self, path: str, params: Dict[str, Any], deadline: float) -> Any:
        """GET a provider endpoint within the time left before `deadline` and return decoded JSON."""
        if not self.api_key:
            raise ProviderUnavailable("No OpenWeatherMap API key configured")
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise ProviderUnavailable(f"OpenWeatherMap timed out after {self.timeout}s")
        query = {**params, "appid": self.api_key}
        try:
            resp = self.session.get(f"{self.base_url}{path}", params=query, timeout=remaining)
            resp.raise_for_status()
            return resp.json()
        except requests.Timeout as exc:
            raise ProviderUnavailable(f"OpenWeatherMap timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise ProviderUnavailable(f"OpenWeatherMap request failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderUnavailable("OpenWeatherMap returned invalid JSON") from exc

    def geocode(self, city: str, *, deadline: Optional[float] = None) -> GeoLocation:
        """Resolve a raw city string to coordinates."""
        if deadline is None:
            deadline = self._deadline()
        data = self._get(GEOCODE_PATH, {"q": city, "limit": 1}, deadline)
        if not isinstance(data, list) or not data:
            raise ProviderUnavailable(f"City not found: {city!r}")
        try:
            first = data[0]
            return GeoLocation(
                name=first.get("name") or city,
                latitude=float(first["lat"]),
                longitude=float(first["lon"]),
                country=first.get("country"),
            )
        except _MALFORMED as exc:
            raise ProviderUnavailable("Malformed geocoding payload") from exc

    def fetch_weather(self, city: str) -> LiveWeather:
        """Fetch current weather for a raw city string."""
        deadline = self._deadline()
        location = self.geocode(city, deadline=deadline)
        data = self._get(
            WEATHER_PATH,
            {"lat": location.latitude, "lon": location.longitude, "units": "metric"},
            deadline,
        )
        try:
            main = data["main"]
            conditions = data["weather"][0]
            return LiveWeather(
                city=data.get("name") or location.name,
                temperature=float(main["temp"]),
                humidity=float(main["humidity"]),
                description=str(conditions["description"]),
                icon=str(conditions["icon"]),
                wind_speed_ms=float((data.get("wind") or {}).get("speed", 0.0)),
                pressure=float(main["pressure"]),
            )
        except _MALFORMED as exc:
            raise ProviderUnavailable("Malformed weather payload") from exc

    def fetch_air_quality(self, city: str) -> LiveAirQuality:
        """Fetch current air pollution for a raw city string."""
        deadline = self._deadline()
        location = self.geocode(city, deadline=deadline)
        data = self._get(AIR_POLLUTION_PATH, {"lat": location.latitude, "lon": location.longitude}, deadline)
        try:
            reading = data["list"][0]
            components = reading.get("components") or {}
            return LiveAirQuality(
                city=location.name,
                index=int((reading.get("main") or {}).get("aqi") or 1),
                pm2_5=float(components.get("pm2_5") or 0.0),
                pm10=float(components.get("pm10") or 0.0),
                no2=float(components.get("no2") or 0.0),
                so2=float(components.get("so2") or 0.0),
                co=float(components.get("co") or 0.0),
                o3=float(components.get("o3") or 0.0),
            )
        except _MALFORMED as exc:
            raise ProviderUnavailable("Malformed air pollution payload") from exc

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
