"""Live data sources for weather and air quality."""

from .base import CityDataSource, OfflineDataSource
from .factory import build_data_source
from .openweather_client import (
    GeoLocation,
    LiveAirQuality,
    LiveWeather,
    OpenWeatherClient,
)

__all__ = [
    "build_data_source",
    "CityDataSource",
    "OfflineDataSource",
    "OpenWeatherClient",
    "GeoLocation",
    "LiveAirQuality",
    "LiveWeather",
]
