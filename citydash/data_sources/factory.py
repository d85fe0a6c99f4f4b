"""Factory helpers for choosing a live data source at startup."""

from __future__ import annotations

from citydash import config
from citydash.data_sources.base import CityDataSource, OfflineDataSource
from citydash.data_sources.openweather_client import OpenWeatherClient
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "openweather"


def build_data_source(settings: config.Settings | None = None) -> CityDataSource:
    """Instantiate the configured live data source."""
    settings = settings or config.settings
    source = (settings.data_source or DEFAULT_SOURCE_NAME).lower()

    if source == "openweather":
        if not settings.openweather_api_key:
            logger.warning("No OpenWeatherMap API key configured; weather and air quality will be synthetic")
        logger.info("Using OpenWeatherMap data source")
        return OpenWeatherClient(
            settings.openweather_api_key,
            base_url=settings.openweather_base_url,
            timeout=settings.provider_timeout_seconds,
        )

    if source == "offline":
        logger.info("Using offline data source; all city data will be synthetic")
        return OfflineDataSource()

    raise ValueError(f"Unknown data source '{source}'")
