"""Application configuration pulled from environment variables via pydantic."""
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger, mask_secret
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the city dashboard API."""
    model_config = SettingsConfigDict(env_prefix="CITYDASH_", extra="ignore", populate_by_name=True)

    data_source: str = "openweather"  # options: openweather, offline
    openweather_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CITYDASH_OPENWEATHER_API_KEY", "OPENWEATHER_API_KEY", "openweather_api_key"),
    )
    openweather_base_url: str = "https://api.openweathermap.org"
    provider_timeout_seconds: float = 4.0
    weather_ttl_seconds: int = 600
    air_quality_ttl_seconds: int = 600
    transport_ttl_seconds: int = 300
    cache_redis_url: str | None = None
    cache_key_prefix: str = "citydash:"
    timezone: str = "UTC"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @field_validator("openweather_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("weather_ttl_seconds", "air_quality_ttl_seconds", "transport_ttl_seconds", mode="after")
    @classmethod
    def positive_ttl(cls, v: int) -> int:
        """Cache TTLs must be at least one second."""
        if v < 1:
            raise ValueError("cache TTL must be >= 1 second")
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'openweather_api_key'})}")
    logger.debug(f"OpenWeatherMap key: {mask_secret(settings.openweather_api_key)}")
