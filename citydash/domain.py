"""Domain vocabulary and response schemas for the city data endpoints.

Field names are snake_case in Python and serialized as camelCase, matching the
JSON the dashboard UI consumes (`windSpeed`, `congestionIndex`, `nextHours`,
`updatedAt`). Range constraints on the metric fields double as the final clamp
check: a synthesized record that falls outside them fails validation and the
request degrades to the static fallback.
"""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PREDICTION_HOURS = 6


class _CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceTag(str, Enum):
    """Where a response payload came from."""
    LIVE = "live-provider"
    SYNTHETIC = "synthetic"
    STATIC_FALLBACK = "static-fallback"


class Domain(str, Enum):
    """The three city data domains."""
    WEATHER = "weather"
    AIR_QUALITY = "airquality"
    TRANSPORT = "transport"


class WeatherTrend(str, Enum):
    WARMING = "warming"
    COOLING = "cooling"
    STABLE = "stable"


class Trend(str, Enum):
    """Trend labels shared by air quality and transport."""
    WORSENING = "worsening"
    IMPROVING = "improving"
    STABLE = "stable"


class TrafficLevel(str, Enum):
    """Traffic levels, ordered from lightest to heaviest."""
    VERY_LOW = "Very Low"
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "Very High"

    @property
    def ordinal(self) -> int:
        """Position from lightest (0) to heaviest (4)."""
        return _TRAFFIC_ORDER.index(self)

    @classmethod
    def from_ordinal(cls, value: int) -> "TrafficLevel":
        """Level at `value`, clamped to the valid range."""
        value = max(0, min(len(_TRAFFIC_ORDER) - 1, value))
        return _TRAFFIC_ORDER[value]


_TRAFFIC_ORDER = list(TrafficLevel)


class PredictionSet(_CamelModel):
    """Six hourly numeric predictions with a trend and a display confidence."""
    next_hours: List[int] = Field(min_length=PREDICTION_HOURS, max_length=PREDICTION_HOURS)
    trend: str
    confidence: int = Field(ge=0, le=100)


class LevelPredictionSet(_CamelModel):
    """Six hourly traffic-level predictions."""
    next_hours: List[TrafficLevel] = Field(min_length=PREDICTION_HOURS, max_length=PREDICTION_HOURS)
    trend: Trend
    confidence: int = Field(ge=0, le=100)


class WeatherMetrics(_CamelModel):
    temp: int = Field(ge=-30, le=60)
    humidity: int = Field(ge=10, le=95)
    desc: str
    icon: str
    wind_speed: int = Field(ge=0)
    pressure: int


class AirQualityMetrics(_CamelModel):
    aqi: int = Field(ge=10, le=500)
    pm25: int = Field(ge=0)
    pm10: int = Field(ge=0)
    status: str
    no2: int = Field(ge=0)
    so2: int = Field(ge=0)
    co: int = Field(ge=0)
    o3: int = Field(ge=0)


class TransportMetrics(_CamelModel):
    buses: int = Field(ge=0)
    metro: int = Field(ge=0)
    traffic: TrafficLevel
    congestion_index: int = Field(ge=0, le=100)
    avg_wait_time: int = Field(ge=0)
    active_routes: int = Field(ge=0)
    speed_kmh: int = Field(ge=0)


class WeatherResponse(_CamelModel):
    city: str
    weather: WeatherMetrics
    predictions: PredictionSet
    source: SourceTag
    updated_at: str


class AirQualityResponse(_CamelModel):
    city: str
    air_quality: AirQualityMetrics
    predictions: PredictionSet
    source: SourceTag
    updated_at: str


class TransportResponse(_CamelModel):
    transport: TransportMetrics
    predictions: LevelPredictionSet
    source: SourceTag
    updated_at: str


class InsightSeverity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


class Insight(_CamelModel):
    """A single human-readable observation about current city conditions."""
    type: str
    icon: str
    message: str
    severity: InsightSeverity


class InsightsResponse(_CamelModel):
    city: str
    insights: List[Insight]
    generated_at: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    message: str
    version: str
    timestamp: str


def to_payload(model: BaseModel) -> dict:
    """Dump a response model to the JSON-ready dict that gets cached and served."""
    return model.model_dump(mode="json", by_alias=True)
