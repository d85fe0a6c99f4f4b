"""Air quality: live OpenWeatherMap pollution readings with a synthetic fallback.

Synthetic AQI rises during the morning and evening rush and settles at night.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from citydash.city import city_hash, hash_bucket
from citydash.data_sources import CityDataSource
from citydash.domain import (
    AirQualityMetrics,
    AirQualityResponse,
    Domain,
    PredictionSet,
    SourceTag,
    Trend,
    to_payload,
)
from citydash.errors import ProviderUnavailable, SynthesisFailure
from citydash.pipeline import DomainPipeline, Payload, Stage
from citydash.predictions import classify_trend, project_hourly
from citydash.response_cache import ResponseCache
from citydash.synthesis import AIR_RUSH_WINDOWS, Daypart, Jitter, classify_hour, clamp_int, daily_drift, iso_utc

MIN_AQI = 10
MAX_AQI = 500
MIN_PM25 = 4

DAYPART_OFFSETS = {Daypart.RUSH: 20.0, Daypart.NIGHT: -12.0, Daypart.OFF_PEAK: -8.0}
DRIFT_AMPLITUDE_AQI = 12.0
TREND_THRESHOLD_AQI = 20.0
PREDICTION_NOISE_AQI = 5.0
CONFIDENCE = 70

# Provider 1-5 index scaled onto a US-AQI-like range.
PROVIDER_INDEX_SCALE = 50

# (upper bound inclusive, label)
AQI_BANDS = (
    (50, "Good"),
    (100, "Moderate"),
    (150, "Unhealthy for Sensitive Groups"),
    (200, "Unhealthy"),
    (300, "Very Unhealthy"),
)

STATIC_AIR_QUALITY = {
    "aqi": 85, "pm25": 45, "pm10": 65, "status": "Moderate", "no2": 25, "so2": 15, "co": 500, "o3": 40,
}
STATIC_PREDICTIONS = {"nextHours": [85, 90, 88, 86, 87, 85], "trend": Trend.STABLE.value, "confidence": 70}


def aqi_status(aqi: float) -> str:
    """Map an AQI value to its category label."""
    for upper, label in AQI_BANDS:
        if aqi <= upper:
            return label
    return "Hazardous"


def rush_offset(moment: dt.datetime) -> float:
    """AQI offset for the daypart of `moment` (rush, night or off-peak)."""
    return DAYPART_OFFSETS[classify_hour(moment.hour, AIR_RUSH_WINDOWS)]


def aqi_modulation(moment: dt.datetime) -> float:
    """Total time-of-day AQI shift: daypart offset plus daily drift."""
    return rush_offset(moment) + daily_drift(moment, DRIFT_AMPLITUDE_AQI)


@dataclass(frozen=True)
class AirQualityBaseline:
    """Unjittered synthetic pollution levels for a city at an instant."""
    aqi: float
    pm25: float
    no2: float
    so2: float
    co: float
    o3: float


def air_quality_baseline(city_key: str, now: dt.datetime) -> AirQualityBaseline:
    """Hash-seeded pollution levels for a city, modulated for `now`."""
    h = city_hash(city_key)
    base_aqi = 30 + hash_bucket(h, 170)
    base_pm25 = max(5, base_aqi / 2 + hash_bucket(h, 20, shift=4) - 5)
    return AirQualityBaseline(
        aqi=base_aqi + hash_bucket(h, 15, shift=8) - 7 + aqi_modulation(now),
        pm25=base_pm25 + rush_offset(now) * 0.35 + hash_bucket(h, 7, shift=12) - 3,
        no2=10 + hash_bucket(h, 60, shift=3),
        so2=5 + hash_bucket(h, 25, shift=6),
        co=200 + hash_bucket(h, 1200, shift=9),
        o3=20 + hash_bucket(h, 90, shift=14),
    )


def predict_air_quality(current_aqi: float, now: dt.datetime, jitter: Jitter) -> PredictionSet:
    """Six hourly AQI values with a worsening/improving/stable trend."""
    values = project_hourly(
        current_aqi,
        now,
        aqi_modulation,
        jitter=jitter,
        noise=PREDICTION_NOISE_AQI,
        low=MIN_AQI,
        high=MAX_AQI,
    )
    trend = classify_trend(
        current_aqi,
        values,
        TREND_THRESHOLD_AQI,
        rising=Trend.WORSENING.value,
        falling=Trend.IMPROVING.value,
    )
    return PredictionSet(next_hours=values, trend=trend, confidence=CONFIDENCE)


def synthesize_air_quality(city: str, city_key: str, now: dt.datetime, *, jitter: Jitter) -> Payload:
    """Synthetic air-quality payload for `city`."""
    base = air_quality_baseline(city_key, now)
    aqi = clamp_int(base.aqi + jitter(-5, 5), MIN_AQI, MAX_AQI)
    pm25 = max(MIN_PM25, round(base.pm25 + jitter(-2, 2)))
    metrics = AirQualityMetrics(
        aqi=aqi,
        pm25=pm25,
        pm10=round(pm25 * 1.25),
        status=aqi_status(aqi),
        no2=round(base.no2),
        so2=round(base.so2),
        co=round(base.co),
        o3=round(base.o3),
    )
    response = AirQualityResponse(
        city=city,
        air_quality=metrics,
        predictions=predict_air_quality(aqi, now, jitter),
        source=SourceTag.SYNTHETIC,
        updated_at=iso_utc(now),
    )
    return to_payload(response)


def live_air_quality(data_source: CityDataSource, city: str, now: dt.datetime, *, jitter: Jitter) -> Payload:
    """Live air-quality payload shaped from the provider's pollution reading."""
    live = data_source.fetch_air_quality(city)
    aqi = clamp_int(live.index * PROVIDER_INDEX_SCALE, MIN_AQI, MAX_AQI)
    metrics = AirQualityMetrics(
        aqi=aqi,
        pm25=round(live.pm2_5),
        pm10=round(live.pm10),
        status=aqi_status(aqi),
        no2=round(live.no2),
        so2=round(live.so2),
        co=round(live.co),
        o3=round(live.o3),
    )
    response = AirQualityResponse(
        city=live.city,
        air_quality=metrics,
        predictions=predict_air_quality(aqi, now, jitter),
        source=SourceTag.LIVE,
        updated_at=iso_utc(now),
    )
    return to_payload(response)


def static_air_quality(city: str, now: dt.datetime) -> Payload:
    """Constant payload served when every other stage failed."""
    return {
        "city": city,
        "airQuality": dict(STATIC_AIR_QUALITY),
        "predictions": {**STATIC_PREDICTIONS, "nextHours": list(STATIC_PREDICTIONS["nextHours"])},
        "source": SourceTag.STATIC_FALLBACK.value,
        "updatedAt": iso_utc(now),
    }


def build_pipeline(cache: ResponseCache, data_source: CityDataSource, jitter: Jitter) -> DomainPipeline:
    """Air-quality chain: live provider, then synthesis, then the static payload."""
    return DomainPipeline(
        Domain.AIR_QUALITY,
        cache,
        stages=[
            Stage(
                SourceTag.LIVE,
                lambda city, _key, now: live_air_quality(data_source, city, now, jitter=jitter),
                ProviderUnavailable,
            ),
            Stage(
                SourceTag.SYNTHETIC,
                lambda city, key, now: synthesize_air_quality(city, key, now, jitter=jitter),
                SynthesisFailure,
            ),
        ],
        fallback=static_air_quality,
    )
