"""Weather: live OpenWeatherMap conditions with a synthetic fallback."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict

from citydash.city import city_hash, hash_bucket
from citydash.data_sources import CityDataSource
from citydash.domain import (
    Domain,
    PredictionSet,
    SourceTag,
    WeatherMetrics,
    WeatherResponse,
    WeatherTrend,
    to_payload,
)
from citydash.errors import ProviderUnavailable, SynthesisFailure
from citydash.pipeline import DomainPipeline, Payload, Stage
from citydash.predictions import classify_trend, project_hourly
from citydash.response_cache import ResponseCache
from citydash.synthesis import Jitter, clamp_int, daily_drift, is_night, iso_utc

MIN_TEMP_C = -30
MAX_TEMP_C = 60
MIN_HUMIDITY = 10
MAX_HUMIDITY = 95
MIN_PRESSURE_HPA = 950
MAX_PRESSURE_HPA = 1060
MAX_WIND_KMH = 150

DRIFT_AMPLITUDE_C = 3.0
TREND_THRESHOLD_C = 2.0
PREDICTION_NOISE_C = 1.0
CONFIDENCE = 75


@dataclass(frozen=True)
class WeatherPreset:
    """Per-city baseline climate."""
    base_temp: float
    humidity: float
    desc: str
    icon: str


CITY_PRESETS: Dict[str, WeatherPreset] = {
    "delhi": WeatherPreset(35, 68, "Hazy", "50d"),
    "mumbai": WeatherPreset(29, 87, "Light rain", "10d"),
    "bangalore": WeatherPreset(23, 52, "Pleasant", "02d"),
    "chennai": WeatherPreset(32, 78, "Hot and humid", "01d"),
    "kolkata": WeatherPreset(31, 82, "Muggy", "04d"),
    "hyderabad": WeatherPreset(28, 58, "Warm", "03d"),
    "pune": WeatherPreset(25, 48, "Moderate", "02d"),
    "ahmedabad": WeatherPreset(38, 42, "Very hot", "01d"),
    "jaipur": WeatherPreset(36, 38, "Dry heat", "01d"),
    "goa": WeatherPreset(30, 85, "Heavy rain", "10d"),
    "shimla": WeatherPreset(18, 65, "Cool", "03d"),
    "manali": WeatherPreset(15, 70, "Cold", "13d"),
}

DESCRIPTION_ICONS = {
    "Partly cloudy": "02d",
    "Clear": "01d",
    "Light rain": "10d",
    "Hazy": "50d",
    "Windy": "03d",
    "Overcast": "04d",
}
_DESCRIPTIONS = tuple(DESCRIPTION_ICONS)

STATIC_WEATHER = {"temp": 25, "humidity": 65, "desc": "Partly cloudy", "icon": "02d", "windSpeed": 10, "pressure": 1013}
STATIC_PREDICTIONS = {"nextHours": [25, 26, 27, 27, 26, 25], "trend": WeatherTrend.STABLE.value, "confidence": 70}


def city_preset(city_key: str) -> WeatherPreset:
    """Preset for a known city, otherwise one derived from the city hash."""
    preset = CITY_PRESETS.get(city_key)
    if preset is not None:
        return preset
    h = city_hash(city_key)
    desc = _DESCRIPTIONS[hash_bucket(h, len(_DESCRIPTIONS), shift=2)]
    return WeatherPreset(
        base_temp=18 + hash_bucket(h, 18),
        humidity=30 + hash_bucket(h, 60, shift=3),
        desc=desc,
        icon=DESCRIPTION_ICONS[desc],
    )


def hour_offset(hour: int) -> float:
    """Diurnal temperature offset: cold before dawn, warmest in the afternoon."""
    if hour < 6:
        return -5.0
    if hour < 12:
        return 0.0
    if hour < 18:
        return 3.0
    return -2.0


def temperature_modulation(moment: dt.datetime) -> float:
    """Total time-of-day temperature shift: diurnal band plus daily drift."""
    return hour_offset(moment.hour) + daily_drift(moment, DRIFT_AMPLITUDE_C)


def night_icon(icon: str) -> str:
    """Swap a day icon code ("01d") for its night variant ("01n")."""
    return icon[:-1] + "n" if icon.endswith("d") else icon


@dataclass(frozen=True)
class WeatherBaseline:
    """Unjittered synthetic weather for a city at an instant."""
    temperature: float
    humidity: float
    desc: str
    icon: str
    wind_speed: float
    pressure: float


def weather_baseline(city_key: str, now: dt.datetime) -> WeatherBaseline:
    """Preset or hash-seeded weather for a city, modulated for `now`."""
    preset = city_preset(city_key)
    h = city_hash(city_key)
    desc, icon = preset.desc, preset.icon
    if is_night(now.hour):
        desc, icon = f"{desc} (cool night)", night_icon(icon)
    return WeatherBaseline(
        temperature=preset.base_temp + temperature_modulation(now),
        humidity=preset.humidity,
        desc=desc,
        icon=icon,
        wind_speed=3 + hash_bucket(h, 10, shift=5),
        pressure=1013 + hash_bucket(h, 31, shift=7) - 15,
    )


def predict_weather(current_temp: float, now: dt.datetime, jitter: Jitter) -> PredictionSet:
    """Six hourly temperatures with a warming/cooling/stable trend."""
    values = project_hourly(
        current_temp,
        now,
        temperature_modulation,
        jitter=jitter,
        noise=PREDICTION_NOISE_C,
        low=MIN_TEMP_C,
        high=MAX_TEMP_C,
    )
    trend = classify_trend(
        current_temp,
        values,
        TREND_THRESHOLD_C,
        rising=WeatherTrend.WARMING.value,
        falling=WeatherTrend.COOLING.value,
    )
    return PredictionSet(next_hours=values, trend=trend, confidence=CONFIDENCE)


def synthesize_weather(city: str, city_key: str, now: dt.datetime, *, jitter: Jitter) -> Payload:
    """Synthetic weather payload for `city`."""
    base = weather_baseline(city_key, now)
    temp = clamp_int(base.temperature + jitter(-1, 1), MIN_TEMP_C, MAX_TEMP_C)
    metrics = WeatherMetrics(
        temp=temp,
        humidity=clamp_int(base.humidity + jitter(-4, 4), MIN_HUMIDITY, MAX_HUMIDITY),
        desc=base.desc,
        icon=base.icon,
        wind_speed=clamp_int(base.wind_speed + jitter(-2, 2), 0, MAX_WIND_KMH),
        pressure=clamp_int(base.pressure + jitter(-3, 3), MIN_PRESSURE_HPA, MAX_PRESSURE_HPA),
    )
    response = WeatherResponse(
        city=city,
        weather=metrics,
        predictions=predict_weather(temp, now, jitter),
        source=SourceTag.SYNTHETIC,
        updated_at=iso_utc(now),
    )
    return to_payload(response)


def live_weather(data_source: CityDataSource, city: str, now: dt.datetime, *, jitter: Jitter) -> Payload:
    """Live weather payload shaped from the provider's current conditions."""
    live = data_source.fetch_weather(city)
    temp = clamp_int(live.temperature, MIN_TEMP_C, MAX_TEMP_C)
    metrics = WeatherMetrics(
        temp=temp,
        humidity=clamp_int(live.humidity, MIN_HUMIDITY, MAX_HUMIDITY),
        desc=live.description,
        icon=live.icon,
        wind_speed=clamp_int(live.wind_speed_ms * 3.6, 0, MAX_WIND_KMH),
        pressure=clamp_int(live.pressure, MIN_PRESSURE_HPA, MAX_PRESSURE_HPA),
    )
    response = WeatherResponse(
        city=live.city,
        weather=metrics,
        predictions=predict_weather(temp, now, jitter),
        source=SourceTag.LIVE,
        updated_at=iso_utc(now),
    )
    return to_payload(response)


def static_weather(city: str, now: dt.datetime) -> Payload:
    """Constant payload served when every other stage failed."""
    return {
        "city": city,
        "weather": dict(STATIC_WEATHER),
        "predictions": {**STATIC_PREDICTIONS, "nextHours": list(STATIC_PREDICTIONS["nextHours"])},
        "source": SourceTag.STATIC_FALLBACK.value,
        "updatedAt": iso_utc(now),
    }


def build_pipeline(cache: ResponseCache, data_source: CityDataSource, jitter: Jitter) -> DomainPipeline:
    """Weather chain: live provider, then synthesis, then the static payload."""
    return DomainPipeline(
        Domain.WEATHER,
        cache,
        stages=[
            Stage(
                SourceTag.LIVE,
                lambda city, _key, now: live_weather(data_source, city, now, jitter=jitter),
                ProviderUnavailable,
            ),
            Stage(
                SourceTag.SYNTHETIC,
                lambda city, key, now: synthesize_weather(city, key, now, jitter=jitter),
                SynthesisFailure,
            ),
        ],
        fallback=static_weather,
    )
