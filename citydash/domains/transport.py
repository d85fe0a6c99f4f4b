"""Transport: synthetic bus, metro and traffic conditions.

There is no live transport provider; synthesis is the only data path. Rush
hour on weekdays raises bus frequency and traffic, weekends thin both out, and
nights drop traffic to "Very Low" with sparse service.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, Tuple

from citydash.city import city_hash, hash_bucket
from citydash.domain import (
    Domain,
    LevelPredictionSet,
    SourceTag,
    TrafficLevel,
    TransportMetrics,
    TransportResponse,
    Trend,
    to_payload,
)
from citydash.errors import SynthesisFailure
from citydash.pipeline import DomainPipeline, Payload, Stage
from citydash.predictions import classify_trend, forecast_instants
from citydash.response_cache import ResponseCache
from citydash.synthesis import (
    TRANSPORT_RUSH_WINDOWS,
    Daypart,
    Jitter,
    classify_hour,
    clamp,
    clamp_int,
    daily_drift,
    is_weekend,
    iso_utc,
)

MIN_BUSES = 3
DRIFT_AMPLITUDE_CONGESTION = 4.0
TREND_THRESHOLD_LEVELS = 0.5
CONFIDENCE = 75
ROUTE_SHARE = 0.85

# Inclusive (low, high) ranges; baselines sit at the midpoint.
WAIT_MINUTES: Dict[Daypart, Tuple[int, int]] = {
    Daypart.RUSH: (8, 19),
    Daypart.NIGHT: (15, 34),
    Daypart.OFF_PEAK: (3, 10),
}
SPEED_KMH: Dict[TrafficLevel, Tuple[int, int]] = {
    TrafficLevel.VERY_HIGH: (10, 24),
    TrafficLevel.HIGH: (20, 39),
    TrafficLevel.MODERATE: (30, 54),
    TrafficLevel.LOW: (40, 69),
    TrafficLevel.VERY_LOW: (40, 69),
}


@dataclass(frozen=True)
class TransportPreset:
    """Per-city network size and typical traffic."""
    base_buses: int
    base_metro: int
    traffic: TrafficLevel
    congestion_index: int


CITY_PRESETS: Dict[str, TransportPreset] = {
    "delhi": TransportPreset(45, 18, TrafficLevel.HIGH, 85),
    "mumbai": TransportPreset(52, 22, TrafficLevel.VERY_HIGH, 95),
    "bangalore": TransportPreset(38, 12, TrafficLevel.HIGH, 78),
    "chennai": TransportPreset(35, 8, TrafficLevel.MODERATE, 65),
    "kolkata": TransportPreset(42, 15, TrafficLevel.HIGH, 82),
    "hyderabad": TransportPreset(32, 10, TrafficLevel.MODERATE, 70),
    "pune": TransportPreset(28, 6, TrafficLevel.MODERATE, 68),
    "ahmedabad": TransportPreset(25, 4, TrafficLevel.MODERATE, 72),
    "jaipur": TransportPreset(22, 2, TrafficLevel.LOW, 45),
    "goa": TransportPreset(15, 0, TrafficLevel.LOW, 35),
    "shimla": TransportPreset(8, 0, TrafficLevel.LOW, 25),
    "manali": TransportPreset(5, 0, TrafficLevel.LOW, 20),
}

STATIC_TRANSPORT = {
    "buses": 35, "metro": 12, "traffic": TrafficLevel.MODERATE.value, "congestionIndex": 65,
    "avgWaitTime": 6, "activeRoutes": 28, "speedKmh": 35,
}
STATIC_PREDICTIONS = {
    "nextHours": ["Moderate", "High", "Moderate", "Moderate", "Moderate", "Moderate"],
    "trend": Trend.STABLE.value,
    "confidence": 70,
}


def traffic_for_congestion(congestion: float) -> TrafficLevel:
    """Typical traffic level for a congestion index (never Very Low)."""
    if congestion < 40:
        return TrafficLevel.LOW
    if congestion < 65:
        return TrafficLevel.MODERATE
    if congestion < 85:
        return TrafficLevel.HIGH
    return TrafficLevel.VERY_HIGH


def city_preset(city_key: str) -> TransportPreset:
    """Preset for a known city, otherwise one derived from the city hash."""
    preset = CITY_PRESETS.get(city_key)
    if preset is not None:
        return preset
    h = city_hash(city_key)
    congestion = 20 + hash_bucket(h, 76, shift=3)
    return TransportPreset(
        base_buses=8 + hash_bucket(h, 45),
        base_metro=hash_bucket(h, 20, shift=7) if hash_bucket(h, 3, shift=11) else 0,
        traffic=traffic_for_congestion(congestion),
        congestion_index=congestion,
    )


@dataclass(frozen=True)
class ServicePattern:
    """Multipliers and traffic level in effect for an hour."""
    daypart: Daypart
    bus_multiplier: float
    traffic_multiplier: float
    traffic: TrafficLevel


def service_pattern(typical: TrafficLevel, moment: dt.datetime) -> ServicePattern:
    """Time-of-day and day-of-week modulation for a city's typical traffic."""
    daypart = classify_hour(moment.hour, TRANSPORT_RUSH_WINDOWS)
    # Presets never go below Low; only night reaches Very Low.
    busiest = TrafficLevel.VERY_HIGH.ordinal
    quietest = TrafficLevel.LOW.ordinal
    if daypart is Daypart.NIGHT:
        return ServicePattern(daypart, 0.3, 0.2, TrafficLevel.VERY_LOW)
    if is_weekend(moment):
        level = TrafficLevel.from_ordinal(max(quietest, typical.ordinal - 1))
        return ServicePattern(daypart, 0.8, 0.6, level)
    if daypart is Daypart.RUSH:
        level = TrafficLevel.from_ordinal(min(busiest, typical.ordinal + 1))
        return ServicePattern(daypart, 1.6, 1.8, level)
    return ServicePattern(daypart, 1.0, 1.0, typical)


@dataclass(frozen=True)
class TransportBaseline:
    """Unjittered synthetic transport conditions for a city at an instant."""
    buses: float
    metro: float
    traffic: TrafficLevel
    congestion: float
    wait_minutes: float
    active_routes: float
    speed_kmh: float
    pattern: ServicePattern


def _midpoint(bounds: Tuple[int, int]) -> float:
    """Center of an inclusive range."""
    return (bounds[0] + bounds[1]) / 2


def transport_baseline(city_key: str, now: dt.datetime) -> TransportBaseline:
    """Preset or hash-seeded network conditions, modulated for `now`."""
    preset = city_preset(city_key)
    pattern = service_pattern(preset.traffic, now)
    return TransportBaseline(
        buses=preset.base_buses * pattern.bus_multiplier,
        metro=preset.base_metro,
        traffic=pattern.traffic,
        congestion=preset.congestion_index * pattern.traffic_multiplier + daily_drift(now, DRIFT_AMPLITUDE_CONGESTION),
        wait_minutes=_midpoint(WAIT_MINUTES[pattern.daypart]),
        active_routes=preset.base_buses * pattern.bus_multiplier * ROUTE_SHARE,
        speed_kmh=_midpoint(SPEED_KMH[pattern.traffic]),
        pattern=pattern,
    )


def _jitter_within(center: float, bounds: Tuple[int, int], jitter: Jitter) -> int:
    """Jitter `center` by up to half the range width, staying inside `bounds`."""
    half = (bounds[1] - bounds[0]) / 2
    return round(clamp(center + jitter(-half, half), bounds[0], bounds[1]))


def predict_transport(city_key: str, current: TrafficLevel, now: dt.datetime) -> LevelPredictionSet:
    """Traffic level for each of the next six hours, with a trend over level ordinals."""
    preset = city_preset(city_key)
    levels = [service_pattern(preset.traffic, moment).traffic for moment in forecast_instants(now)]
    trend = classify_trend(
        current.ordinal,
        [level.ordinal for level in levels],
        TREND_THRESHOLD_LEVELS,
        rising=Trend.WORSENING.value,
        falling=Trend.IMPROVING.value,
    )
    return LevelPredictionSet(next_hours=levels, trend=trend, confidence=CONFIDENCE)


def synthesize_transport(city: str, city_key: str, now: dt.datetime, *, jitter: Jitter) -> Payload:
    """Synthetic transport payload for `city`."""
    base = transport_baseline(city_key, now)
    metro = 0 if base.metro == 0 else max(0, round(base.metro + jitter(-2, 2)))
    metrics = TransportMetrics(
        buses=max(MIN_BUSES, round(base.buses + jitter(-3, 3))),
        metro=metro,
        traffic=base.traffic,
        congestion_index=clamp_int(base.congestion + jitter(-5, 5), 0, 100),
        avg_wait_time=_jitter_within(base.wait_minutes, WAIT_MINUTES[base.pattern.daypart], jitter),
        active_routes=round(base.active_routes),
        speed_kmh=_jitter_within(base.speed_kmh, SPEED_KMH[base.traffic], jitter),
    )
    response = TransportResponse(
        transport=metrics,
        predictions=predict_transport(city_key, base.traffic, now),
        source=SourceTag.SYNTHETIC,
        updated_at=iso_utc(now),
    )
    return to_payload(response)


def static_transport(city: str, now: dt.datetime) -> Payload:
    """Constant payload served when synthesis failed."""
    return {
        "transport": dict(STATIC_TRANSPORT),
        "predictions": {**STATIC_PREDICTIONS, "nextHours": list(STATIC_PREDICTIONS["nextHours"])},
        "source": SourceTag.STATIC_FALLBACK.value,
        "updatedAt": iso_utc(now),
    }


def build_pipeline(cache: ResponseCache, jitter: Jitter) -> DomainPipeline:
    """Transport chain: synthesis, then the static payload."""
    return DomainPipeline(
        Domain.TRANSPORT,
        cache,
        stages=[
            Stage(
                SourceTag.SYNTHETIC,
                lambda city, key, now: synthesize_transport(city, key, now, jitter=jitter),
                SynthesisFailure,
            ),
        ],
        fallback=static_transport,
    )
