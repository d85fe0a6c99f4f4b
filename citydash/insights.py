"""Human-readable observations derived from the current city payloads."""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from citydash.domain import Insight, InsightSeverity, TrafficLevel

HOT_TEMP_C = 30
COOL_TEMP_C = 15
MUGGY_HUMIDITY = 80
POOR_AQI = 150
MODERATE_AQI = 100
GOOD_AQI = 50
SHORT_WAIT_MIN = 5
LONG_WAIT_MIN = 10

_HEAVY_TRAFFIC = {TrafficLevel.HIGH.value, TrafficLevel.VERY_HIGH.value}
_LIGHT_TRAFFIC = {TrafficLevel.LOW.value, TrafficLevel.VERY_LOW.value}


def _weather_insights(weather: Dict[str, Any]) -> List[Insight]:
    """Temperature and humidity observations."""
    out: List[Insight] = []
    temp = weather.get("temp")
    if temp is not None and temp > HOT_TEMP_C:
        out.append(Insight(
            type="weather", icon="🌡️", severity=InsightSeverity.WARNING,
            message=f"High temperature of {temp}°C. Stay hydrated and avoid outdoor activities during peak hours.",
        ))
    elif temp is not None and temp < COOL_TEMP_C:
        out.append(Insight(
            type="weather", icon="🧥", severity=InsightSeverity.INFO,
            message=f"Cool temperature of {temp}°C. Consider wearing warm clothing.",
        ))
    humidity = weather.get("humidity")
    if humidity is not None and humidity > MUGGY_HUMIDITY:
        out.append(Insight(
            type="weather", icon="💧", severity=InsightSeverity.INFO,
            message=f"High humidity at {humidity}%. Expect muggy conditions.",
        ))
    return out


def _air_insights(air: Dict[str, Any]) -> List[Insight]:
    """At most one observation for the AQI band."""
    aqi = air.get("aqi")
    if aqi is None:
        return []
    if aqi > POOR_AQI:
        return [Insight(
            type="airquality", icon="😷", severity=InsightSeverity.DANGER,
            message=f"Poor air quality (AQI: {aqi}). Limit outdoor activities and consider wearing a mask.",
        )]
    if aqi > MODERATE_AQI:
        return [Insight(
            type="airquality", icon="⚠️", severity=InsightSeverity.WARNING,
            message=f"Moderate air quality (AQI: {aqi}). Sensitive individuals should limit prolonged outdoor exertion.",
        )]
    if aqi <= GOOD_AQI:
        return [Insight(
            type="airquality", icon="🌱", severity=InsightSeverity.SUCCESS,
            message=f"Excellent air quality (AQI: {aqi}). Perfect conditions for outdoor activities!",
        )]
    return []


def _transport_insights(transport: Dict[str, Any]) -> List[Insight]:
    """Traffic and wait-time observations."""
    out: List[Insight] = []
    traffic = transport.get("traffic")
    if traffic in _HEAVY_TRAFFIC:
        out.append(Insight(
            type="transport", icon="🚦", severity=InsightSeverity.WARNING,
            message="Heavy traffic conditions. Consider using public transport or alternative routes.",
        ))
    elif traffic in _LIGHT_TRAFFIC:
        out.append(Insight(
            type="transport", icon="🛣️", severity=InsightSeverity.SUCCESS,
            message="Light traffic conditions. Great time for travel!",
        ))
    wait = transport.get("avgWaitTime")
    if wait is not None and wait <= SHORT_WAIT_MIN:
        out.append(Insight(
            type="transport", icon="🚌", severity=InsightSeverity.SUCCESS,
            message=f"Excellent public transport service with average wait time of {wait} minutes.",
        ))
    elif wait is not None and wait > LONG_WAIT_MIN:
        out.append(Insight(
            type="transport", icon="⏰", severity=InsightSeverity.WARNING,
            message=f"Longer wait times for public transport ({wait} minutes). Plan accordingly.",
        ))
    return out


def _time_of_day_insight(now: dt.datetime) -> Optional[Insight]:
    """Rush-hour or late-night note for the current hour, if any."""
    hour = now.hour
    if 6 <= hour <= 9:
        return Insight(
            type="general", icon="🌅", severity=InsightSeverity.INFO,
            message="Morning rush hour. Public transport frequency is increased.",
        )
    if 17 <= hour <= 20:
        return Insight(
            type="general", icon="🌆", severity=InsightSeverity.INFO,
            message="Evening rush hour. Expect higher traffic and crowded public transport.",
        )
    if hour >= 22 or hour <= 5:
        return Insight(
            type="general", icon="🌙", severity=InsightSeverity.INFO,
            message="Late night hours. Limited public transport services available.",
        )
    return None


def build_insights(
    weather: Dict[str, Any],
    air_quality: Dict[str, Any],
    transport: Dict[str, Any],
    now: dt.datetime,
) -> List[Insight]:
    """Rule-based insights from resolved weather, air-quality and transport payloads."""
    insights = [
        *_weather_insights(weather.get("weather") or {}),
        *_air_insights(air_quality.get("airQuality") or {}),
        *_transport_insights(transport.get("transport") or {}),
    ]
    timely = _time_of_day_insight(now)
    if timely is not None:
        insights.append(timely)
    if not insights:
        insights.append(Insight(
            type="general", icon="📊", severity=InsightSeverity.INFO,
            message="Conditions are unremarkable right now. Enjoy your day in the city.",
        ))
    return insights
