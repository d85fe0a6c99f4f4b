"""HTTP API for the city dashboard: weather, air quality, transport and insights."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from citydash.dashboard_service import DashboardService
from citydash.domain import (
    AirQualityResponse,
    ErrorResponse,
    InsightsResponse,
    TransportResponse,
    WeatherResponse,
)
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="citydash/api")

router = APIRouter()

_CITY_REQUIRED = {400: {"model": ErrorResponse, "description": "City is required"}}


def get_dashboard(request: Request) -> DashboardService:
    """Return the DashboardService created at application startup."""
    return request.app.state.dashboard


@router.get("/weather", response_model=WeatherResponse, responses=_CITY_REQUIRED)
def get_weather(
    city: Optional[str] = Query(default=None),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Current weather and six-hour temperature outlook for a city."""
    resolved = dashboard.weather_for(city)
    logger.debug(f"Weather for {city!r}: source={resolved.source.value} cache_hit={resolved.cache_hit}")
    return resolved.payload


@router.get("/airquality", response_model=AirQualityResponse, responses=_CITY_REQUIRED)
def get_air_quality(
    city: Optional[str] = Query(default=None),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Current air quality and six-hour AQI outlook for a city."""
    resolved = dashboard.air_quality_for(city)
    logger.debug(f"Air quality for {city!r}: source={resolved.source.value} cache_hit={resolved.cache_hit}")
    return resolved.payload


@router.get("/transport", response_model=TransportResponse, responses=_CITY_REQUIRED)
def get_transport(
    city: Optional[str] = Query(default=None),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Current transport conditions and six-hour traffic outlook for a city."""
    resolved = dashboard.transport_for(city)
    logger.debug(f"Transport for {city!r}: source={resolved.source.value} cache_hit={resolved.cache_hit}")
    return resolved.payload


@router.get("/insights", response_model=InsightsResponse, responses=_CITY_REQUIRED)
def get_insights(
    city: Optional[str] = Query(default=None),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Rule-based observations across weather, air quality and transport."""
    return dashboard.insights_for(city)
