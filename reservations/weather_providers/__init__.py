"""Weather providers and the service that degrades gracefully over them."""

from __future__ import annotations

import logging

from .base import WeatherProvider
from .openweather import OpenWeatherProvider
from .service import WeatherService

log = logging.getLogger("reservations.weather")

__all__ = ["OpenWeatherProvider", "WeatherProvider", "WeatherService", "build_weather_service"]


def build_weather_service(settings) -> WeatherService:
    """WeatherService for the configured provider; no key means default weather only."""
    provider = None
    if settings.weather_api_key:
        provider = OpenWeatherProvider(
            settings.weather_api_key,
            base_url=settings.weather_base_url,
            timeout=settings.weather_timeout,
            match_hours=settings.forecast_match_hours,
        )
    else:
        log.info("No weather API key configured, using default weather")
    return WeatherService(provider, location=settings.default_location)
