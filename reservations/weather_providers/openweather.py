"""OpenWeatherMap provider.

Uses the free 2.5 API: ``/forecast`` (5 days in 3-hour steps) for booking
dates inside the horizon and ``/weather`` for current conditions.  The key
is read from the ``WEATHER_API_KEY`` setting.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Any

import aiohttp

from reservations.errors import WeatherUnavailable
from reservations.models.weather import WeatherObservation

from .base import WeatherProvider

log = logging.getLogger("reservations.weather")

DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5"


class OpenWeatherProvider(WeatherProvider):
    """WeatherProvider backed by the OpenWeatherMap REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 8.0,
        match_hours: float = 12.0,
    ) -> None:
        if not api_key:
            raise ValueError("OpenWeatherMap API key must be provided via WEATHER_API_KEY.")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._match_seconds = match_hours * 3600

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get(self, path: str, params: dict[str, Any]) -> dict:
        url = f"{self._base_url}/{path}"
        query = {**params, "appid": self._api_key, "units": "metric"}
        try:
            timeout = aiohttp.ClientTimeout(total=self._timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=query) as resp:
                    if resp.status != 200:
                        body = await resp.text()
                        log.error(
                            "OpenWeatherMap /%s failed (%d): %s", path, resp.status, body[:200]
                        )
                        raise WeatherUnavailable(
                            f"Weather request failed with HTTP {resp.status}",
                            {"path": path, "status": resp.status},
                        )
                    return await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise WeatherUnavailable(
                "Weather service unreachable", {"path": path, "error": str(exc)}
            ) from exc

    @staticmethod
    def _parse_entry(entry: dict) -> WeatherObservation:
        """Convert one OpenWeatherMap record (forecast or current) to an observation."""
        try:
            weather = (entry.get("weather") or [{}])[0]
            main = entry["main"]
            observed_at = entry.get("dt_txt")
            if not observed_at and entry.get("dt") is not None:
                observed_at = datetime.fromtimestamp(entry["dt"], tz=timezone.utc).isoformat()
            return WeatherObservation(
                condition=weather.get("main"),
                temperature=round(main["temp"]),
                description=weather.get("description", ""),
                humidity=main.get("humidity"),
                wind_speed=(entry.get("wind") or {}).get("speed"),
                icon=weather.get("icon"),
                observed_at=observed_at,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise WeatherUnavailable(
                "Unexpected weather payload", {"error": str(exc)}
            ) from exc

    # ------------------------------------------------------------------
    # WeatherProvider interface
    # ------------------------------------------------------------------

    async def forecast_for(self, day: date, location: str) -> WeatherObservation | None:
        """Pick the 3-hour forecast entry closest to midday UTC of ``day``."""
        data = await self._get("forecast", {"q": location, "cnt": 40})
        entries = [e for e in data.get("list") or [] if isinstance(e, dict) and "dt" in e]
        if not entries:
            return None

        target = datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc).timestamp()
        closest = min(entries, key=lambda e: abs(e["dt"] - target))
        if abs(closest["dt"] - target) > self._match_seconds:
            log.debug("%s is outside the forecast horizon for %s", day, location)
            return None
        return self._parse_entry(closest)

    async def current(self, location: str) -> WeatherObservation:
        data = await self._get("weather", {"q": location})
        return self._parse_entry(data)
