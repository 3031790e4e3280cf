"""Weather lookup for a booking date, with graceful degradation.

``observe`` never raises ``WeatherUnavailable``: if the provider is missing or
failing, the booking still gets the default "unavailable" observation with an
indoor recommendation.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from reservations.errors import WeatherUnavailable
from reservations.models.weather import WeatherObservation
from reservations.recommendation import with_recommendation

from .base import WeatherProvider

log = logging.getLogger("reservations.weather")


class WeatherService:
    def __init__(self, provider: Optional[WeatherProvider], location: str = "London") -> None:
        self._provider = provider
        self._location = location

    @property
    def location(self) -> str:
        return self._location

    @property
    def enabled(self) -> bool:
        return self._provider is not None

    async def observe(self, day: date, location: Optional[str] = None) -> WeatherObservation:
        """Forecast for ``day``, else current conditions, else the default observation."""
        if self._provider is None:
            return WeatherObservation.unavailable()

        where = location or self._location
        try:
            observation = await self._provider.forecast_for(day, where)
            if observation is None:
                log.info("No forecast for %s in %s, using current conditions", day, where)
                observation = await self._provider.current(where)
        except WeatherUnavailable as exc:
            log.warning("Weather unavailable for %s in %s: %s", day, where, exc)
            return WeatherObservation.unavailable()

        if observation.recommendation is None:
            observation = with_recommendation(observation)
        return observation
