"""Abstract base class for weather providers.

A provider answers two questions for a location: what the forecast says
about a given day, and what the weather is right now.  Any backend
(OpenWeatherMap, a fixed table in tests, ...) implements this ABC.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from reservations.models.weather import WeatherObservation


class WeatherProvider(ABC):
    """Abstract weather backend.

    Implementations raise ``WeatherUnavailable`` when the backend cannot be
    reached or answers with something unusable.
    """

    @abstractmethod
    async def forecast_for(self, day: date, location: str) -> WeatherObservation | None:
        """Return the forecast for ``day``.

        Args:
            day: Calendar date of the booking.
            location: City name understood by the backend.

        Returns:
            The forecast closest to midday of ``day``, or None when ``day``
            lies outside the forecast horizon.
        """

    @abstractmethod
    async def current(self, location: str) -> WeatherObservation:
        """Return current conditions at ``location``."""
