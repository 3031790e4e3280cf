"""Data models for the booking engine."""

from .booking import Booking, BookingStatus
from .slots import NextStep, SlotState, SlotUpdate, next_step
from .weather import Recommendation, WeatherObservation

__all__ = [
    "Booking",
    "BookingStatus",
    "NextStep",
    "Recommendation",
    "SlotState",
    "SlotUpdate",
    "WeatherObservation",
    "next_step",
]
