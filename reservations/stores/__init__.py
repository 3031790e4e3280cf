"""Booking persistence backends."""

from .base import BookingStore
from .jsonl import JsonlBookingStore
from .memory import InMemoryBookingStore

__all__ = ["BookingStore", "InMemoryBookingStore", "JsonlBookingStore", "build_booking_store"]


def build_booking_store(settings) -> BookingStore:
    """Store selected by ``BOOKING_STORE``."""
    if settings.booking_store == "jsonl":
        return JsonlBookingStore(settings.bookings_path)
    return InMemoryBookingStore()
