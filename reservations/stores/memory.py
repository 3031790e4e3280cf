"""Process-local booking store.  Bookings are lost on restart."""

from __future__ import annotations

import logging

from reservations.errors import StoreError
from reservations.models.booking import Booking

from .base import BookingStore

log = logging.getLogger("reservations.stores")


class InMemoryBookingStore(BookingStore):
    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}

    async def save(self, booking: Booking) -> Booking:
        if booking.booking_id in self._bookings:
            raise StoreError(
                "Duplicate booking ID", {"booking_id": booking.booking_id}
            )
        self._bookings[booking.booking_id] = booking
        log.info("Booking stored in memory: %s", booking.booking_id)
        return booking

    async def get(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    async def count(self) -> int:
        return len(self._bookings)
