"""Abstract base class for booking stores."""

from __future__ import annotations

from abc import ABC, abstractmethod

from reservations.models.booking import Booking


class BookingStore(ABC):
    """Durable home for confirmed bookings.

    Implementations raise ``StoreError`` when a record cannot be persisted.
    """

    @abstractmethod
    async def save(self, booking: Booking) -> Booking:
        """Persist ``booking`` and return the stored record."""

    @abstractmethod
    async def get(self, booking_id: str) -> Booking | None:
        """Look up a booking by ID, or None if unknown."""

    @abstractmethod
    async def count(self) -> int:
        """Number of stored bookings."""
