"""Commit a completed session into a persisted booking.

``finalize`` works on a copy of the session's slots with the client's
``bookingData`` merged in, so every failure leaves the session exactly as it
was.  Only a successful save resets the session.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

from pydantic import ValidationError

from reservations.dates import resolve_date, resolve_time
from reservations.errors import (
    FinalizationError,
    FinalizationReason,
    UnresolvedDate,
    UnresolvedTime,
)
from reservations.models.booking import Booking, BookingStatus
from reservations.models.slots import SLOT_LABELS, SlotState
from reservations.session import BookingSession, redact_pii
from reservations.stores.base import BookingStore
from reservations.weather_providers.service import WeatherService

log = logging.getLogger("reservations.finalizer")


def _validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "The booking details are invalid."
    return str(errors[0].get("msg", "")).removeprefix("Value error, ")


class BookingFinalizer:
    def __init__(
        self,
        store: BookingStore,
        weather: WeatherService,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._weather = weather
        self._today = today

    async def finalize(
        self, session: BookingSession, booking_data: Optional[SlotState] = None
    ) -> Booking:
        """Validate, persist, and reset.

        Raises:
            FinalizationError: with a reason of incomplete, unresolved-date,
                unresolved-time, persistence or session-closed.  The
                session's slots are untouched in every case.
        """
        candidate = (
            session.slots.merged(booking_data)
            if booking_data is not None
            else session.slots.model_copy(deep=True)
        )

        missing = candidate.missing_required()
        if missing:
            labels = ", ".join(SLOT_LABELS[name].lower() for name in missing)
            raise FinalizationError(
                FinalizationReason.INCOMPLETE,
                f"I still need a few details before booking: {labels}.",
                {"missing": missing},
            )

        try:
            day = resolve_date(candidate.booking_date, self._today())
        except UnresolvedDate as exc:
            raise FinalizationError(
                FinalizationReason.UNRESOLVED_DATE, exc.message, exc.details
            ) from exc

        try:
            at = resolve_time(candidate.booking_time)
        except UnresolvedTime as exc:
            raise FinalizationError(
                FinalizationReason.UNRESOLVED_TIME, exc.message, exc.details
            ) from exc

        weather = candidate.weather_info
        if weather is None:
            try:
                weather = await self._weather.observe(day)
            except Exception as exc:
                log.warning("Weather lookup failed during finalize: %s", exc)
                weather = None

        try:
            booking = Booking(
                customer_name=candidate.customer_name,
                number_of_guests=candidate.number_of_guests,
                booking_date=day,
                booking_time=at,
                cuisine_preference=candidate.cuisine_preference,
                special_requests=candidate.special_requests,
                seating_preference=candidate.seating_preference,
                weather_info=weather,
                status=BookingStatus.CONFIRMED,
            )
        except ValidationError as exc:
            raise FinalizationError(
                FinalizationReason.PERSISTENCE,
                _validation_message(exc),
                {"fields": [".".join(str(p) for p in e["loc"]) for e in exc.errors()]},
            ) from exc

        if session.closed:
            log.info("Session %s closed before save, booking discarded", session.session_id)
            raise FinalizationError(
                FinalizationReason.SESSION_CLOSED, "The session ended before the booking was saved."
            )

        try:
            stored = await self._store.save(booking)
        except Exception as exc:
            log.error("Booking save failed: %s", exc, exc_info=True)
            raise FinalizationError(
                FinalizationReason.PERSISTENCE,
                "Failed to save booking. Please try again.",
                {"error": str(exc)},
            ) from exc

        log.info(
            "Booking %s confirmed for %s (%d guests, %s %s)",
            stored.booking_id,
            redact_pii(stored.customer_name),
            stored.number_of_guests,
            stored.booking_date.isoformat(),
            stored.booking_time,
        )
        session.bookings_completed += 1
        session.reset()
        return stored
