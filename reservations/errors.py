"""Exception taxonomy for the booking session engine.

Advisory failures (weather, model phrasing) are raised by collaborators and
absorbed by the engine.  Failures that would corrupt a booking record
(unresolvable dates, store errors) surface to the caller as a
``FinalizationError`` carrying a machine-readable reason.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ReservationError(Exception):
    """Base exception for all booking engine errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# ── Inbound protocol ─────────────────────────────────────────────


class MalformedMessage(ReservationError):
    """Inbound message could not be parsed or has an unknown type."""


# ── Collaborators ────────────────────────────────────────────────


class LanguageModelUnavailable(ReservationError):
    """The language model could not produce a usable result."""


class ExtractionFailure(LanguageModelUnavailable):
    """Slot extraction failed (network, quota, or unparsable output)."""


class GenerationFailure(LanguageModelUnavailable):
    """Reply generation failed."""


class WeatherUnavailable(ReservationError):
    """The weather provider could not be reached or returned garbage."""


class StoreError(ReservationError):
    """The booking store rejected or failed to persist a record."""


# ── User-facing resolution errors ────────────────────────────────


class UnresolvedDate(ReservationError):
    """A date expression could not be turned into a calendar date."""

    def __init__(self, expression: Any) -> None:
        self.expression = "" if expression is None else str(expression)
        super().__init__(
            f'I couldn\'t understand the date "{self.expression}". '
            'Please try something like "December 5" or "tomorrow".',
            {"expression": self.expression},
        )


class UnresolvedTime(ReservationError):
    """A time expression could not be turned into HH:MM."""

    def __init__(self, expression: Any) -> None:
        self.expression = "" if expression is None else str(expression)
        super().__init__(
            f'I couldn\'t understand the time "{self.expression}". '
            'Please try something like "7 pm" or "19:30".',
            {"expression": self.expression},
        )


class FinalizationReason(str, Enum):
    UNRESOLVED_DATE = "unresolved-date"
    UNRESOLVED_TIME = "unresolved-time"
    INCOMPLETE = "incomplete"
    PERSISTENCE = "persistence"
    SESSION_CLOSED = "session-closed"


class FinalizationError(ReservationError):
    """The finalize step refused or failed to commit a booking."""

    def __init__(
        self,
        reason: FinalizationReason,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.reason = reason
        super().__init__(message, details)
