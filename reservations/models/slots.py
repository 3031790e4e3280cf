"""Slot state for a booking under construction.

``SlotUpdate`` is the typed partial produced by extraction; ``SlotState`` is
the per-session record it is merged into.  Merging is first-write-wins: once
a slot holds a non-empty value, later extractions in the same session never
replace it.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

from reservations.models.weather import WeatherObservation

# Order in which the assistant asks for things.
ORDERED_SLOTS: tuple[str, ...] = (
    "customer_name",
    "number_of_guests",
    "booking_date",
    "booking_time",
    "cuisine_preference",
    "seating_preference",
)

REQUIRED_SLOTS: tuple[str, ...] = (
    "customer_name",
    "number_of_guests",
    "booking_date",
    "booking_time",
    "seating_preference",
)

# Every slot extraction may fill, in merge order.
MERGEABLE_SLOTS: tuple[str, ...] = ORDERED_SLOTS + ("special_requests",)

SLOT_LABELS: dict[str, str] = {
    "customer_name": "Name",
    "number_of_guests": "Guests",
    "booking_date": "Date",
    "booking_time": "Time",
    "cuisine_preference": "Cuisine",
    "seating_preference": "Seating",
    "special_requests": "Special requests",
}

_SEATING_SYNONYMS = {
    "indoor": "indoor",
    "indoors": "indoor",
    "inside": "indoor",
    "outdoor": "outdoor",
    "outdoors": "outdoor",
    "outside": "outdoor",
    "patio": "outdoor",
    "terrace": "outdoor",
    "garden": "outdoor",
    "any": "any",
    "either": "any",
    "no preference": "any",
    "anywhere": "any",
}


class NextStep(str, Enum):
    ASK_NAME = "ask_name"
    ASK_GUESTS = "ask_guests"
    ASK_DATE = "ask_date"
    ASK_TIME = "ask_time"
    ASK_CUISINE = "ask_cuisine"
    ASK_SEATING = "ask_seating"
    CONFIRM = "confirm"


_STEP_FOR_SLOT: dict[str, NextStep] = {
    "customer_name": NextStep.ASK_NAME,
    "number_of_guests": NextStep.ASK_GUESTS,
    "booking_date": NextStep.ASK_DATE,
    "booking_time": NextStep.ASK_TIME,
    "cuisine_preference": NextStep.ASK_CUISINE,
    "seating_preference": NextStep.ASK_SEATING,
}


def is_empty(value: object) -> bool:
    """A slot is empty when unset, blank, or a zero guest count."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, int) and not isinstance(value, bool):
        return value <= 0
    return False


class _SlotFields(BaseModel):
    """Fields and normalisation shared by updates and state."""

    customer_name: Optional[str] = None
    number_of_guests: Optional[int] = None
    booking_date: Optional[str] = None   # natural language until finalize
    booking_time: Optional[str] = None
    cuisine_preference: Optional[str] = None
    seating_preference: Optional[str] = None
    special_requests: Optional[str] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @field_validator(
        "customer_name",
        "booking_date",
        "booking_time",
        "cuisine_preference",
        "special_requests",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value):
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("number_of_guests", mode="before")
    @classmethod
    def _coerce_guests(cls, value):
        if value is None or isinstance(value, bool):
            return None
        try:
            count = int(str(value).strip())
        except (TypeError, ValueError):
            return None
        return count if count > 0 else None

    @field_validator("seating_preference", mode="before")
    @classmethod
    def _normalize_seating(cls, value):
        if value is None:
            return None
        text = str(value).strip().lower()
        if not text:
            return None
        return _SEATING_SYNONYMS.get(text, text)


class SlotUpdate(_SlotFields):
    """Fields extracted from one utterance.  ``None`` means "not mentioned"."""

    def provided(self) -> dict[str, object]:
        return {
            name: getattr(self, name)
            for name in MERGEABLE_SLOTS
            if not is_empty(getattr(self, name))
        }


class SlotState(_SlotFields):
    """The booking under construction for one session."""

    weather_info: Optional[WeatherObservation] = None

    # ── Merge ───────────────────────────────────────────────────

    def merge(self, update: Union[SlotUpdate, "SlotState"]) -> list[str]:
        """Fill empty slots from ``update``.  Returns the slot names newly set.

        Slots that already hold a value are left alone (first-write-wins).
        When ``update`` is another SlotState its weather is adopted only if
        none is attached yet.
        """
        newly_set: list[str] = []
        for name in MERGEABLE_SLOTS:
            incoming = getattr(update, name, None)
            if is_empty(incoming) or not is_empty(getattr(self, name)):
                continue
            setattr(self, name, incoming)
            newly_set.append(name)

        incoming_weather = getattr(update, "weather_info", None)
        if incoming_weather is not None:
            self.attach_weather(incoming_weather)
        return newly_set

    def merged(self, update: Union[SlotUpdate, "SlotState"]) -> "SlotState":
        """Copy of this state with ``update`` merged in; self is untouched."""
        candidate = self.model_copy(deep=True)
        candidate.merge(update)
        return candidate

    def attach_weather(self, observation: WeatherObservation) -> bool:
        """Attach weather once.  Returns False if weather was already present."""
        if self.weather_info is not None:
            return False
        self.weather_info = observation
        return True

    # ── Queries ─────────────────────────────────────────────────

    def is_set(self, name: str) -> bool:
        return not is_empty(getattr(self, name))

    def known(self) -> dict[str, object]:
        return {name: getattr(self, name) for name in MERGEABLE_SLOTS if self.is_set(name)}

    def missing(self) -> list[str]:
        return [name for name in ORDERED_SLOTS if not self.is_set(name)]

    def missing_required(self) -> list[str]:
        return [name for name in REQUIRED_SLOTS if not self.is_set(name)]

    def is_complete(self) -> bool:
        return not self.missing_required()

    def to_wire(self) -> dict:
        """camelCase JSON for the client, unset slots omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def next_step(slots: SlotState) -> NextStep:
    """First unmet slot in asking order, or CONFIRM once the booking is complete."""
    if slots.is_complete():
        return NextStep.CONFIRM
    for name in ORDERED_SLOTS:
        if not slots.is_set(name):
            return _STEP_FOR_SLOT[name]
    return NextStep.CONFIRM
