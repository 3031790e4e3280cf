"""Pydantic model for a persisted restaurant booking."""

from __future__ import annotations

import secrets
import time
from datetime import date, datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from reservations.models.weather import WeatherObservation

CUISINES = ("Italian", "Chinese", "Indian", "Mexican", "Japanese", "Continental", "Any")

_TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


def new_booking_id() -> str:
    """``BK-<epoch millis>-<9 random chars>``."""
    return f"BK-{int(time.time() * 1000)}-{secrets.token_hex(5)[:9]}"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class Booking(BaseModel):
    """A confirmed table reservation, as handed to the booking store."""

    booking_id: str = Field(default_factory=new_booking_id)
    customer_name: str = Field(min_length=1)
    number_of_guests: int = Field(ge=1, le=20)
    booking_date: date
    booking_time: str = Field(pattern=_TIME_PATTERN)  # HH:MM, 24-hour
    cuisine_preference: str = "Any"
    special_requests: str = ""
    seating_preference: Literal["indoor", "outdoor", "any"] = "any"
    weather_info: Optional[WeatherObservation] = None
    status: BookingStatus = BookingStatus.CONFIRMED
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @field_validator("customer_name", "special_requests", mode="before")
    @classmethod
    def _strip(cls, value):
        return "" if value is None else str(value).strip()

    @field_validator("cuisine_preference", mode="before")
    @classmethod
    def _normalize_cuisine(cls, value):
        text = "" if value is None else str(value).strip().lower()
        for cuisine in CUISINES:
            if cuisine.lower() == text:
                return cuisine
        return "Any"

    @field_validator("seating_preference", mode="before")
    @classmethod
    def _lower_seating(cls, value):
        return "any" if value is None else str(value).strip().lower()

    @field_validator("booking_date")
    @classmethod
    def _not_in_past(cls, value: date, info: ValidationInfo) -> date:
        if info.context and info.context.get("stored"):
            return value
        if value < date.today():
            raise ValueError(
                "Booking date cannot be in the past. Please choose today or a future date."
            )
        return value

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def confirmation_text(self) -> str:
        """Summary read back to the guest once the booking is stored."""
        nice_date = self.booking_date.strftime("%A, %B %d, %Y").replace(" 0", " ")
        lines = [
            "Your table is confirmed!",
            "",
            f"Booking ID: {self.booking_id}",
            f"Name: {self.customer_name}",
            f"Guests: {self.number_of_guests}",
            f"Date: {nice_date}",
            f"Time: {self.booking_time}",
            f"Cuisine: {self.cuisine_preference}",
            f"Seating: {self.seating_preference.upper()}",
        ]
        if self.special_requests:
            lines.append(f"Special requests: {self.special_requests}")
        lines += ["", "We look forward to seeing you!"]
        return "\n".join(lines)
