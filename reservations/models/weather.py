"""Pydantic models for weather observations and seating advice."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel


class Recommendation(BaseModel):
    """Seating suggestion derived from a weather observation."""

    seating: Literal["indoor", "outdoor"]
    message: str


class WeatherObservation(BaseModel):
    """Weather for a booking date, or current conditions as a stand-in."""

    condition: str = "unknown"  # rain, clear, clouds, snow, ...
    temperature: float          # °C
    description: str = ""
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    icon: Optional[str] = None
    observed_at: Optional[str] = None
    recommendation: Optional[Recommendation] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @field_validator("condition", mode="before")
    @classmethod
    def _normalize_condition(cls, value):
        if value is None:
            return "unknown"
        return str(value).strip().lower() or "unknown"

    @field_validator("recommendation", mode="before")
    @classmethod
    def _accept_bare_advice(cls, value):
        # Older clients echo the fallback advice back as a plain string.
        if isinstance(value, str):
            return {"seating": "indoor", "message": value}
        return value

    @classmethod
    def unavailable(cls) -> "WeatherObservation":
        """Stand-in used when the provider cannot be reached."""
        return cls(
            condition="unknown",
            temperature=25,
            description="Weather data unavailable",
            recommendation=Recommendation(
                seating="indoor",
                message="Indoor seating recommended as a safe choice.",
            ),
        )
