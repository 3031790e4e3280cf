"""Wire protocol for the booking WebSocket.

Protocol messages:

  Client → Server:
    {"type": "greeting", "weatherInfo"?: {...}}                  → welcome
    {"type": "user_message", "message": "...",
     "conversationState"?: {...}, "weatherInfo"?: {...}}        → one turn
    {"type": "finalize_booking", "bookingData"?: {...}}          → commit
    {"type": "new_booking"}                                      → start over
    {"type": "ping"}                                             → {"type": "pong"}
    {"type": "pong"}                                             → ignored

  Server → Client:
    {"type": "connected", "sessionId": "..."}
    {"type": "greeting", "text": "...", "conversationState": {...}}
    {"type": "processing"}
    {"type": "response", "text", "conversationState", "nextStep", "isComplete"}
    {"type": "booking_ready", "text", "conversationState", "message"}
    {"type": "booking_confirmed", "text": "...", "booking": {...}}
    {"type": "error", "message": "...", "reason"?: "..."}
    {"type": "pong"}
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from reservations.dialogue import READY_MESSAGE, TurnResult
from reservations.errors import MalformedMessage
from reservations.models.booking import Booking
from reservations.models.slots import SlotState
from reservations.models.weather import WeatherObservation


# ── Inbound ──────────────────────────────────────────────────────


class _Inbound(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True, "extra": "ignore"}


class GreetingRequest(_Inbound):
    type: Literal["greeting"]
    weather_info: Optional[WeatherObservation] = None


class UserMessage(_Inbound):
    type: Literal["user_message"]
    message: str = Field(min_length=1)
    conversation_state: Optional[SlotState] = None
    # Client's current local weather; only the greeting uses it.
    weather_info: Optional[WeatherObservation] = None


class FinalizeBooking(_Inbound):
    type: Literal["finalize_booking"]
    booking_data: Optional[SlotState] = None


class NewBooking(_Inbound):
    type: Literal["new_booking"]


class Ping(_Inbound):
    type: Literal["ping"]


class Pong(_Inbound):
    type: Literal["pong"]


InboundMessage = Annotated[
    Union[GreetingRequest, UserMessage, FinalizeBooking, NewBooking, Ping, Pong],
    Field(discriminator="type"),
]
INBOUND_TYPES = frozenset(
    {"greeting", "user_message", "finalize_booking", "new_booking", "ping", "pong"}
)

_inbound_adapter: TypeAdapter = TypeAdapter(InboundMessage)


def parse_inbound(raw: Union[str, bytes], max_bytes: int = 16384) -> InboundMessage:
    """Decode and validate one client frame.

    Raises:
        MalformedMessage: oversized frame, invalid JSON, non-object payload,
            unknown ``type``, or fields that fail validation.
    """
    size = len(raw) if isinstance(raw, bytes) else len(raw.encode("utf-8"))
    if size > max_bytes:
        raise MalformedMessage("Message too large", {"size": size, "limit": max_bytes})

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedMessage("Invalid JSON") from exc

    if not isinstance(data, dict):
        raise MalformedMessage("Message must be a JSON object")

    msg_type = data.get("type")
    if msg_type not in INBOUND_TYPES:
        raise MalformedMessage(f"Unknown message type: {msg_type}", {"type": msg_type})

    try:
        return _inbound_adapter.validate_python(data)
    except ValidationError as exc:
        fields = [".".join(str(p) for p in e["loc"][1:]) for e in exc.errors()]
        raise MalformedMessage(f"Invalid {msg_type} message", {"fields": fields}) from exc


# ── Outbound ─────────────────────────────────────────────────────


def connected(session_id: str) -> dict[str, Any]:
    return {"type": "connected", "sessionId": session_id}


def greeting(text: str, slots: SlotState) -> dict[str, Any]:
    return {"type": "greeting", "text": text, "conversationState": slots.to_wire()}


def processing() -> dict[str, Any]:
    return {"type": "processing"}


def turn_reply(result: TurnResult) -> dict[str, Any]:
    """``booking_ready`` once every required slot is filled, else ``response``."""
    state = result.slots.to_wire()
    if result.is_complete:
        return {
            "type": "booking_ready",
            "text": result.text,
            "conversationState": state,
            "message": READY_MESSAGE,
        }
    return {
        "type": "response",
        "text": result.text,
        "conversationState": state,
        "nextStep": result.next_step.value,
        "isComplete": False,
    }


def booking_confirmed(booking: Booking) -> dict[str, Any]:
    return {
        "type": "booking_confirmed",
        "text": booking.confirmation_text(),
        "booking": booking.to_wire(),
    }


def error(message: str, reason: Optional[str] = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"type": "error", "message": message}
    if reason:
        payload["reason"] = reason
    return payload


def pong() -> dict[str, Any]:
    return {"type": "pong"}
