"""Tests for inbound parsing and outbound message builders."""

import json
import os
import sys
from datetime import date, timedelta

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from gateway import protocol
from reservations.dialogue import TurnResult
from reservations.errors import MalformedMessage
from reservations.models.booking import Booking
from reservations.models.slots import NextStep, SlotState


class TestParseInbound:
    def test_greeting_with_weather(self):
        msg = protocol.parse_inbound(json.dumps({
            "type": "greeting",
            "weatherInfo": {"temperature": 14, "description": "drizzle", "condition": "Drizzle"},
        }))
        assert isinstance(msg, protocol.GreetingRequest)
        assert msg.weather_info.temperature == 14
        assert msg.weather_info.condition == "drizzle"

    def test_user_message_with_state(self):
        msg = protocol.parse_inbound(json.dumps({
            "type": "user_message",
            "message": "table for 4",
            "conversationState": {"customerName": "Mani", "status": "collecting"},
        }))
        assert isinstance(msg, protocol.UserMessage)
        assert msg.message == "table for 4"
        assert msg.conversation_state.customer_name == "Mani"

    def test_finalize_without_data(self):
        msg = protocol.parse_inbound('{"type": "finalize_booking"}')
        assert isinstance(msg, protocol.FinalizeBooking)
        assert msg.booking_data is None

    @pytest.mark.parametrize("kind,cls", [
        ("new_booking", protocol.NewBooking),
        ("ping", protocol.Ping),
        ("pong", protocol.Pong),
    ])
    def test_control_messages(self, kind, cls):
        assert isinstance(protocol.parse_inbound(json.dumps({"type": kind})), cls)

    def test_bytes_frame(self):
        assert isinstance(protocol.parse_inbound(b'{"type": "ping"}'), protocol.Ping)

    def test_invalid_json(self):
        with pytest.raises(MalformedMessage, match="Invalid JSON"):
            protocol.parse_inbound("{nope")

    def test_not_an_object(self):
        with pytest.raises(MalformedMessage, match="JSON object"):
            protocol.parse_inbound("[1, 2]")

    def test_unknown_type(self):
        with pytest.raises(MalformedMessage, match="Unknown message type: dance"):
            protocol.parse_inbound('{"type": "dance"}')

    def test_missing_type(self):
        with pytest.raises(MalformedMessage, match="Unknown message type"):
            protocol.parse_inbound('{"message": "hi"}')

    def test_user_message_requires_text(self):
        with pytest.raises(MalformedMessage) as exc_info:
            protocol.parse_inbound('{"type": "user_message", "message": ""}')
        assert exc_info.value.details["fields"] == ["message"]

    def test_too_large(self):
        raw = json.dumps({"type": "user_message", "message": "x" * 500})
        with pytest.raises(MalformedMessage, match="too large"):
            protocol.parse_inbound(raw, max_bytes=100)


class TestOutbound:
    def test_connected(self):
        assert protocol.connected("abc") == {"type": "connected", "sessionId": "abc"}

    def test_response_when_incomplete(self):
        slots = SlotState(customer_name="Mani", number_of_guests=4)
        result = TurnResult(text="What date?", slots=slots, is_complete=False, next_step=NextStep.ASK_DATE)
        payload = protocol.turn_reply(result)
        assert payload == {
            "type": "response",
            "text": "What date?",
            "conversationState": {"customerName": "Mani", "numberOfGuests": 4},
            "nextStep": "ask_date",
            "isComplete": False,
        }

    def test_booking_ready_when_complete(self):
        slots = SlotState(
            customer_name="Mani",
            number_of_guests=4,
            booking_date="tomorrow",
            booking_time="19:00",
            seating_preference="indoor",
        )
        result = TurnResult(text="Shall I book it?", slots=slots, is_complete=True, next_step=NextStep.CONFIRM)
        payload = protocol.turn_reply(result)
        assert payload["type"] == "booking_ready"
        assert payload["message"]
        assert payload["conversationState"]["bookingTime"] == "19:00"

    def test_booking_confirmed(self):
        booking = Booking(
            customer_name="Mani",
            number_of_guests=4,
            booking_date=date.today() + timedelta(days=1),
            booking_time="19:00",
        )
        payload = protocol.booking_confirmed(booking)
        assert payload["type"] == "booking_confirmed"
        assert payload["booking"]["bookingId"] == booking.booking_id
        assert payload["booking"]["status"] == "confirmed"
        assert "Your table is confirmed!" in payload["text"]

    def test_error_with_reason(self):
        assert protocol.error("nope", "unresolved-date") == {
            "type": "error",
            "message": "nope",
            "reason": "unresolved-date",
        }
        assert protocol.error("nope") == {"type": "error", "message": "nope"}
