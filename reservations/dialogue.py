"""Slot-filling dialogue: one guest utterance in, one assistant reply out.

Each turn runs the same pipeline:
  1. Extract the fields stated in the utterance (model is told what is known)
  2. Merge them into the session's slots, first-write-wins
  3. Once a booking date is set, attach weather for it (advisory, never fatal)
  4. Phrase the reply from the updated slots and recent history
  5. Record both utterances in the session history

The model is a collaborator that may fail at any step; a failed extraction
counts as "nothing said" and a failed reply becomes ``FALLBACK_UTTERANCE``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional, TypeVar

from reservations.dates import resolve_date
from reservations.errors import UnresolvedDate
from reservations.llm.base import LanguageModel
from reservations.llm.prompts import build_system_context
from reservations.models.slots import MERGEABLE_SLOTS, NextStep, SlotState, SlotUpdate, next_step
from reservations.models.weather import WeatherObservation
from reservations.session import BookingSession, redact_pii
from reservations.weather_providers.service import WeatherService

log = logging.getLogger("reservations.dialogue")

SlotFields = TypeVar("SlotFields", SlotState, SlotUpdate)

FALLBACK_UTTERANCE = "I apologize, I'm having trouble processing that. Could you please repeat?"
READY_MESSAGE = "All information collected! Please confirm your booking."

GREETING_OPENING = (
    "Hello! Welcome to our restaurant booking service. "
    "I'm here to help you reserve a table."
)
GREETING_CLOSING = "May I have your name to start the reservation?"


@dataclass
class TurnResult:
    text: str
    slots: SlotState
    is_complete: bool
    next_step: NextStep
    newly_set: list[str] = field(default_factory=list)


class DialogueEngine:
    """Drives one session's conversation turn by turn.

    Args:
        language_model: Extraction and reply backend.  None means every turn
            extracts nothing and answers with the fallback.
        weather: Weather lookup used once a booking date is known.
        today: Reference-day source for date resolution.
    """

    def __init__(
        self,
        language_model: Optional[LanguageModel],
        weather: WeatherService,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._llm = language_model
        self._weather = weather
        self._today = today

    # ── Greeting ──────────────────────────────────────────────

    def greet(
        self, session: BookingSession, weather_info: Optional[WeatherObservation] = None
    ) -> str:
        """Deterministic welcome, optionally shaped by today's weather."""
        parts = [GREETING_OPENING]
        if weather_info is not None:
            temp = f"{weather_info.temperature:g}"
            description = weather_info.description or weather_info.condition
            parts.append(f"I can see it's {description} with a temperature of {temp}°C today.")
            if weather_info.temperature < 20:
                parts.append("Would you prefer a cozy indoor table?")
            elif weather_info.temperature > 25:
                parts.append("Would you like a nice outdoor table to enjoy the weather?")
        parts.append(GREETING_CLOSING)

        text = " ".join(parts)
        session.add_turn("agent", text)
        return text

    # ── Turn processing ───────────────────────────────────────

    async def process_turn(
        self,
        session: BookingSession,
        utterance: str,
        client_state: Optional[SlotState] = None,
    ) -> TurnResult:
        """Run one user turn against ``session``.

        ``client_state`` is the client's last known slot state.  It is merged
        under the same first-write-wins rule, so server-side values win.  Its
        date goes through the same check as an extracted one.
        """
        slots = session.slots
        notes: list[str] = []

        restored: list[str] = []
        if client_state is not None:
            client_state, note = self._check_date(client_state, slots)
            if note:
                notes.append(note)
            restored = slots.merge(client_state)
            if restored:
                log.debug("Session %s restored slots from client: %s", session.session_id, restored)

        update = await self._extract(utterance, slots)
        update, note = self._check_date(update, slots)
        if note:
            notes.append(note)

        newly_set = slots.merge(update)
        if newly_set:
            log.info("Session %s filled: %s", session.session_id, newly_set)
        if "customer_name" in newly_set:
            log.info("Session %s guest: %s", session.session_id, redact_pii(slots.customer_name or ""))

        date_arrived = "booking_date" in restored or "booking_date" in newly_set
        if date_arrived and slots.weather_info is None:
            await self._attach_weather(session)

        step = next_step(slots)
        reply = await self._generate(session, utterance, step, " ".join(notes) or None)
        complete = slots.is_complete()

        session.add_turn("user", utterance)
        session.add_turn("agent", reply)

        return TurnResult(
            text=reply,
            slots=slots,
            is_complete=complete,
            next_step=step,
            newly_set=[name for name in MERGEABLE_SLOTS if name in restored or name in newly_set],
        )

    # ── Internal: collaborators ───────────────────────────────

    async def _extract(self, utterance: str, slots: SlotState) -> SlotUpdate:
        if self._llm is None:
            return SlotUpdate()
        try:
            return await self._llm.extract(utterance, slots)
        except Exception as exc:
            log.warning("Extraction unavailable, treating turn as empty: %s", exc)
            return SlotUpdate()

    async def _generate(
        self,
        session: BookingSession,
        utterance: str,
        step: NextStep,
        note: Optional[str],
    ) -> str:
        if self._llm is None:
            return FALLBACK_UTTERANCE
        context = build_system_context(session.slots, step, note)
        try:
            return await self._llm.generate(context, session.recent_history(), utterance)
        except Exception as exc:
            log.warning("Generation unavailable, using fallback reply: %s", exc)
            return FALLBACK_UTTERANCE

    async def _attach_weather(self, session: BookingSession) -> None:
        slots = session.slots
        try:
            day = resolve_date(slots.booking_date, self._today())
            observation = await self._weather.observe(day)
        except Exception as exc:
            log.warning("Weather lookup skipped for session %s: %s", session.session_id, exc)
            return
        slots.attach_weather(observation)

    # ── Internal: date check ──────────────────────────────────

    def _check_date(
        self, fields: SlotFields, slots: SlotState
    ) -> tuple[SlotFields, Optional[str]]:
        """Drop a new date that is not a bookable day so the guest can restate it.

        Applies to extracted fields and to client-restored state alike.  A
        settled date is never replaced, so letting "whenever" or a past day
        in would leave the booking impossible to finalize.
        """
        if fields.booking_date is None or slots.is_set("booking_date"):
            return fields, None
        today = self._today()
        try:
            day = resolve_date(fields.booking_date, today)
        except UnresolvedDate as exc:
            log.info("Dropping unresolvable date %r", exc.expression)
            note = (
                f'The guest said "{exc.expression}" for the date, which is not a '
                "specific day. Ask them for a specific date."
            )
            return _without_date(fields), note
        if day < today:
            log.info("Dropping past date %r (%s)", fields.booking_date, day.isoformat())
            note = (
                f'The date "{fields.booking_date}" is already in the past. '
                "Ask the guest for a date from today onwards."
            )
            return _without_date(fields), note
        return fields, None


def _without_date(fields: SlotFields) -> SlotFields:
    # Client weather belongs to the dropped date.
    if isinstance(fields, SlotState):
        return fields.model_copy(update={"booking_date": None, "weather_info": None})
    return fields.model_copy(update={"booking_date": None})
