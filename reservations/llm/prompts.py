"""Prompt text for slot extraction and reply generation."""

from __future__ import annotations

from typing import Optional

from langchain_core.prompts import ChatPromptTemplate

from reservations.models.booking import CUISINES
from reservations.models.slots import SLOT_LABELS, NextStep, SlotState

ASSISTANT_PERSONA = """You are a friendly and professional restaurant booking assistant.
You help guests book a table through natural voice conversation.

Collect the booking details in this order: name, number of guests, date,
time, cuisine preference ({cuisines}), then seating (indoor or outdoor).
Special requests such as birthdays or dietary needs are welcome at any point.

RULES:
- Be conversational and natural, never robotic.
- Ask ONE question at a time.
- If the guest gives several details at once, acknowledge all of them.
- Never ask again for a detail that is already collected.
- Once weather is known, use its recommendation when asking about seating.
- Keep replies to two or three short sentences; they are read aloud.
"""

_STEP_HINTS = {
    NextStep.ASK_NAME: "Ask for the guest's name.",
    NextStep.ASK_GUESTS: "Ask how many guests will be dining.",
    NextStep.ASK_DATE: "Ask which date they would like to book.",
    NextStep.ASK_TIME: "Ask what time they would like the table.",
    NextStep.ASK_CUISINE: "Ask if they have a cuisine preference.",
    NextStep.ASK_SEATING: "Ask whether they prefer indoor or outdoor seating.",
    NextStep.CONFIRM: (
        "All details are collected. Read them back briefly and ask the guest "
        "to confirm the booking."
    ),
}


def describe_slots(slots: SlotState) -> str:
    known = slots.known()
    if not known:
        return "None yet"
    return ", ".join(f"{SLOT_LABELS[name]}: {value}" for name, value in known.items())


def describe_weather(slots: SlotState) -> str:
    weather = slots.weather_info
    if weather is None:
        return "Not yet fetched"
    text = f"{weather.description or weather.condition}, {weather.temperature:g}°C."
    if weather.recommendation is not None:
        text += f" Recommendation: {weather.recommendation.message}"
    return text


def build_system_context(
    slots: SlotState, step: NextStep, note: Optional[str] = None
) -> str:
    """System prompt for one reply: persona, collected details, and what to ask next."""
    parts = [
        ASSISTANT_PERSONA.format(cuisines=", ".join(CUISINES)),
        f"COLLECTED INFO: {describe_slots(slots)}",
        f"WEATHER INFO: {describe_weather(slots)}",
        f"NEXT STEP: {_STEP_HINTS[step]}",
    ]
    if note:
        parts.append(f"IMPORTANT: {note}")
    return "\n".join(parts)


EXTRACTION_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", """
        You extract restaurant booking details from one thing a guest said.

        Only fill fields the guest actually stated in this message. Leave
        everything else null. Never invent values.

        Still missing: {missing}
        Already known: {known}
        Today is {today}.

        Field guidance:
        - customerName: the guest's own name only.
        - numberOfGuests: a whole number ("table for two" = 2).
        - bookingDate: copy the date words as said ("tomorrow", "December 5th",
          "next Friday"). Do not convert them.
        - bookingTime: 24-hour HH:MM when a clock time is given ("7pm" = "19:00").
        - cuisinePreference: one of {cuisines}.
        - seatingPreference: "indoor", "outdoor" or "any".
        - specialRequests: occasions, dietary needs, accessibility.

        {format_instructions}
        """),
        ("human", "Guest said: {utterance}"),
    ]
)
