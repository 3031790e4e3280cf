"""Per-connection booking session and the registry that owns them.

Each WebSocket connection gets a ``BookingSession`` that holds:
  1. The slot state of the booking under construction
  2. A bounded turn history used as model context
  3. A closed flag, set once the connection is gone

Sessions live in a ``SessionStore`` created per application, so tests and
multiple apps in one process never share state.
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from reservations.models.slots import SlotState

log = logging.getLogger("reservations.session")

MAX_HISTORY = 20


def redact_pii(value: str) -> str:
    """Mask PII for logging; show first 3 and last 2 chars only."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]


class Turn(BaseModel):
    role: Literal["user", "agent"]
    text: str
    timestamp: float = Field(default_factory=time.time)


class BookingSession:
    """One guest's booking conversation.

    Typical lifecycle::

        session = store.create()
        session.add_turn("agent", greeting)
        session.slots.merge(update)          # every user turn
        ...
        session.reset()                      # after a booking is confirmed
        store.discard(session.session_id)    # on disconnect
    """

    def __init__(self, session_id: Optional[str] = None) -> None:
        self.session_id: str = session_id or secrets.token_urlsafe(18)
        self.connected_at: float = time.time()
        self.last_activity: float = self.connected_at
        self.slots = SlotState()
        self.turn_history: list[Turn] = []
        self.bookings_completed = 0
        self._closed = False

    # ── Public API ────────────────────────────────────────────

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def add_turn(self, role: str, text: str) -> Turn:
        """Append a turn, dropping the oldest beyond MAX_HISTORY."""
        turn = Turn(role=role, text=text)
        self.turn_history.append(turn)
        if len(self.turn_history) > MAX_HISTORY:
            del self.turn_history[: len(self.turn_history) - MAX_HISTORY]
        self.last_activity = turn.timestamp
        return turn

    def recent_history(self, limit: int = MAX_HISTORY) -> list[Turn]:
        return list(self.turn_history[-limit:])

    def reset(self) -> None:
        """Start a fresh booking on the same connection."""
        self.slots = SlotState()
        self.turn_history = []
        log.info("Session %s reset for a new booking", self.session_id)

    def to_dict(self, detail: bool = False) -> dict[str, Any]:
        """Serialize session state for the admin API.

        With detail=False: summary suitable for listing.
        With detail=True: adds collected slots and recent turns.
        """
        d: dict[str, Any] = {
            "session_id": self.session_id,
            "connected_at": self.connected_at,
            "last_activity": self.last_activity,
            "closed": self._closed,
            "is_complete": self.slots.is_complete(),
            "missing": self.slots.missing(),
            "turn_count": len(self.turn_history),
            "bookings_completed": self.bookings_completed,
        }
        if detail:
            slots = self.slots.to_wire()
            if "customerName" in slots:
                slots["customerName"] = redact_pii(slots["customerName"])
            d["slots"] = slots
            d["recent_turns"] = [t.model_dump() for t in self.turn_history[-6:]]
        return d


# ── Session registry ─────────────────────────────────────────────


class SessionStore:
    """Registry of live sessions, keyed by session ID."""

    def __init__(self) -> None:
        self._sessions: dict[str, BookingSession] = {}

    def create(self) -> BookingSession:
        """Create and register a session with a fresh unique ID."""
        session = BookingSession()
        while session.session_id in self._sessions:
            session = BookingSession()
        self._sessions[session.session_id] = session
        log.info("Session registered: %s", session.session_id)
        return session

    def get(self, session_id: str) -> BookingSession | None:
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> None:
        """Close and remove a session.  Unknown IDs are ignored."""
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.close()
            log.info("Session unregistered: %s", session_id)

    def active(self) -> dict[str, BookingSession]:
        return dict(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
