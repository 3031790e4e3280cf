"""Natural-language date and time resolution for bookings.

``resolve_date`` always picks the nearest date on or after the reference
day: "December 5th" said on December 10 means next year's December 5, and
"January 10th" said in December means the coming January.  The year is only
taken literally when the guest states one.

Examples (reference = Wednesday 2025-12-03)::

    "today"          → 2025-12-03
    "tomorrow"       → 2025-12-04
    "December 5th"   → 2025-12-05
    "5th December"   → 2025-12-05
    "January 10th"   → 2026-01-10
    "friday"         → 2025-12-05
    "next wednesday" → 2025-12-10
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

from dateutil import parser

from reservations.errors import UnresolvedDate, UnresolvedTime

log = logging.getLogger("reservations.dates")

_ORDINAL = re.compile(r"\b(\d+)(st|nd|rd|th)\b", re.IGNORECASE)
_EXPLICIT_YEAR = re.compile(r"\b(19|20)\d{2}\b")

_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
_WEEKDAY_EXPR = re.compile(r"^(?:(this|next|on)\s+)?(" + "|".join(_WEEKDAYS) + r")$")

_TIME_EXPR = re.compile(
    r"^(?:at\s+)?(\d{1,2})(?:[:.h](\d{2}))?\s*(?:([ap])\.?\s*m\.?)?(?:\s*o'?clock)?$"
)
_NAMED_TIMES = {
    "noon": "12:00",
    "midday": "12:00",
    "midnight": "00:00",
}


def _as_date(reference: Any) -> date:
    if reference is None:
        return date.today()
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def _parse(text: str, year: int) -> Optional[date]:
    """Parse ``text`` with missing fields defaulted to Jan 1 of ``year``."""
    try:
        return parser.parse(text, default=datetime(year, 1, 1)).date()
    except (ValueError, OverflowError):
        return None


def _resolve_weekday(lower: str, today: date) -> Optional[date]:
    match = _WEEKDAY_EXPR.match(lower)
    if not match:
        return None
    qualifier, name = match.groups()
    ahead = (_WEEKDAYS.index(name) - today.weekday()) % 7
    if qualifier == "next" and ahead == 0:
        ahead = 7
    return today + timedelta(days=ahead)


def resolve_date(expression: Any, reference: Any = None) -> date:
    """Turn a date expression into a calendar date no earlier than ``reference``.

    Args:
        expression: Free text ("tomorrow", "Dec 5th", "2026-01-10") or a
            date/datetime, which is returned as a date unchanged.
        reference: Day the guest is speaking on.  Defaults to today.

    Raises:
        UnresolvedDate: carrying the original input, when nothing parses.
    """
    today = _as_date(reference)

    if isinstance(expression, datetime):
        return expression.date()
    if isinstance(expression, date):
        return expression

    text = "" if expression is None else str(expression).strip()
    if not text:
        raise UnresolvedDate(expression)

    lower = text.lower()
    if lower in ("today", "tonight"):
        return today
    if lower == "tomorrow":
        return today + timedelta(days=1)

    weekday = _resolve_weekday(lower, today)
    if weekday is not None:
        return weekday

    cleaned = _ORDINAL.sub(r"\1", text).strip()

    if _EXPLICIT_YEAR.search(cleaned):
        parsed = _parse(cleaned, today.year)
        if parsed is None:
            log.warning("Date parsing failed for: %r", text)
            raise UnresolvedDate(expression)
        return parsed

    year = today.year
    parsed = _parse(cleaned, year)
    if parsed is not None and parsed < today:
        year += 1
        parsed = _parse(cleaned, year)

    if parsed is None:
        parsed = _parse(f"{cleaned}, {year}", year)

    if parsed is None or parsed < today:
        log.warning("Date parsing failed for: %r", text)
        raise UnresolvedDate(expression)
    return parsed


def resolve_time(expression: Any) -> str:
    """Normalise "7 pm", "7:30pm", "19:00", "noon" to 24-hour ``HH:MM``.

    Raises:
        UnresolvedTime: when the expression is not a recognisable clock time.
    """
    text = "" if expression is None else str(expression).strip().lower()
    if not text:
        raise UnresolvedTime(expression)
    if text in _NAMED_TIMES:
        return _NAMED_TIMES[text]

    match = _TIME_EXPR.match(text)
    if not match:
        raise UnresolvedTime(expression)

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    meridiem = match.group(3)

    if minute > 59:
        raise UnresolvedTime(expression)
    if meridiem:
        if not 1 <= hour <= 12:
            raise UnresolvedTime(expression)
        if meridiem == "p" and hour != 12:
            hour += 12
        elif meridiem == "a" and hour == 12:
            hour = 0
    elif hour > 23:
        raise UnresolvedTime(expression)

    return f"{hour:02d}:{minute:02d}"
