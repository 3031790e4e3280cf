"""Tests for natural-language date and time resolution."""

import os
import sys
from datetime import date, datetime

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from reservations.dates import resolve_date, resolve_time
from reservations.errors import UnresolvedDate, UnresolvedTime

# A Wednesday.
REF = date(2025, 12, 3)


class TestResolveDate:
    def test_today(self):
        assert resolve_date("today", REF) == REF

    def test_tonight(self):
        assert resolve_date("Tonight", REF) == REF

    def test_tomorrow(self):
        assert resolve_date("tomorrow", REF) == date(2025, 12, 4)

    def test_past_day_rolls_to_next_year(self):
        assert resolve_date("December 5th", date(2025, 12, 10)) == date(2026, 12, 5)

    def test_january_from_december(self):
        assert resolve_date("January 10th", REF) == date(2026, 1, 10)

    def test_later_this_year(self):
        assert resolve_date("December 5th", REF) == date(2025, 12, 5)

    def test_same_day_is_not_rolled(self):
        assert resolve_date("December 3rd", REF) == REF

    @pytest.mark.parametrize("text", ["5th December", "Dec 5", "december 5TH", "12/05"])
    def test_formats(self, text):
        assert resolve_date(text, REF) == date(2025, 12, 5)

    def test_explicit_year_taken_literally(self):
        assert resolve_date("2026-01-10", REF) == date(2026, 1, 10)
        assert resolve_date("March 2nd, 2027", REF) == date(2027, 3, 2)

    def test_bare_weekday(self):
        assert resolve_date("friday", REF) == date(2025, 12, 5)
        assert resolve_date("wednesday", REF) == REF

    def test_next_weekday_is_strictly_after(self):
        assert resolve_date("next wednesday", REF) == date(2025, 12, 10)
        assert resolve_date("next friday", REF) == date(2025, 12, 5)

    def test_reference_datetime(self):
        assert resolve_date("tomorrow", datetime(2025, 12, 3, 23, 30)) == date(2025, 12, 4)

    def test_date_passthrough(self):
        assert resolve_date(date(2026, 2, 1), REF) == date(2026, 2, 1)

    @pytest.mark.parametrize("text", ["whenever", "", "   ", None, "next week sometime"])
    def test_unresolvable(self, text):
        with pytest.raises(UnresolvedDate):
            resolve_date(text, REF)

    def test_unresolved_carries_input(self):
        with pytest.raises(UnresolvedDate) as exc_info:
            resolve_date("whenever", REF)
        assert exc_info.value.expression == "whenever"
        assert "whenever" in exc_info.value.message

    def test_defaults_to_today(self):
        assert resolve_date("today") == date.today()


class TestResolveTime:
    @pytest.mark.parametrize("text,expected", [
        ("7 pm", "19:00"),
        ("7pm", "19:00"),
        ("7:30pm", "19:30"),
        ("7:30 p.m.", "19:30"),
        ("19:00", "19:00"),
        ("9:05", "09:05"),
        ("noon", "12:00"),
        ("12 pm", "12:00"),
        ("12 am", "00:00"),
        ("at 8pm", "20:00"),
        ("8 o'clock", "08:00"),
        ("18", "18:00"),
    ])
    def test_times(self, text, expected):
        assert resolve_time(text) == expected

    @pytest.mark.parametrize("text", ["later", "25:00", "13 pm", "7:75", "", None])
    def test_unresolvable(self, text):
        with pytest.raises(UnresolvedTime):
            resolve_time(text)
