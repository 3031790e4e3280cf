"""Tests for weather-based seating recommendations."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from reservations.models.weather import WeatherObservation
from reservations.recommendation import recommend, with_recommendation


def _obs(condition, temperature, description=""):
    return WeatherObservation(condition=condition, temperature=temperature, description=description)


class TestRecommend:
    def test_rain_overrides_warm_temperature(self):
        assert recommend(_obs("rain", 30)).seating == "indoor"

    def test_clear_and_warm_is_outdoor(self):
        assert recommend(_obs("clear", 26)).seating == "outdoor"

    def test_clear_and_hot_is_indoor(self):
        assert recommend(_obs("clear", 35)).seating == "indoor"

    @pytest.mark.parametrize("condition,temperature,seating", [
        ("drizzle", 24, "indoor"),
        ("thunderstorm", 25, "indoor"),
        ("snow", -2, "indoor"),
        ("clear", 20, "outdoor"),
        ("clear", 32, "outdoor"),
        ("clear", 19, "indoor"),
        ("sunny", 22, "outdoor"),
        ("clouds", 18, "outdoor"),
        ("clouds", 28, "outdoor"),
        ("clouds", 17, "indoor"),
        ("clouds", 29, "indoor"),
        ("mist", 22, "indoor"),
        ("unknown", 25, "indoor"),
    ])
    def test_bands(self, condition, temperature, seating):
        assert recommend(_obs(condition, temperature)).seating == seating

    def test_condition_case_insensitive(self):
        assert recommend(_obs("Clear", 26)).seating == "outdoor"

    def test_message_mentions_temperature(self):
        message = recommend(_obs("clear", 26, "clear sky")).message
        assert "26°C" in message

    def test_every_result_has_message(self):
        for condition in ["rain", "thunderstorm", "clear", "clouds", "snow", "haze"]:
            assert recommend(_obs(condition, 21)).message

    def test_with_recommendation_copies(self):
        obs = _obs("rain", 12)
        enriched = with_recommendation(obs)
        assert enriched.recommendation.seating == "indoor"
        assert obs.recommendation is None
