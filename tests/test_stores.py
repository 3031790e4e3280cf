"""Tests for the in-memory and JSONL booking stores."""

import json
import os
import sys
from datetime import date, timedelta

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from reservations.errors import StoreError
from reservations.models.booking import Booking, BookingStatus
from reservations.stores import InMemoryBookingStore, JsonlBookingStore, build_booking_store


def _booking(**overrides):
    data = {
        "customer_name": "Mani",
        "number_of_guests": 4,
        "booking_date": date.today() + timedelta(days=1),
        "booking_time": "19:00",
        "seating_preference": "indoor",
    }
    data.update(overrides)
    return Booking(**data)


class TestInMemoryBookingStore:
    async def test_save_and_get(self):
        store = InMemoryBookingStore()
        booking = _booking()
        assert await store.save(booking) is booking
        assert await store.get(booking.booking_id) is booking
        assert await store.count() == 1

    async def test_unknown_id(self):
        assert await InMemoryBookingStore().get("BK-nope") is None

    async def test_duplicate_id_rejected(self):
        store = InMemoryBookingStore()
        booking = _booking()
        await store.save(booking)
        with pytest.raises(StoreError):
            await store.save(booking)


class TestJsonlBookingStore:
    async def test_appends_one_line_per_booking(self, tmp_path):
        path = tmp_path / "data" / "bookings.jsonl"
        store = JsonlBookingStore(path)
        await store.save(_booking())
        await store.save(_booking(customer_name="Priya"))

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1])["customerName"] == "Priya"
        assert await store.count() == 2

    async def test_get_round_trip(self, tmp_path):
        store = JsonlBookingStore(tmp_path / "bookings.jsonl")
        booking = _booking(cuisine_preference="japanese", special_requests="anniversary")
        await store.save(booking)

        loaded = await store.get(booking.booking_id)
        assert loaded.booking_id == booking.booking_id
        assert loaded.cuisine_preference == "Japanese"
        assert loaded.booking_date == booking.booking_date
        assert loaded.status == BookingStatus.CONFIRMED

    async def test_old_bookings_still_load(self, tmp_path):
        path = tmp_path / "bookings.jsonl"
        record = _booking().to_wire()
        record["bookingDate"] = "2020-01-01"
        path.write_text(json.dumps(record) + "\n", encoding="utf-8")

        loaded = await JsonlBookingStore(path).get(record["bookingId"])
        assert loaded.booking_date == date(2020, 1, 1)

    async def test_corrupt_lines_skipped(self, tmp_path):
        path = tmp_path / "bookings.jsonl"
        good = _booking().to_wire()
        path.write_text("{not json\n\n" + json.dumps(good) + "\n", encoding="utf-8")
        store = JsonlBookingStore(path)
        assert await store.count() == 1
        assert (await store.get(good["bookingId"])) is not None

    async def test_missing_file_is_empty(self, tmp_path):
        store = JsonlBookingStore(tmp_path / "absent.jsonl")
        assert await store.count() == 0
        assert await store.get("BK-1") is None


class TestBuildBookingStore:
    def test_memory(self):
        class S:
            booking_store = "memory"
        assert isinstance(build_booking_store(S()), InMemoryBookingStore)

    def test_jsonl(self, tmp_path):
        class S:
            booking_store = "jsonl"
            bookings_path = str(tmp_path / "b.jsonl")
        store = build_booking_store(S())
        assert isinstance(store, JsonlBookingStore)
        assert store.path == tmp_path / "b.jsonl"
