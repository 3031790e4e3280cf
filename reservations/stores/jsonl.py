"""Append-only JSONL booking store.

One booking per line, camelCase JSON as sent to clients.  File I/O runs in
the default thread pool so the event loop is never blocked.
"""

from __future__ import annotations

import asyncio
import json
import logging
from functools import partial
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from reservations.errors import StoreError
from reservations.models.booking import Booking

from .base import BookingStore

log = logging.getLogger("reservations.stores")


class JsonlBookingStore(BookingStore):
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._write_lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run_in_executor(self, func, *args, **kwargs) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    def _append(self, line: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    def _read_records(self) -> list[dict]:
        if not self._path.exists():
            return []
        records: list[dict] = []
        for lineno, line in enumerate(self._path.read_text(encoding="utf-8").splitlines(), 1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError:
                log.warning("Skipping corrupt line %d in %s", lineno, self._path)
        return records

    # ------------------------------------------------------------------
    # BookingStore interface
    # ------------------------------------------------------------------

    async def save(self, booking: Booking) -> Booking:
        line = json.dumps(booking.to_wire())
        async with self._write_lock:
            try:
                await self._run_in_executor(self._append, line)
            except OSError as exc:
                raise StoreError(
                    "Could not write booking", {"path": str(self._path), "error": str(exc)}
                ) from exc
        log.info("Booking appended to %s: %s", self._path, booking.booking_id)
        return booking

    async def get(self, booking_id: str) -> Booking | None:
        records = await self._run_in_executor(self._read_records)
        for record in reversed(records):
            if record.get("bookingId") != booking_id:
                continue
            try:
                # Past dates are expected for stored records.
                return Booking.model_validate(record, context={"stored": True})
            except ValidationError as exc:
                raise StoreError(
                    "Stored booking is invalid", {"booking_id": booking_id, "error": str(exc)}
                ) from exc
        return None

    async def count(self) -> int:
        records = await self._run_in_executor(self._read_records)
        return len(records)
