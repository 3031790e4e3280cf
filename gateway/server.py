"""WebSocket session server for booking clients.

Each connection runs two tasks:

  reader   ws.receive() → bounded inbox (backpressure when full)
  worker   inbox → parse → dispatch, one message at a time, to completion

Liveness is checked at the transport level: uvicorn sends WebSocket pings
every ``heartbeat_interval`` and drops a peer that stops answering them (see
``reservations.app.server_options``).  Browsers answer those pings on their
own, so an idle but connected client is never closed.  A dropped peer reaches
the reader as an ordinary disconnect and is torn down like any other close.

The connection owns its ``BookingSession`` exclusively.  When the socket goes
away the session is closed first, so an in-flight turn can finish its
external calls but its result is dropped and no booking is committed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Union

from fastapi import WebSocket, WebSocketDisconnect

from gateway import protocol
from reservations.config import Settings
from reservations.dialogue import DialogueEngine
from reservations.errors import FinalizationError, MalformedMessage
from reservations.finalizer import BookingFinalizer
from reservations.session import BookingSession, SessionStore

log = logging.getLogger("gateway.server")


class Connection:
    """Per-socket state: the session, its inbox, and a serialized sender."""

    def __init__(self, ws: WebSocket, session: BookingSession, settings: Settings) -> None:
        self.ws = ws
        self.session = session
        self.inbox: asyncio.Queue[Optional[Union[str, bytes]]] = asyncio.Queue(
            maxsize=settings.inbox_size
        )
        self._send_lock = asyncio.Lock()

    async def send(self, payload: dict) -> bool:
        """Send one JSON frame.  Returns False once the peer is gone."""
        if self.session.closed:
            log.debug("Dropping %s for closed session %s", payload.get("type"), self.session.session_id)
            return False
        async with self._send_lock:
            try:
                await self.ws.send_json(payload)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                log.debug("Send failed for session %s: %s", self.session.session_id, exc)
                self.session.close()
                return False
        return True


class SessionServer:
    """Accepts booking connections and drives their sessions."""

    def __init__(
        self,
        sessions: SessionStore,
        engine: DialogueEngine,
        finalizer: BookingFinalizer,
        settings: Settings,
    ) -> None:
        self._sessions = sessions
        self._engine = engine
        self._finalizer = finalizer
        self._settings = settings
        self._handlers = {
            "greeting": self._on_greeting,
            "user_message": self._on_user_message,
            "finalize_booking": self._on_finalize,
            "new_booking": self._on_new_booking,
            "ping": self._on_ping,
            "pong": self._on_pong,
        }

    async def handle(self, ws: WebSocket) -> None:
        """Run one connection from accept to teardown.

        Returns normally when the host cancels it after the socket is gone.
        Teardown never awaits, so it completes inside a cancelled scope.
        """
        await ws.accept()
        session = self._sessions.create()
        conn = Connection(ws, session, self._settings)
        log.info("Client connected: %s (%d active)", session.session_id, len(self._sessions))

        reader: Optional[asyncio.Task] = None
        try:
            await conn.send(protocol.connected(session.session_id))
            reader = asyncio.create_task(self._read(conn))
            await self._work(conn)
        except asyncio.CancelledError:
            log.debug("Handler for session %s cancelled by host", session.session_id)
        finally:
            self._sessions.discard(session.session_id)
            if reader is not None:
                reader.cancel()
            log.info("Client disconnected: %s (%d active)", session.session_id, len(self._sessions))

    # ── Tasks ─────────────────────────────────────────────────

    async def _read(self, conn: Connection) -> None:
        try:
            while True:
                event = await conn.ws.receive()
                if event["type"] == "websocket.disconnect":
                    log.debug(
                        "Session %s peer closed (code %s)",
                        conn.session.session_id,
                        event.get("code"),
                    )
                    break
                raw = event.get("text")
                if raw is None:
                    raw = event.get("bytes")
                if raw is None:
                    continue
                await conn.inbox.put(raw)
        except (WebSocketDisconnect, RuntimeError) as exc:
            log.debug("Reader stopped for session %s: %s", conn.session.session_id, exc)
        finally:
            conn.session.close()
            try:
                conn.inbox.put_nowait(None)
            except asyncio.QueueFull:
                # Worker is busy and will see the closed session next.
                pass

    async def _work(self, conn: Connection) -> None:
        while True:
            raw = await conn.inbox.get()
            if raw is None or conn.session.closed:
                return
            await self._dispatch(conn, raw)

    # ── Dispatch ──────────────────────────────────────────────

    async def _dispatch(self, conn: Connection, raw: Union[str, bytes]) -> None:
        try:
            msg = protocol.parse_inbound(raw, self._settings.max_message_bytes)
        except MalformedMessage as exc:
            log.warning("Malformed message on session %s: %s", conn.session.session_id, exc)
            await conn.send(protocol.error(exc.message))
            return

        log.debug("Session %s recv: %s", conn.session.session_id, msg.type)
        try:
            await self._handlers[msg.type](conn, msg)
        except Exception:
            log.exception("Error handling %s on session %s", msg.type, conn.session.session_id)
            await conn.send(protocol.error("Failed to process message"))

    async def _on_greeting(self, conn: Connection, msg: protocol.GreetingRequest) -> None:
        text = self._engine.greet(conn.session, msg.weather_info)
        await conn.send(protocol.greeting(text, conn.session.slots))

    async def _on_user_message(self, conn: Connection, msg: protocol.UserMessage) -> None:
        await conn.send(protocol.processing())
        result = await self._engine.process_turn(
            conn.session, msg.message, msg.conversation_state
        )
        if conn.session.closed:
            log.info("Session %s closed mid-turn, reply discarded", conn.session.session_id)
            return
        await conn.send(protocol.turn_reply(result))

    async def _on_finalize(self, conn: Connection, msg: protocol.FinalizeBooking) -> None:
        try:
            booking = await self._finalizer.finalize(conn.session, msg.booking_data)
        except FinalizationError as exc:
            log.info(
                "Finalize refused for session %s: %s",
                conn.session.session_id,
                exc.reason.value,
            )
            await conn.send(protocol.error(exc.message, exc.reason.value))
            return
        await conn.send(protocol.booking_confirmed(booking))

    async def _on_new_booking(self, conn: Connection, msg: protocol.NewBooking) -> None:
        conn.session.reset()
        text = self._engine.greet(conn.session)
        await conn.send(protocol.greeting(text, conn.session.slots))

    async def _on_ping(self, conn: Connection, msg: protocol.Ping) -> None:
        await conn.send(protocol.pong())

    async def _on_pong(self, conn: Connection, msg: protocol.Pong) -> None:
        return None
