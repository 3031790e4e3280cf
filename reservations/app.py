"""FastAPI application: HTTP + WebSocket endpoints for table booking.

Endpoints:

  WS   /ws                         Booking conversation (see gateway.protocol)
  GET  /health                     Health check
  GET  /api/sessions               Active sessions (admin)
  GET  /api/sessions/{session_id}  One session in detail (admin)

The booking flow:
  1. Client connects to WS /ws and receives its sessionId
  2. Sends "greeting" → gets the welcome line
  3. Sends "user_message" per utterance → "response" until all details are in,
     then "booking_ready"
  4. Sends "finalize_booking" → "booking_confirmed" and the session starts over
"""

from __future__ import annotations

# Load .env into os.environ before settings are read.
from dotenv import load_dotenv
load_dotenv()

import logging
import time
from typing import Optional

# Configure root logger early so all app loggers (gateway.server, etc.)
# have a handler and are visible when run via `uvicorn reservations.app:app`.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)-24s %(levelname)-7s %(message)s",
)

from fastapi import Depends, FastAPI, WebSocket
from fastapi.responses import JSONResponse

from gateway.server import SessionServer
from reservations import __version__
from reservations.auth import require_admin_token
from reservations.config import Settings, settings as default_settings
from reservations.dialogue import DialogueEngine
from reservations.finalizer import BookingFinalizer
from reservations.llm import LanguageModel, build_language_model
from reservations.session import SessionStore
from reservations.stores import BookingStore, build_booking_store
from reservations.weather_providers import WeatherService, build_weather_service

log = logging.getLogger("reservations.app")


def create_app(
    settings: Optional[Settings] = None,
    language_model: Optional[LanguageModel] = None,
    weather: Optional[WeatherService] = None,
    store: Optional[BookingStore] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators not passed in are built from ``settings``.
    """
    settings = settings or default_settings
    if language_model is None:
        language_model = build_language_model(settings)
    if weather is None:
        weather = build_weather_service(settings)
    if store is None:
        store = build_booking_store(settings)

    sessions = SessionStore()
    engine = DialogueEngine(language_model, weather)
    finalizer = BookingFinalizer(store, weather)
    server = SessionServer(sessions, engine, finalizer, settings)

    app = FastAPI(
        title="Restaurant Booking Assistant",
        description="Conversational table booking over WebSocket",
        version=__version__,
    )
    app.state.settings = settings
    app.state.sessions = sessions
    app.state.store = store
    started_at = time.time()

    # ── Health check ───────────────────────────────────────────

    @app.get("/health")
    async def health() -> JSONResponse:
        """Lightweight health check; confirms the event loop is responsive."""
        uptime = round(time.time() - started_at, 1)
        return JSONResponse({"status": "ok", "uptime": uptime, "sessions": len(sessions)})

    # ── Booking conversation ───────────────────────────────────

    @app.websocket("/ws")
    async def ws_booking(websocket: WebSocket) -> None:
        await server.handle(websocket)

    # ── Admin: sessions ────────────────────────────────────────

    @app.get("/api/sessions", dependencies=[Depends(require_admin_token)])
    async def list_sessions():
        """Return summary of all active booking sessions."""
        active = sessions.active()
        return JSONResponse({
            "sessions": [s.to_dict() for s in active.values()],
            "count": len(active),
        })

    @app.get("/api/sessions/{session_id}", dependencies=[Depends(require_admin_token)])
    async def get_session(session_id: str):
        """Return detailed state of a single session."""
        session = sessions.get(session_id)
        if not session:
            return JSONResponse({"error": "Session not found"}, status_code=404)
        return JSONResponse(session.to_dict(detail=True))

    return app


def server_options(settings: Settings) -> dict:
    """uvicorn keyword arguments for ``settings``.

    Heartbeats are WebSocket protocol pings sent by uvicorn; clients answer
    them without any application code.  A peer is dropped once it has been
    silent for ``heartbeat_timeout`` seconds in total.
    """
    return {
        "host": settings.host,
        "port": settings.port,
        "reload": settings.debug,
        "ws": "websockets",
        "ws_ping_interval": settings.heartbeat_interval,
        "ws_ping_timeout": settings.heartbeat_timeout - settings.heartbeat_interval,
    }


# ── Module-level app instance for uvicorn ──────────────────────

app = create_app()


if __name__ == "__main__":
    import uvicorn

    for warning in default_settings.validate_startup():
        log.warning(warning)

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["default"]["fmt"] = (
        "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"
    )

    uvicorn.run(
        "reservations.app:app",
        log_config=log_config,
        **server_options(default_settings),
    )
