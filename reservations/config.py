"""Application configuration via environment variables."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings

log = logging.getLogger("reservations.config")

STORE_KINDS = {"memory", "jsonl"}


class Settings(BaseSettings):
    # LLM
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.4

    # Weather (OpenWeatherMap)
    weather_api_key: str = ""
    weather_base_url: str = "https://api.openweathermap.org/data/2.5"
    default_location: str = "London"
    weather_timeout: float = 8.0
    # Nearest 3-hour forecast entry must be within this many hours of the
    # target day, otherwise the day is outside the forecast horizon.
    forecast_match_hours: float = 12.0

    # Persistence
    booking_store: str = "memory"  # "memory" or "jsonl"
    bookings_path: str = "data/bookings.jsonl"

    # Sessions. Heartbeats are WebSocket pings sent by uvicorn; a peer that
    # answers none of them for heartbeat_timeout seconds is dropped.
    heartbeat_interval: float = 30.0
    heartbeat_timeout: float = 90.0
    max_message_bytes: int = 16384
    inbox_size: int = 16

    # Admin auth
    admin_api_key: str = ""

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def validate_startup(self) -> list[str]:
        """Validate configuration at startup. Returns warnings, raises on errors."""
        warnings: list[str] = []

        if self.booking_store not in STORE_KINDS:
            raise ValueError(
                f"BOOKING_STORE must be one of {sorted(STORE_KINDS)}, "
                f"got {self.booking_store!r}."
            )
        if self.heartbeat_timeout <= self.heartbeat_interval:
            raise ValueError(
                "HEARTBEAT_TIMEOUT must be greater than HEARTBEAT_INTERVAL "
                f"({self.heartbeat_timeout} <= {self.heartbeat_interval})."
            )

        if not self.gemini_api_key:
            warnings.append(
                "GEMINI_API_KEY not set. Every turn will use the fallback reply "
                "and no details will be extracted."
            )
        if not self.weather_api_key:
            warnings.append(
                "WEATHER_API_KEY not set. Bookings get the default weather observation."
            )

        if not self.admin_api_key:
            if self.debug:
                warnings.append(
                    "ADMIN_API_KEY not set. Admin APIs are open (DEBUG=true)."
                )
            else:
                warnings.append(
                    "ADMIN_API_KEY not set. Admin APIs are locked in production."
                )

        if self.booking_store == "memory":
            warnings.append("BOOKING_STORE=memory: bookings are lost on restart.")

        return warnings


settings = Settings()
