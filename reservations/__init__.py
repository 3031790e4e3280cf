"""Conversational restaurant booking engine.

Slot-filling dialogue over WebSocket: collects reservation details turn by
turn, attaches a weather-based seating recommendation, and commits a booking.
"""

__version__ = "0.1.0"
