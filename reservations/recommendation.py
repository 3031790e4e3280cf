"""Weather-conditioned seating recommendation.

Precipitation and storms always mean indoor seating.  Clear and cloudy skies
go outdoor only inside a comfortable temperature band:

    clear / sunny   20–32 °C → outdoor, hotter or colder → indoor
    cloudy          18–28 °C → outdoor, otherwise → indoor
    rain, drizzle, thunderstorm, snow → indoor
    anything else   → indoor
"""

from __future__ import annotations

from reservations.models.weather import Recommendation, WeatherObservation


def _fmt(temperature: float) -> str:
    return f"{temperature:g}"


def recommend(observation: WeatherObservation) -> Recommendation:
    """Map an observation to a seating suggestion.  Never raises."""
    condition = (observation.condition or "").lower()
    temperature = observation.temperature
    description = observation.description or condition or "mixed weather"
    temp = _fmt(temperature)

    if "rain" in condition or "drizzle" in condition:
        return Recommendation(
            seating="indoor",
            message=(
                f"It looks like {description} on your booking date, so I'd suggest "
                "a table in our indoor dining room."
            ),
        )

    if "thunder" in condition or "storm" in condition:
        return Recommendation(
            seating="indoor",
            message="Thunderstorms are possible that day. Indoor seating will be safer and more comfortable.",
        )

    if "clear" in condition or "sun" in condition:
        if 20 <= temperature <= 32:
            return Recommendation(
                seating="outdoor",
                message=(
                    f"Lovely weather for dining outside: {temp}°C and {description}. "
                    "Would you like a table on the terrace?"
                ),
            )
        if temperature > 32:
            return Recommendation(
                seating="indoor",
                message=f"It will be hot at {temp}°C. Our air-conditioned dining room will be more comfortable.",
            )
        return Recommendation(
            seating="indoor",
            message=f"It may be chilly at {temp}°C. An indoor table will be warmer.",
        )

    if "cloud" in condition:
        if 18 <= temperature <= 28:
            return Recommendation(
                seating="outdoor",
                message=(
                    f"Mild and cloudy at {temp}°C, which is pleasant for the terrace "
                    "without direct sun."
                ),
            )
        return Recommendation(
            seating="indoor",
            message=f"Expect {description} around {temp}°C. Indoor seating may be more comfortable.",
        )

    if "snow" in condition:
        return Recommendation(
            seating="indoor",
            message="Snow is in the forecast, so we'll keep you warm indoors.",
        )

    return Recommendation(
        seating="indoor",
        message=f"The forecast shows {description}. Indoor seating is a safe, comfortable choice.",
    )


def with_recommendation(observation: WeatherObservation) -> WeatherObservation:
    """Return ``observation`` with its recommendation filled in."""
    return observation.model_copy(update={"recommendation": recommend(observation)})
