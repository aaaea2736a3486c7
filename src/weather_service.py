# ABOUTME: Service layer for Nominatim and weather.gov API calls and response parsing.
# ABOUTME: Handles geocoding, single-city weather snapshots, batch loading and unit conversions.

import asyncio
import logging
import math
import time
from collections.abc import Iterable
from typing import Any

import httpx

from src.config import DEFAULT_GEOCODING_URL, DEFAULT_WEATHER_API_URL
from src.exceptions import CityNotFoundError, LocationLookupError
from src.models import City, CurrentConditions, ForecastPeriod, Location, WeatherSnapshot

logger = logging.getLogger(__name__)

LOOKUP_UNAVAILABLE_MESSAGE = "Unable to find location"
CITY_NOT_FOUND_MESSAGE = 'City not found. Please use format: "City, State" (e.g., "Miami, FL")'

FORECAST_PERIODS_KEPT = 3

_last_city_id = 0


def celsius_to_fahrenheit(celsius: float) -> int:
    """Convert Celsius to whole degrees Fahrenheit for display."""
    return _round_half_up(celsius * 9 / 5 + 32)


def ms_to_mph(ms: float) -> int:
    """Convert meters per second to whole miles per hour for display."""
    return _round_half_up(ms * 2.237)


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    return (fahrenheit - 32) * 5 / 9


def _round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)


def next_city_id() -> int:
    """Mint a millisecond-based city id, strictly increasing within the process."""
    global _last_city_id
    _last_city_id = max(time.time_ns() // 1_000_000, _last_city_id + 1)
    return _last_city_id


async def geocode_location(
    client: httpx.AsyncClient,
    query: str,
    geocoding_url: str = DEFAULT_GEOCODING_URL,
) -> City:
    """Geocode a "City, State" query to a City using the Nominatim search API.

    Raises:
        LocationLookupError: The service is unreachable, returned a non-success status
            or answered with a malformed payload.
        CityNotFoundError: The service returned no candidates.
    """
    try:
        resp = await client.get(
            geocoding_url,
            params={"format": "json", "q": query, "countrycodes": "us", "limit": 1},
        )
        resp.raise_for_status()
        results = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        raise LocationLookupError(LOOKUP_UNAVAILABLE_MESSAGE) from e

    if not isinstance(results, list):
        raise LocationLookupError(LOOKUP_UNAVAILABLE_MESSAGE)
    if not results:
        raise CityNotFoundError(CITY_NOT_FOUND_MESSAGE)

    try:
        r = results[0]
        name, state = split_display_name(r["display_name"])
        return City(name=name, state=state, lat=float(r["lat"]), lng=float(r["lon"]), id=next_city_id())
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise LocationLookupError(LOOKUP_UNAVAILABLE_MESSAGE) from e


def split_display_name(display_name: str) -> tuple[str, str]:
    """Take the first two comma-separated segments of a display name as (name, state)."""
    parts = display_name.split(",")
    name = parts[0].strip()
    state = parts[1].strip() if len(parts) > 1 else ""
    return name, state or "Unknown"


async def fetch_city_weather(
    client: httpx.AsyncClient,
    city: City,
    weather_api_url: str = DEFAULT_WEATHER_API_URL,
) -> WeatherSnapshot | None:
    """Fetch a weather snapshot for a city from weather.gov.

    Returns None when the point lookup or the forecast fails. Live observations
    are optional; without them the snapshot carries forecast-only fields.
    """
    try:
        points_resp = await client.get(f"{weather_api_url}/points/{city.lat},{city.lng}")
        points_resp.raise_for_status()
        point = points_resp.json()["properties"]

        forecast_resp, stations_resp = await asyncio.gather(
            client.get(point["forecast"]),
            client.get(point["observationStations"]),
            return_exceptions=True,
        )
        if isinstance(forecast_resp, BaseException):
            raise forecast_resp
        forecast_resp.raise_for_status()
        periods = forecast_resp.json()["properties"]["periods"]
        current_period = ForecastPeriod.model_validate(periods[0])

        observation = await _latest_observation(client, stations_resp, city)
        return build_snapshot(city, current_period, periods, observation)
    except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError):
        logger.exception("Error fetching weather for %s", city.name)
        return None


async def _latest_observation(
    client: httpx.AsyncClient,
    stations_resp: httpx.Response | BaseException,
    city: City,
) -> dict[str, Any] | None:
    """Fetch the latest observation from the first nearby station, or None."""
    try:
        if isinstance(stations_resp, BaseException):
            raise stations_resp
        stations_resp.raise_for_status()
        features = stations_resp.json().get("features") or []
        if not features:
            return None
        resp = await client.get(f"{features[0]['id']}/observations/latest")
        resp.raise_for_status()
        properties = resp.json()["properties"]
        if not isinstance(properties, dict):
            logger.info("Malformed observation for %s, using forecast data", city.name)
            return None
        return properties
    except (httpx.HTTPError, AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
        logger.info("Could not fetch current observations for %s, using forecast data: %r", city.name, e)
        return None


def build_snapshot(
    city: City,
    current_period: ForecastPeriod,
    periods: list[dict[str, Any]],
    observation: dict[str, Any] | None,
) -> WeatherSnapshot:
    """Combine the first forecast period with an optional live observation."""
    observation = observation or {}

    temperature = _quantity(observation, "temperature")
    if temperature is None and current_period.temperature is not None:
        if current_period.temperature_unit == "F":
            temperature = fahrenheit_to_celsius(current_period.temperature)
        else:
            temperature = current_period.temperature

    humidity = _quantity(observation, "relativeHumidity")
    pressure = _quantity(observation, "barometricPressure")

    return WeatherSnapshot(
        location=Location(name=city.name, state=city.state),
        current=CurrentConditions(
            temperature=temperature,
            description=current_period.short_forecast,
            detailed_forecast=current_period.detailed_forecast,
            humidity=_round_half_up(humidity) if humidity is not None else None,
            wind_speed=_quantity(observation, "windSpeed"),
            # Pa -> hPa
            pressure=pressure / 100 if pressure is not None else None,
            visibility=_quantity(observation, "visibility"),
            icon=current_period.icon,
        ),
        forecast=periods[:FORECAST_PERIODS_KEPT],
    )


def _quantity(properties: dict[str, Any], key: str) -> float | None:
    """Read a weather.gov {"value": ...} quantity, returning None if absent or unusable."""
    quantity = properties.get(key)
    if not isinstance(quantity, dict):
        return None
    value = quantity.get("value")
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return None
    return float(value)


async def load_multiple_cities_weather(
    client: httpx.AsyncClient,
    cities: Iterable[City],
    weather_api_url: str = DEFAULT_WEATHER_API_URL,
) -> dict[str, WeatherSnapshot]:
    """Fetch weather for all cities at once, keyed by city name.

    Cities whose fetch fails are left out of the result.
    """
    cities = list(cities)
    results = await asyncio.gather(
        *(fetch_city_weather(client, city, weather_api_url) for city in cities),
        return_exceptions=True,
    )

    weather_data = {}
    for city, result in zip(cities, results):
        if isinstance(result, BaseException):
            logger.error("Weather fetch for %s raised %r", city.name, result)
            continue
        if result is not None:
            weather_data[city.name] = result
    return weather_data
