# ABOUTME: Dashboard controller coordinating the weather workflow, state and map markers.
# ABOUTME: Implements initial load, add-city, remove-city and selection as all-or-nothing updates.

import asyncio
import logging

from src.deps import DashboardDeps
from src.exceptions import (
    CityNotTrackedError,
    DashboardError,
    DuplicateCityError,
    EmptyQueryError,
    WeatherUnavailableError,
)
from src.map_adapter import MarkerMap
from src.models import City
from src.state import DashboardState
from src.weather_service import fetch_city_weather, geocode_location, load_multiple_cities_weather

logger = logging.getLogger(__name__)

EMPTY_QUERY_MESSAGE = 'Please enter a city and state (e.g., "Miami, FL")'


class Dashboard:
    """Owns the dashboard state and keeps the marker map in step with the city list.

    State and markers are changed together with no await in between, so other
    tasks never observe a city without its marker or weather entry.
    """

    def __init__(self, deps: DashboardDeps, markers: MarkerMap, state: DashboardState | None = None):
        self.deps = deps
        self.markers = markers
        self.state = state or DashboardState()
        # Serializes add-city so the duplicate check sees the previous add's outcome.
        self._add_lock = asyncio.Lock()

        for city in self.state.cities:
            self.markers.place_marker(city)
        self.markers.on_marker_click(lambda city: self.select_city(city.id))

    async def load_initial(self) -> None:
        """Batch-load weather for every city currently on the list."""
        self.state = self.state.with_flags(loading=True)
        try:
            weather = await load_multiple_cities_weather(
                self.deps.http_client,
                self.state.cities,
                self.deps.settings.weather_api_url,
            )
            self.state = self.state.with_weather(weather)
            logger.info("Loaded weather for %d of %d cities", len(weather), len(self.state.cities))
        finally:
            self.state = self.state.with_flags(loading=False)

    async def add_city(self, query: str) -> City:
        """Resolve a "City, State" query and add it with its weather.

        Nothing changes unless geocoding, the duplicate check and the weather
        fetch all succeed. On failure the message is stored as the state's
        error and the DashboardError is re-raised.
        """
        query = query.strip()
        if not query:
            self.state = self.state.with_error(EMPTY_QUERY_MESSAGE)
            raise EmptyQueryError(EMPTY_QUERY_MESSAGE)

        async with self._add_lock:
            self.state = self.state.with_error("").with_flags(adding_city=True)
            try:
                city = await self._resolve(query)
            except DashboardError as e:
                logger.warning("Rejected city %r: %s", query, e)
                self.state = self.state.with_error(str(e))
                raise
            finally:
                self.state = self.state.with_flags(adding_city=False)
        return city

    async def _resolve(self, query: str) -> City:
        client = self.deps.http_client
        city = await geocode_location(client, query, self.deps.settings.geocoding_url)
        if self.state.has_city(city.name, city.state):
            raise DuplicateCityError(city.name, city.state)

        weather = await fetch_city_weather(client, city, self.deps.settings.weather_api_url)
        if weather is None:
            raise WeatherUnavailableError(city.name, city.state)

        self.state = self.state.with_city(city, weather)
        self.markers.place_marker(city)
        logger.info("Added %s (id %s)", city.label, city.id)
        return city

    def remove_city(self, city_id: int) -> City:
        """Remove a city with its weather entry, marker and selection."""
        city = self.state.find_city(city_id)
        if city is None:
            raise CityNotTrackedError(city_id)
        self.state = self.state.without_city(city_id)
        self.markers.remove_marker(city_id)
        logger.info("Removed %s (id %s)", city.label, city.id)
        return city

    def select_city(self, city_id: int) -> City:
        city = self.state.find_city(city_id)
        if city is None:
            raise CityNotTrackedError(city_id)
        self.state = self.state.selecting(city_id)
        return city

    def clear_selection(self) -> None:
        self.state = self.state.selecting(None)
