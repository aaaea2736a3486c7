# ABOUTME: Exception types raised by the city resolution workflow and dashboard controller.
# ABOUTME: Every class carries a plain-text, user-facing message as str(exc).


class DashboardError(Exception):
    """Base class for errors shown to the user as a plain message."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class LocationLookupError(DashboardError):
    """Raised when the geocoding service is unreachable or answers with a non-success status."""


class CityNotFoundError(DashboardError):
    """Raised when the geocoding service returns no candidate for the query."""


class EmptyQueryError(DashboardError):
    """Raised when a search query is empty after trimming whitespace."""


class DuplicateCityError(DashboardError):
    """Raised when the resolved city is already on the list.

    Args:
        name: City name of the rejected city.
        state: State of the rejected city.
    """

    def __init__(self, name: str, state: str):
        self.name = name
        self.state = state
        super().__init__(f"{name}, {state} is already on the list")


class WeatherUnavailableError(DashboardError):
    """Raised when a newly resolved city cannot be served by the weather source."""

    def __init__(self, name: str, state: str):
        self.name = name
        self.state = state
        super().__init__(f"Unable to fetch weather data for {name}, {state}")


class CityNotTrackedError(DashboardError):
    """Raised when an operation names a city id that is not on the list."""

    def __init__(self, city_id: int):
        self.city_id = city_id
        super().__init__(f"City {city_id} is not on the list")
