# ABOUTME: Pydantic BaseModels for tracked cities and normalized weather snapshots.
# ABOUTME: Defines structured types for weather.gov and Nominatim data used throughout the app.

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class City(BaseModel):
    """A tracked city with resolved coordinates."""

    model_config = ConfigDict(frozen=True)

    name: str
    state: str
    lat: float
    lng: float
    id: int

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for list membership."""
        return (self.name, self.state)

    @property
    def label(self) -> str:
        return f"{self.name}, {self.state}"


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    state: str


class CurrentConditions(BaseModel):
    """Current conditions, temperature in Celsius and wind in m/s."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    temperature: float | None = None
    description: str = ""
    detailed_forecast: str = ""
    humidity: int | None = None
    wind_speed: float | None = None
    pressure: float | None = None
    visibility: float | None = None
    icon: str | None = None


class ForecastPeriod(BaseModel):
    """One period from the weather.gov forecast endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    temperature: float | None = None
    temperature_unit: str = "F"
    short_forecast: str = ""
    detailed_forecast: str = ""
    icon: str | None = None


class WeatherSnapshot(BaseModel):
    """Weather for one city at one point in time. Replaced wholesale, never patched."""

    model_config = ConfigDict(frozen=True)

    location: Location
    current: CurrentConditions
    forecast: list[dict[str, Any]] = []
