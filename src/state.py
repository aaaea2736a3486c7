# ABOUTME: Immutable aggregate of the dashboard's client-side state.
# ABOUTME: City list, weather-by-city map, selection and status flags change only through pure transitions.

from pydantic import BaseModel, ConfigDict

from src.models import City, WeatherSnapshot

SEED_CITIES = (
    City(name="New York", state="NY", lat=40.7128, lng=-74.0060, id=1),
    City(name="Los Angeles", state="CA", lat=34.0522, lng=-118.2437, id=2),
)


class DashboardState(BaseModel):
    """Everything the dashboard shows, updated all-or-nothing.

    Every transition returns a new state. ``weather_by_city`` is keyed by city
    name and only ever holds entries for cities on the list; a missing key
    means the city's weather is pending or unavailable.
    """

    model_config = ConfigDict(frozen=True)

    cities: tuple[City, ...] = SEED_CITIES
    weather_by_city: dict[str, WeatherSnapshot] = {}
    selected_city_id: int | None = None
    error: str = ""
    loading: bool = False
    adding_city: bool = False

    def has_city(self, name: str, state: str) -> bool:
        return any(c.key == (name, state) for c in self.cities)

    def find_city(self, city_id: int) -> City | None:
        return next((c for c in self.cities if c.id == city_id), None)

    @property
    def selected_city(self) -> City | None:
        if self.selected_city_id is None:
            return None
        return self.find_city(self.selected_city_id)

    def weather_for(self, city: City) -> WeatherSnapshot | None:
        return self.weather_by_city.get(city.name)

    def with_city(self, city: City, weather: WeatherSnapshot) -> "DashboardState":
        """Append a city together with its first weather snapshot and clear the error."""
        if self.has_city(city.name, city.state):
            raise ValueError(f"{city.label} is already on the list")
        return self.model_copy(
            update={
                "cities": (*self.cities, city),
                "weather_by_city": {**self.weather_by_city, city.name: weather},
                "error": "",
            }
        )

    def without_city(self, city_id: int) -> "DashboardState":
        """Drop a city, its weather entry and, if it was selected, the selection."""
        city = self.find_city(city_id)
        if city is None:
            return self
        cities = tuple(c for c in self.cities if c.id != city_id)
        weather = {k: v for k, v in self.weather_by_city.items() if k != city.name}
        selected = None if self.selected_city_id == city_id else self.selected_city_id
        return self.model_copy(update={"cities": cities, "weather_by_city": weather, "selected_city_id": selected})

    def with_weather(self, weather_by_city: dict[str, WeatherSnapshot]) -> "DashboardState":
        """Merge fetched snapshots, ignoring names no longer on the list."""
        names = {c.name for c in self.cities}
        merged = dict(self.weather_by_city)
        merged.update({name: snapshot for name, snapshot in weather_by_city.items() if name in names})
        return self.model_copy(update={"weather_by_city": merged})

    def selecting(self, city_id: int | None) -> "DashboardState":
        return self.model_copy(update={"selected_city_id": city_id})

    def with_error(self, message: str) -> "DashboardState":
        return self.model_copy(update={"error": message})

    def with_flags(self, **flags: bool) -> "DashboardState":
        """Set ``loading`` and/or ``adding_city``."""
        unknown = set(flags) - {"loading", "adding_city"}
        if unknown:
            raise TypeError(f"Unknown state flags: {sorted(unknown)}")
        return self.model_copy(update=flags)
