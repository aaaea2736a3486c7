# ABOUTME: Display formatting for city cards and the city detail view.
# ABOUTME: Converts stored SI values to US display units and renders "N/A" for missing values.

from typing import Any

from src.models import City, WeatherSnapshot
from src.state import DashboardState
from src.weather_service import celsius_to_fahrenheit, ms_to_mph

NOT_AVAILABLE = "N/A"


def format_temp(temp_celsius: float | None) -> int | str:
    """Whole degrees Fahrenheit, or "N/A" when there is no temperature."""
    if temp_celsius is None:
        return NOT_AVAILABLE
    return celsius_to_fahrenheit(temp_celsius)


def city_card(city: City, weather: WeatherSnapshot | None) -> dict[str, Any]:
    """Summary row for the city list. A city without weather shows as loading."""
    card: dict[str, Any] = {
        "id": city.id,
        "name": city.name,
        "state": city.state,
        "label": city.label,
        "loading": weather is None,
    }
    if weather is not None:
        card.update(
            description=weather.current.description,
            icon=weather.current.icon,
            temperature_f=format_temp(weather.current.temperature),
            humidity=weather.current.humidity,
        )
    return card


def city_detail(city: City, weather: WeatherSnapshot | None) -> dict[str, Any] | None:
    """Detail view for a selected city; None when its weather has not arrived."""
    if weather is None:
        return None
    current = weather.current
    return {
        "id": city.id,
        "label": city.label,
        "icon": current.icon,
        "description": current.description,
        "temperature_f": format_temp(current.temperature),
        "humidity": current.humidity,
        "wind_mph": ms_to_mph(current.wind_speed) if current.wind_speed is not None else None,
        "pressure_hpa": round(current.pressure) if current.pressure is not None else None,
        "visibility_km": round(current.visibility / 1000) if current.visibility is not None else None,
        "detailed_forecast": current.detailed_forecast,
        "coordinates": f"{city.lat:.4f}°, {city.lng:.4f}°",
        "forecast": weather.forecast,
    }


def dashboard_view(state: DashboardState) -> dict[str, Any]:
    """JSON-ready rendering of the whole dashboard."""
    selected = state.selected_city
    return {
        "cities": [city_card(city, state.weather_for(city)) for city in state.cities],
        "selected": city_detail(selected, state.weather_for(selected)) if selected else None,
        "error": state.error,
        "loading": state.loading,
        "adding_city": state.adding_city,
    }
