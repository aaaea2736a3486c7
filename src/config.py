# ABOUTME: Runtime settings for the dashboard, read from the environment and an optional .env file.
# ABOUTME: Covers upstream URLs, the outbound User-Agent, HTTP timeout and the maps API key.

import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

DEFAULT_USER_AGENT = "us-weather-dashboard/0.1.0"
DEFAULT_GEOCODING_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_WEATHER_API_URL = "https://api.weather.gov"


class Settings(BaseModel):
    """Dashboard settings. Both upstream services reject requests without a User-Agent."""

    user_agent: str = DEFAULT_USER_AGENT
    http_timeout: float = 10.0
    google_maps_api_key: str = ""
    geocoding_url: str = DEFAULT_GEOCODING_URL
    weather_api_url: str = DEFAULT_WEATHER_API_URL

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            user_agent=os.environ.get("WEATHER_USER_AGENT", DEFAULT_USER_AGENT),
            http_timeout=float(os.environ.get("HTTP_TIMEOUT", "10.0")),
            google_maps_api_key=os.environ.get("GOOGLE_MAPS_API_KEY", ""),
            geocoding_url=os.environ.get("GEOCODING_URL", DEFAULT_GEOCODING_URL),
            weather_api_url=os.environ.get("WEATHER_API_URL", DEFAULT_WEATHER_API_URL),
        )
