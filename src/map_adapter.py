# ABOUTME: Marker interface between the dashboard and the browser map widget.
# ABOUTME: The in-memory adapter mirrors the city list as markers the page renders with Google Maps.

import base64
import logging
from collections.abc import Callable
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from src.models import City

logger = logging.getLogger(__name__)

MAP_CENTER = {"lat": 39.8283, "lng": -98.5795}
MAP_ZOOM = 4
MARKER_SIZE = 20

_MARKER_SVG = (
    '<svg width="20" height="20" viewBox="0 0 20 20" xmlns="http://www.w3.org/2000/svg">'
    '<circle cx="10" cy="10" r="8" fill="#22c55e" stroke="#ffffff" stroke-width="2"/>'
    '<circle cx="10" cy="10" r="3" fill="#ffffff"/>'
    "</svg>"
)
MARKER_ICON_URL = "data:image/svg+xml;base64," + base64.b64encode(_MARKER_SVG.encode()).decode()

MarkerClickHandler = Callable[[City], None]


class Marker(BaseModel):
    """A map marker for one city."""

    model_config = ConfigDict(frozen=True)

    city_id: int
    lat: float
    lng: float
    title: str
    icon: str = MARKER_ICON_URL
    size: int = MARKER_SIZE


class MarkerMap(Protocol):
    def place_marker(self, city: City) -> Marker: ...

    def remove_marker(self, city_id: int) -> None: ...

    def on_marker_click(self, handler: MarkerClickHandler) -> None: ...


class InMemoryMarkerMap:
    """MarkerMap kept in process and served to the page as JSON.

    The page reports clicks back through ``click``, which calls the registered handlers.
    """

    def __init__(self):
        self._markers: dict[int, tuple[City, Marker]] = {}
        self._handlers: list[MarkerClickHandler] = []

    def place_marker(self, city: City) -> Marker:
        marker = Marker(city_id=city.id, lat=city.lat, lng=city.lng, title=city.label)
        self._markers[city.id] = (city, marker)
        return marker

    def remove_marker(self, city_id: int) -> None:
        self._markers.pop(city_id, None)

    def on_marker_click(self, handler: MarkerClickHandler) -> None:
        self._handlers.append(handler)

    def click(self, city_id: int) -> bool:
        """Dispatch a click on a marker. Returns False if there is no such marker."""
        entry = self._markers.get(city_id)
        if entry is None:
            logger.warning("Click on unknown marker %s", city_id)
            return False
        city, _ = entry
        for handler in self._handlers:
            handler(city)
        return True

    @property
    def markers(self) -> list[Marker]:
        return [marker for _, marker in self._markers.values()]

    def __contains__(self, city_id: int) -> bool:
        return city_id in self._markers
