# ABOUTME: ASGI web entry point for the weather dashboard UI.
# ABOUTME: Creates a Starlette app serving the dashboard page and a JSON API over the Dashboard controller.

import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import quote

import httpx
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse
from starlette.routing import Route

from src.config import Settings
from src.dashboard import Dashboard
from src.deps import DashboardDeps, create_http_client
from src.exceptions import CityNotTrackedError, DashboardError
from src.map_adapter import MAP_CENTER, MAP_ZOOM, InMemoryMarkerMap
from src.views import city_detail, dashboard_view

logger = logging.getLogger(__name__)

INDEX_TEMPLATE = Path(__file__).parent / "templates" / "index.html"


def render_index(settings: Settings) -> str:
    """Fill the page template with the maps key and initial map options."""
    html = INDEX_TEMPLATE.read_text(encoding="utf-8")
    map_options = {"center": MAP_CENTER, "zoom": MAP_ZOOM}
    return html.replace("{{ maps_api_key }}", quote(settings.google_maps_api_key, safe="")).replace(
        "{{ map_options }}", json.dumps(map_options)
    )


async def extract_query(request: Request) -> str:
    """Read the "query" field of a JSON request body, or "" if there is none."""
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return ""
    if not isinstance(data, dict):
        return ""
    query = data.get("query")
    return query if isinstance(query, str) else ""


def _not_tracked(e: CityNotTrackedError) -> JSONResponse:
    return JSONResponse({"error": str(e)}, status_code=404)


def create_app(settings: Settings | None = None, http_client: httpx.AsyncClient | None = None) -> Starlette:
    """Build the dashboard app. Seed city weather is loaded at startup."""
    settings = settings or Settings.from_env()
    owns_client = http_client is None
    client = http_client if http_client is not None else create_http_client(settings)
    markers = InMemoryMarkerMap()
    dashboard = Dashboard(DashboardDeps(http_client=client, settings=settings), markers)

    async def index(request: Request) -> HTMLResponse:
        return HTMLResponse(render_index(settings))

    async def get_state(request: Request) -> JSONResponse:
        return JSONResponse(dashboard_view(dashboard.state))

    async def add_city(request: Request) -> JSONResponse:
        query = await extract_query(request)
        try:
            await dashboard.add_city(query)
        except DashboardError as e:
            return JSONResponse({"error": str(e)}, status_code=400)
        return JSONResponse(dashboard_view(dashboard.state), status_code=201)

    async def remove_city(request: Request) -> JSONResponse:
        try:
            dashboard.remove_city(request.path_params["city_id"])
        except CityNotTrackedError as e:
            return _not_tracked(e)
        return JSONResponse(dashboard_view(dashboard.state))

    async def city_weather(request: Request) -> JSONResponse:
        city = dashboard.state.find_city(request.path_params["city_id"])
        if city is None:
            return _not_tracked(CityNotTrackedError(request.path_params["city_id"]))
        detail = city_detail(city, dashboard.state.weather_for(city))
        if detail is None:
            return JSONResponse({"error": f"No weather data for {city.label}"}, status_code=404)
        return JSONResponse(detail)

    async def select_city(request: Request) -> JSONResponse:
        try:
            dashboard.select_city(request.path_params["city_id"])
        except CityNotTrackedError as e:
            return _not_tracked(e)
        return JSONResponse(dashboard_view(dashboard.state))

    async def clear_selection(request: Request) -> JSONResponse:
        dashboard.clear_selection()
        return JSONResponse(dashboard_view(dashboard.state))

    async def list_markers(request: Request) -> JSONResponse:
        return JSONResponse([m.model_dump() for m in markers.markers])

    async def click_marker(request: Request) -> JSONResponse:
        city_id = request.path_params["city_id"]
        if not markers.click(city_id):
            return _not_tracked(CityNotTrackedError(city_id))
        return JSONResponse(dashboard_view(dashboard.state))

    @asynccontextmanager
    async def lifespan(app: Starlette):
        try:
            await dashboard.load_initial()
            yield
        finally:
            if owns_client:
                await client.aclose()

    app = Starlette(
        routes=[
            Route("/", index),
            Route("/api/state", get_state),
            Route("/api/cities", add_city, methods=["POST"]),
            Route("/api/cities/{city_id:int}", remove_city, methods=["DELETE"]),
            Route("/api/cities/{city_id:int}/weather", city_weather),
            Route("/api/selection/{city_id:int}", select_city, methods=["PUT"]),
            Route("/api/selection", clear_selection, methods=["DELETE"]),
            Route("/api/markers", list_markers),
            Route("/api/markers/{city_id:int}/click", click_marker, methods=["POST"]),
        ],
        lifespan=lifespan,
    )
    app.state.dashboard = dashboard
    return app


app = create_app()
