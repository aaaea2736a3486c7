# ABOUTME: Integration tests for the Starlette web shell.
# ABOUTME: Drives the JSON API with TestClient over a mocked upstream HTTP client.

import pytest
from starlette.requests import Request
from starlette.testclient import TestClient

from src.config import Settings
from src.web import create_app, extract_query, render_index
from tests.fakes import GEOCODING_URL, geocode_route, make_response, make_routing_client, nws_routes

MIAMI_ROUTES = {
    **geocode_route("Miami, FL, United States", "25.7617", "-80.1918"),
    **nws_routes(25.7617, -80.1918, office="MFL"),
}


@pytest.fixture
def client(seed_routes):
    app = create_app(Settings(google_maps_api_key="test-key"), make_routing_client({**seed_routes, **MIAMI_ROUTES}))
    with TestClient(app) as test_client:
        yield test_client


class TestState:
    def test_startup_loads_seed_weather(self, client):
        """The app batch-loads seed city weather during startup.

        Implementation: Reads /api/state after the lifespan has run.
        Passing implies: Both seed cities have weather when the page first asks.
        """
        state = client.get("/api/state").json()

        assert [c["label"] for c in state["cities"]] == ["New York, NY", "Los Angeles, CA"]
        assert not any(c["loading"] for c in state["cities"])
        assert state["loading"] is False

    def test_index_embeds_maps_key(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert 'const MAPS_API_KEY = "test-key";' in resp.text
        assert '"zoom": 4' in resp.text


class TestCities:
    def test_add_city(self, client):
        """POST /api/cities adds a resolved city and returns the new state.

        Implementation: Submits "Miami, FL" against mocked upstreams.
        Passing implies: The web shell drives the full add-city workflow.
        """
        resp = client.post("/api/cities", json={"query": "Miami, FL"})

        assert resp.status_code == 201
        labels = [c["label"] for c in resp.json()["cities"]]
        assert labels[-1] == "Miami, FL"
        assert len(client.get("/api/markers").json()) == 3

    def test_add_empty_query(self, client):
        resp = client.post("/api/cities", json={"query": "  "})
        assert resp.status_code == 400
        assert resp.json()["error"] == 'Please enter a city and state (e.g., "Miami, FL")'

    def test_add_with_malformed_geocode(self, seed_routes):
        app = create_app(Settings(), make_routing_client({**seed_routes, GEOCODING_URL: make_response({"error": "x"})}))
        with TestClient(app) as test_client:
            resp = test_client.post("/api/cities", json={"query": "Miami, FL"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Unable to find location"

    def test_add_duplicate(self, client):
        client.post("/api/cities", json={"query": "Miami, FL"})
        resp = client.post("/api/cities", json={"query": "Miami, FL"})

        assert resp.status_code == 400
        assert resp.json()["error"] == "Miami, FL is already on the list"
        assert client.get("/api/state").json()["error"] == "Miami, FL is already on the list"

    def test_remove_city(self, client):
        """DELETE /api/cities/{id} removes the city, its weather and its marker.

        Implementation: Removes New York (id 1).
        Passing implies: The list, detail endpoint and markers all forget the city.
        """
        resp = client.delete("/api/cities/1")

        assert resp.status_code == 200
        assert [c["label"] for c in resp.json()["cities"]] == ["Los Angeles, CA"]
        assert client.get("/api/cities/1/weather").status_code == 404
        assert [m["city_id"] for m in client.get("/api/markers").json()] == [2]

    def test_remove_unknown_city(self, client):
        assert client.delete("/api/cities/999").status_code == 404

    def test_city_weather_detail(self, client):
        detail = client.get("/api/cities/2/weather").json()
        assert detail["label"] == "Los Angeles, CA"
        assert detail["temperature_f"] == 71  # 21.5 C observed
        assert len(detail["forecast"]) == 3


class TestSelection:
    def test_select_and_clear(self, client):
        selected = client.put("/api/selection/2").json()["selected"]
        assert selected["label"] == "Los Angeles, CA"

        assert client.delete("/api/selection").json()["selected"] is None

    def test_select_unknown(self, client):
        assert client.put("/api/selection/999").status_code == 404

    def test_marker_click_selects(self, client):
        resp = client.post("/api/markers/1/click")
        assert resp.json()["selected"]["label"] == "New York, NY"
        assert client.post("/api/markers/999/click").status_code == 404


class TestHelpers:
    def test_render_index_without_key(self):
        html = render_index(Settings())
        assert 'const MAPS_API_KEY = "";' in html

    def test_page_escapes_quotes_in_attributes(self):
        """The page escapes quotes before putting upstream text into HTML attributes.

        Implementation: Inspects the rendered escapeHtml helper.
        Passing implies: An icon URL containing a quote cannot break out of src="...".
        """
        html = render_index(Settings())
        assert '.replace(/"/g, "&quot;")' in html
        assert ".replace(/'/g, \"&#39;\")" in html

    @pytest.mark.asyncio
    async def test_extract_query_tolerates_bad_bodies(self):
        """extract_query returns "" for bodies that are not a JSON object with a string query.

        Implementation: Feeds raw ASGI requests with assorted bodies.
        Passing implies: Malformed requests become empty-query input errors.
        """

        async def run(body: bytes) -> str:
            async def receive():
                return {"type": "http.request", "body": body, "more_body": False}

            return await extract_query(Request({"type": "http", "method": "POST", "headers": []}, receive))

        assert await run(b"not json") == ""
        assert await run(b"[1, 2]") == ""
        assert await run(b'{"query": 5}') == ""
        assert await run(b'{"query": "Miami, FL"}') == "Miami, FL"


class TestLifespan:
    @pytest.mark.asyncio
    async def test_owned_client_closed_when_shutdown_follows_error(self, monkeypatch):
        """The lifespan closes the client it created even if the app exits with an error.

        Implementation: Substitutes the created client with a mock and raises inside the lifespan.
        Passing implies: The HTTP connection pool is released on every shutdown path.
        """
        http_client = make_routing_client({})
        monkeypatch.setattr("src.web.create_http_client", lambda settings: http_client)
        app = create_app(Settings())

        with pytest.raises(RuntimeError):
            async with app.router.lifespan_context(app):
                raise RuntimeError("server crashed")

        http_client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self):
        http_client = make_routing_client({})
        app = create_app(Settings(), http_client)

        async with app.router.lifespan_context(app):
            pass

        http_client.aclose.assert_not_awaited()
