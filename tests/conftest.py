# ABOUTME: Shared test fixtures for the weather dashboard test suite.
# ABOUTME: Provides canned weather.gov routes for the seed cities.

import httpx
import pytest

from tests.fakes import nws_routes


@pytest.fixture
def seed_routes() -> dict[str, httpx.Response]:
    """weather.gov responses for both seed cities."""
    return {**nws_routes(40.7128, -74.006, office="OKX"), **nws_routes(34.0522, -118.2437, office="LOX")}
