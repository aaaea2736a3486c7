# ABOUTME: Dependency container for the dashboard using Pydantic BaseModel.
# ABOUTME: Holds the httpx.AsyncClient and settings shared by the weather workflow and web shell.

import httpx
from pydantic import BaseModel, ConfigDict

from src.config import Settings


class DashboardDeps(BaseModel):
    """Dependencies injected into the dashboard controller."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    http_client: httpx.AsyncClient
    settings: Settings = Settings()


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared httpx client.

    No retry transport: every failed call is reported to the caller as-is.
    """
    return httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent, "Accept": "application/geo+json, application/json"},
        timeout=settings.http_timeout,
        follow_redirects=True,
    )
