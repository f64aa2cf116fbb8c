import pytest
from httpx import AsyncClient

from thinky import __version__

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


async def test_health_check(client: AsyncClient):
    response = await client.get("http://localhost/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_version(client: AsyncClient):
    response = await client.get("http://localhost/version")
    assert response.status_code == 200
    assert response.json() == {"version": __version__}


async def test_status(client: AsyncClient):
    response = await client.get("/api/_status")
    assert response.status_code == 200
    data = response.json()
    assert data["serverReady"] is True
    assert data["missing"] == []
    assert data["environment"] == "development"
    assert data["productionUrlPresent"] is False


async def test_api_responses_are_not_cached(client: AsyncClient):
    response = await client.get("/api/_status")
    assert response.headers["cache-control"] == "no-store"
