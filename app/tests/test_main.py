import pytest
from httpx import AsyncClient

import app.main as main_module

@pytest.mark.asyncio
async def test_root(test_client: AsyncClient):
    response = await test_client.get("/")

    assert response.status_code == 200
    assert response.json()["docs"] == "/api/docs"

@pytest.mark.asyncio
async def test_health_check(test_client: AsyncClient, test_engine, monkeypatch):
    """The rate-limited health endpoint reports the database state"""
    monkeypatch.setattr(main_module, "engine", test_engine)

    response = await test_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "connected"
