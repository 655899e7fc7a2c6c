"""Integration test fixtures for Interview Recorder.

Provides an async HTTP client and a sync TestClient bound to an application
whose uploads, logs and external tools all live under tmp_path.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient

from interview_recorder.api.app import create_app


@pytest.fixture
def app(settings):
    """Create a fresh FastAPI application instance."""
    return create_app(settings)


@pytest.fixture
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def test_client(app):
    """Synchronous TestClient, used where the blocking UI client talks to the app."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
async def session_folder(async_client):
    """Folder of a freshly started session."""
    resp = await async_client.post(
        "/api/session/start", json={"token": "12345", "userName": "Ada Lovelace"}
    )
    assert resp.status_code == 200
    return resp.json()["folder"]
