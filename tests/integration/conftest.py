"""Integration test fixtures for the HTTP surface."""

import pytest
from contextlib import asynccontextmanager
from httpx import ASGITransport, AsyncClient

from main import create_app


@pytest.fixture
def client_for():
    """
    Build an HTTP client around a fresh app.

    Usage: ``async with client_for(settings, ai_client) as client: ...``
    """

    @asynccontextmanager
    async def _client_for(settings, ai_client=None):
        app = create_app(settings, client=ai_client)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    return _client_for


@pytest.fixture
async def offline_client(client_for, offline_settings):
    async with client_for(offline_settings) as client:
        yield client


@pytest.fixture
async def online_client(client_for, online_settings, mock_ai_client):
    async with client_for(online_settings, mock_ai_client) as client:
        yield client
