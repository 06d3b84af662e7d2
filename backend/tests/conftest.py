"""
SVG Holder Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
       Every test gets its own SQLite file under tmp_path, so tests never
       share records.

Fixture Hierarchy:
    test_settings ── database ──┬── svg_service
                                └── app ──┬── test_client (raw HTTP)
                                          └── api_client  (SvgApiClient)
    sample_svg_bytes: small well-formed SVG document
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.client.api_client import SvgApiClient
from app.config import Settings
from app.database import Database
from app.main import create_app
from app.services.svg_service import SvgService
from app.services.validation import SvgValidator


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'svgholder_test.db'}",
        environment="test",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings) -> AsyncGenerator[Database, None]:
    """
    A Database with the schema created.

    ASGITransport does not run the app lifespan, so tables are created here
    rather than through DB_AUTO_CREATE.
    """
    db = Database(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def svg_service(database, test_settings) -> SvgService:
    return SvgService(database, SvgValidator(test_settings.max_file_size))


@pytest.fixture
def app(test_settings, database):
    return create_app(test_settings, database)


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def api_client(app) -> AsyncGenerator[SvgApiClient, None]:
    """SvgApiClient wired straight into the app (no network)."""
    async with SvgApiClient("http://test/api", transport=ASGITransport(app=app)) as client:
        yield client


@pytest.fixture
def sample_svg_bytes() -> bytes:
    """A tiny but well-formed SVG document."""
    return (
        b'<?xml version="1.0" encoding="UTF-8"?>\n'
        b'<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24">'
        b'<circle cx="12" cy="12" r="10" fill="#3b82f6"/></svg>'
    )
