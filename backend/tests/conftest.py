"""Test fixtures: a temporary shared directory, a file-backed SQLite store and an HTTP client."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from beamshare.config import Settings
from beamshare.main import create_app
from beamshare.services import Services


@pytest.fixture
def shared_dir(tmp_path):
    """Empty directory exposed to clients."""
    root = tmp_path / "shared"
    root.mkdir()
    return root


@pytest.fixture
def settings(tmp_path, shared_dir) -> Settings:
    return Settings(
        shared_dir=str(shared_dir),
        database_path=str(tmp_path / "db" / "beamshare.db"),
        stats_refresh_interval=0.2,
        stats_keepalive_interval=0.1,
        stats_read_deadline=5.0,
    )


@pytest_asyncio.fixture
async def services(settings: Settings):
    """Started services on a fresh store; disposed after the test."""
    svc = Services(settings)
    await svc.startup()
    yield svc
    await svc.shutdown()


@pytest_asyncio.fixture
async def stats_store(services: Services):
    return services.stats_store


@pytest_asyncio.fixture
async def file_service(services: Services):
    return services.file_service


@pytest_asyncio.fixture
async def app(settings: Settings):
    """Application with its services started (ASGITransport skips the lifespan)."""
    application = create_app(settings)
    await application.state.services.startup()
    yield application
    await application.state.services.shutdown()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
