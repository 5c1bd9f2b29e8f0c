import asyncio

import pytest
from fastapi.testclient import TestClient

from pages_api.app.core.config import Settings
from pages_api.app.core.db import Database
from tests.support import factories as test_factories


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Ensure a clean env for tests with per-test sqlite files."""
    monkeypatch.setenv("DATABASE_URL", str(tmp_path / "test.sqlite"))
    monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "demo-cloud")
    monkeypatch.setenv("CLOUDINARY_API_KEY", "test-key")
    monkeypatch.setenv("CLOUDINARY_API_SECRET", "test-secret")
    monkeypatch.setenv("CLOUDINARY_BASE_URL", "https://cloudinary.test/v1_1")
    monkeypatch.delenv("API_TOKEN", raising=False)
    monkeypatch.delenv("DEFAULT_PAGE_SIZE", raising=False)
    monkeypatch.delenv("MAX_PAGE_SIZE", raising=False)
    monkeypatch.setenv("DEBUG", "false")
    yield


@pytest.fixture
def settings():
    return Settings.from_env()


@pytest.fixture
def db(settings):
    database = Database(settings.database_url).open()
    database.init()
    try:
        yield database
    finally:
        database.close()


@pytest.fixture
def run():
    """Run a service coroutine to completion."""
    return asyncio.run


@pytest.fixture
def app(settings):
    from pages_api.app.main import create_app

    return create_app(settings)


@pytest.fixture
def client(app):
    # Entering the client runs the lifespan, which opens the database.
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def factories():
    yield test_factories
