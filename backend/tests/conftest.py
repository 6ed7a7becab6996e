"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from logvault.core.config import Settings
from logvault.db.store import LogStore
from logvault.main import create_app
from logvault.schemas.logs import LogEntry, LogLevel


@pytest.fixture
def database_url(tmp_path):
    """File-backed SQLite database unique to each test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'logs.db'}"


@pytest_asyncio.fixture
async def store(database_url):
    log_store = LogStore(database_url, busy_timeout_s=30.0)
    await log_store.initialize()
    try:
        yield log_store
    finally:
        await log_store.close()


@pytest.fixture
def make_entry():
    """Build LogEntry objects with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "id": f"log-{counter['n']:04d}",
            "message": f"message {counter['n']}",
            "level": LogLevel.INFO,
            "timestamp": 1_700_000_000 + counter["n"],
            "service": "api",
            "component": "worker",
        }
        fields.update(overrides)
        return LogEntry(**fields)

    return _make


@pytest.fixture
def settings(database_url):
    return Settings(
        ENV="test",
        LOG_LEVEL="WARNING",
        DATABASE_URL=database_url,
        DEFAULT_PAGE_SIZE=50,
        MAX_PAYLOAD_KB=4,
    )


@pytest.fixture
def client(settings):
    """TestClient running the full lifespan (store init + close)."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
