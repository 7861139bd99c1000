"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from shortener.core.rate_limit import limiter
from shortener.core.setting import Settings
from shortener.db.json_adapter import JsonFileAdapter
from shortener.main import create_app
from shortener.services.link_store import LinkStore

FIXED_NOW = 1_700_000_000_000


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep deployment environment variables out of the tests."""
    for name in ("PORT", "HOST", "PREFIX", "SAVE_INTERVAL_MS", "SNAPSHOT_PATH",
                 "MAX_URL_LENGTH", "MAX_BODY_BYTES", "RATE_LIMIT_ENABLED", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store():
    """Empty link store with a fixed clock."""
    return LinkStore(clock=lambda: FIXED_NOW)


@pytest.fixture
def snapshot_path(tmp_path):
    return tmp_path / "urls.json"


@pytest.fixture
def adapter(snapshot_path):
    return JsonFileAdapter(snapshot_path)


@pytest.fixture
def settings_factory(snapshot_path):
    """Build Settings for tests: fixed port, temporary snapshot, no rate limits."""
    def make_settings(**overrides) -> Settings:
        values = {
            "PORT": 8080,
            "SNAPSHOT_PATH": snapshot_path,
            "RATE_LIMIT_ENABLED": False,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return make_settings


@pytest.fixture
def settings(settings_factory):
    return settings_factory()


@pytest.fixture
def client(settings):
    """Test client with the application lifespan (restore + final flush) running."""
    with TestClient(create_app(settings), follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def reset_limiter():
    """Clear rate limit counters around tests that enable the limiter."""
    limiter.reset()
    yield limiter
    limiter.reset()
    limiter.enabled = False
