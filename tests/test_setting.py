"""Tests for configuration settings."""

import pytest
from pydantic import ValidationError

from shortener.core.setting import Settings


class TestSettings:
    """Test Settings defaults and validation."""

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert 10000 <= settings.PORT <= 65535
        assert settings.PREFIX == f"http://127.0.0.1:{settings.PORT}/"
        assert settings.SAVE_INTERVAL_MS == 60000
        assert settings.RATE_LIMIT_ENABLED is True

    def test_prefix_gets_trailing_slash(self):
        settings = Settings(_env_file=None, PREFIX="https://sho.rt/x")
        assert settings.PREFIX == "https://sho.rt/x/"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("SAVE_INTERVAL_MS", "5000")
        settings = Settings(_env_file=None)
        assert settings.PORT == 9000
        assert settings.SAVE_INTERVAL_MS == 5000
        assert settings.PREFIX == "http://127.0.0.1:9000/"

    @pytest.mark.parametrize("overrides", [
        {"PREFIX": "ftp://sho.rt/"},
        {"PREFIX": "sho.rt"},
        {"SAVE_INTERVAL_MS": 999},
        {"PORT": 0},
        {"PORT": 65536},
        {"MAX_BODY_BYTES": 0},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **overrides)
