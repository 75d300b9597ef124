import pytest

from app.utils.config import get_settings
from app.utils.exceptions import ConfigurationError

ENV_NAMES = [
    "LOG_LEVEL",
    "RATE_LIMIT_MAX_REQUESTS",
    "RATE_LIMIT_WINDOW_SECONDS",
    "MAX_BODY_BYTES",
    "SLOW_REQUEST_THRESHOLD",
    "CATALOG_PATH",
    "SKIP_INVALID_RECORDS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "testing")


class TestSettings:
    """Environment-driven configuration"""

    def test_defaults(self):
        settings = get_settings()

        assert settings.environment == "testing"
        assert settings.rate_limit_max_requests == 25
        assert settings.rate_limit_window_seconds == 60
        assert settings.max_body_bytes == 1024 * 1024
        assert settings.catalog_path is None
        assert settings.skip_invalid_records is True

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "5")
        monkeypatch.setenv("RATE_LIMIT_WINDOW_SECONDS", "2.5")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("SKIP_INVALID_RECORDS", "false")
        monkeypatch.setenv("CATALOG_PATH", "/data/catalog.json")

        settings = get_settings()

        assert settings.rate_limit_max_requests == 5
        assert settings.rate_limit_window_seconds == 2.5
        assert settings.log_level == "DEBUG"
        assert settings.skip_invalid_records is False
        assert settings.catalog_path == "/data/catalog.json"

    def test_blank_values_fall_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "  ")

        assert get_settings().rate_limit_max_requests == 25

    @pytest.mark.parametrize("name,value", [
        ("RATE_LIMIT_MAX_REQUESTS", "0"),
        ("RATE_LIMIT_MAX_REQUESTS", "lots"),
        ("RATE_LIMIT_WINDOW_SECONDS", "-1"),
        ("ENVIRONMENT", "staging"),
        ("LOG_LEVEL", "LOUD"),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigurationError) as exc_info:
            get_settings()

        assert exc_info.value.details["config_key"] == name
