"""
Tests for environment-driven settings.
"""
import pytest

from utils.settings import DEFAULT_MAX_BODY_SIZE, Settings, get_settings

ENV_VARS = ["API_PREFIX", "LOG_LEVEL", "MAX_BODY_SIZE", "RATE_LIMIT", "SEED_EXAMPLE_EXPENSES", "HOST", "PORT"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestGetSettings:
    """Test reading settings from the environment."""

    def test_defaults(self):
        settings = get_settings()
        assert settings == Settings()
        assert settings.api_prefix == "/api"
        assert settings.max_body_size == DEFAULT_MAX_BODY_SIZE
        assert settings.rate_limit is None
        assert settings.seed_example_expenses is True

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("API_PREFIX", "/v2/")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("MAX_BODY_SIZE", "2048")
        monkeypatch.setenv("RATE_LIMIT", "15/minute")
        monkeypatch.setenv("SEED_EXAMPLE_EXPENSES", "false")
        monkeypatch.setenv("PORT", "9000")
        settings = get_settings()
        assert settings.api_prefix == "/v2"
        assert settings.log_level == "DEBUG"
        assert settings.max_body_size == 2048
        assert settings.rate_limit == "15/minute"
        assert settings.seed_example_expenses is False
        assert settings.port == 9000

    def test_empty_rate_limit_disables_limiter(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT", "")
        assert get_settings().rate_limit is None

    def test_invalid_integer(self, monkeypatch):
        monkeypatch.setenv("MAX_BODY_SIZE", "lots")
        with pytest.raises(ValueError, match="MAX_BODY_SIZE"):
            get_settings()


class TestSettingsValidation:
    """Test Settings invariants."""

    def test_non_positive_body_size(self):
        with pytest.raises(ValueError):
            Settings(max_body_size=0)

    def test_prefix_must_start_with_slash(self):
        with pytest.raises(ValueError):
            Settings(api_prefix="api")
