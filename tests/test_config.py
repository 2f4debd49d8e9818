"""Tests for environment-driven configuration."""

import pytest

from sinkingyachts import config as config_module
from sinkingyachts.config import Config, load_config, validate_config
from sinkingyachts.constants import API_URL, DEFAULT_CACHE_PERIOD_HOURS, REFRESH_INTERVAL
from sinkingyachts.models import StorageMode

_ENV_VARS = (
    "SINKINGYACHTS_MODE",
    "SINKINGYACHTS_IDENTITY",
    "SINKINGYACHTS_API_URL",
    "SINKINGYACHTS_FEED_URL",
    "CACHE_PERIOD_HOURS",
    "REFRESH_INTERVAL_SECONDS",
    "RECONNECT_DELAY_SECONDS",
    "REQUEST_TIMEOUT_SECONDS",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID",
    "HEALTH_HOST",
    "HEALTH_PORT",
    "HEALTH_ENABLED",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "load_dotenv", lambda *args, **kwargs: False)
    return monkeypatch


def test_load_config_defaults(clean_env):
    config = load_config()

    assert config.mode is StorageMode.ON_DEMAND
    assert config.api_url == API_URL
    assert config.cache_period_hours == DEFAULT_CACHE_PERIOD_HOURS
    assert config.refresh_interval_seconds == REFRESH_INTERVAL
    assert config.health_enabled is True
    assert config.log_level == "INFO"


def test_load_config_reads_environment(clean_env):
    clean_env.setenv("SINKINGYACHTS_MODE", "localws")
    clean_env.setenv("SINKINGYACHTS_IDENTITY", "Moderation Bot")
    clean_env.setenv("CACHE_PERIOD_HOURS", "0.5")
    clean_env.setenv("HEALTH_PORT", "9000")
    clean_env.setenv("HEALTH_ENABLED", "false")
    clean_env.setenv("LOG_LEVEL", "debug")

    config = load_config()

    assert config.mode is StorageMode.POLLING_FEED
    assert config.identity == "Moderation Bot"
    assert config.cache_period_hours == 0.5
    assert config.health_port == 9000
    assert config.health_enabled is False
    assert config.log_level == "DEBUG"


def test_unknown_mode_falls_back_to_on_demand(clean_env):
    clean_env.setenv("SINKINGYACHTS_MODE", "sometimes")

    assert load_config().mode is StorageMode.ON_DEMAND


def test_invalid_number_uses_default(clean_env):
    clean_env.setenv("REFRESH_INTERVAL_SECONDS", "often")

    assert load_config().refresh_interval_seconds == REFRESH_INTERVAL


def test_validate_config_requires_bot_token():
    errors = validate_config(Config())

    assert len(errors) == 1
    assert "TELEGRAM_BOT_TOKEN" in errors[0]


def test_validate_config_accepts_token_only():
    assert validate_config(Config(telegram_bot_token="123:abc")) == []


def test_validate_config_rejects_bad_timings():
    config = Config(
        telegram_bot_token="123:abc",
        cache_period_hours=0,
        refresh_interval_seconds=-1,
        reconnect_delay_seconds=-1,
        request_timeout_seconds=0,
    )

    errors = validate_config(config)

    assert len(errors) == 4
    assert any("CACHE_PERIOD_HOURS" in e for e in errors)
    assert any("RECONNECT_DELAY_SECONDS" in e for e in errors)
