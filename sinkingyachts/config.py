"""Configuration management for sinkingyachts."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .constants import (
    API_URL,
    DEFAULT_CACHE_PERIOD_HOURS,
    FEED_URL,
    RECONNECT_DELAY,
    REFRESH_INTERVAL,
    REQUEST_TIMEOUT,
)
from .models import StorageMode

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Client and example bot configuration."""

    # Client
    mode: StorageMode = StorageMode.ON_DEMAND
    identity: str = ""
    cache_period_hours: float = DEFAULT_CACHE_PERIOD_HOURS
    api_url: str = API_URL
    feed_url: str = FEED_URL
    refresh_interval_seconds: float = REFRESH_INTERVAL
    reconnect_delay_seconds: float = RECONNECT_DELAY
    request_timeout_seconds: float = REQUEST_TIMEOUT

    # Telegram example bot
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""

    # Health server
    health_host: str = "0.0.0.0"
    health_port: int = 8081
    health_enabled: bool = True

    log_level: str = "INFO"


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using default %s", name, raw, default)
        return default


def load_config() -> Config:
    """Load configuration from environment variables."""
    load_dotenv()

    mode_raw = os.getenv("SINKINGYACHTS_MODE", "on_demand")
    try:
        mode = StorageMode.parse(mode_raw)
    except ValueError as e:
        logger.warning("%s; falling back to on_demand", e)
        mode = StorageMode.ON_DEMAND

    return Config(
        mode=mode,
        identity=os.getenv("SINKINGYACHTS_IDENTITY", ""),
        cache_period_hours=_get_float("CACHE_PERIOD_HOURS", DEFAULT_CACHE_PERIOD_HOURS),
        api_url=os.getenv("SINKINGYACHTS_API_URL", API_URL),
        feed_url=os.getenv("SINKINGYACHTS_FEED_URL", FEED_URL),
        refresh_interval_seconds=_get_float("REFRESH_INTERVAL_SECONDS", REFRESH_INTERVAL),
        reconnect_delay_seconds=_get_float("RECONNECT_DELAY_SECONDS", RECONNECT_DELAY),
        request_timeout_seconds=_get_float("REQUEST_TIMEOUT_SECONDS", REQUEST_TIMEOUT),
        telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN", ""),
        telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID", ""),
        health_host=os.getenv("HEALTH_HOST", "0.0.0.0"),
        health_port=int(os.getenv("HEALTH_PORT", "8081")),
        health_enabled=os.getenv("HEALTH_ENABLED", "true").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def validate_config(config: Config) -> list[str]:
    """Validate required configuration and return list of error messages."""
    errors: list[str] = []
    if not (config.telegram_bot_token or "").strip():
        errors.append('No bot token has been configured. Set one as the "TELEGRAM_BOT_TOKEN" environment variable.')

    if config.cache_period_hours <= 0:
        errors.append("CACHE_PERIOD_HOURS must be positive")
    if config.refresh_interval_seconds <= 0:
        errors.append("REFRESH_INTERVAL_SECONDS must be positive")
    if config.reconnect_delay_seconds < 0:
        errors.append("RECONNECT_DELAY_SECONDS must not be negative")
    if config.request_timeout_seconds <= 0:
        errors.append("REQUEST_TIMEOUT_SECONDS must be positive")

    if not (config.telegram_chat_id or "").strip():
        # Messages from every chat are still moderated, but feed announcements have nowhere to go.
        logger.info("No TELEGRAM_CHAT_ID configured; feed announcements will be disabled")

    return errors
