"""Tests for redactor.config."""

import os

import pytest

from redactor.config import load_config

_CONFIG_VARS = (
    "DATABASE_PATH", "SOURCES_CONFIG_PATH", "MAX_PARALLEL_ADAPTERS", "HTTP_TIMEOUT_SECONDS",
    "REUTERS_COOKIE", "SCRAPE_SCHEDULE_CRON", "SCRAPE_TIMEZONE", "SCRAPE_START_JITTER_SECONDS",
    "RUN_ON_START", "WEB_ENABLED", "WEB_HOST", "WEB_PORT", "LOG_LEVEL", "LOG_FORMAT", "APP_ENV",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove all config-related env vars before each test."""
    for key in list(os.environ):
        if key in _CONFIG_VARS:
            monkeypatch.delenv(key, raising=False)
    # Prevent .env file from re-setting variables during tests
    monkeypatch.setattr("redactor.config.load_dotenv", lambda *a, **kw: None)


def test_missing_required_vars_raises():
    """load_config raises ValueError naming the missing variable."""
    with pytest.raises(ValueError, match="DATABASE_PATH"):
        load_config()


def test_load_config_defaults(monkeypatch):
    """Config loads with only DATABASE_PATH set, with correct defaults."""
    monkeypatch.setenv("DATABASE_PATH", "./test.db")

    config = load_config()

    assert config.database_path == "./test.db"
    assert config.sources_config_path == "./config/sources.json"
    assert config.max_parallel_adapters == 1
    assert config.http_timeout_seconds == 30.0
    assert config.reuters_cookie == ""
    assert config.scrape_schedule_cron == "0 0,3,6,9,12,15,18,21 * * *"
    assert config.scrape_timezone == "UTC"
    assert config.scrape_start_jitter_seconds == 15
    assert config.run_on_start is False
    assert config.web_enabled is True
    assert config.web_host == "0.0.0.0"
    assert config.web_port == 8080
    assert config.log_level == "INFO"
    assert config.log_format == "json"
    assert config.app_env == "production"


def test_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_PATH", "/data/news.db")
    monkeypatch.setenv("MAX_PARALLEL_ADAPTERS", "4")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("REUTERS_COOKIE", "session=abc")
    monkeypatch.setenv("SCRAPE_SCHEDULE_CRON", "*/30 * * * *")
    monkeypatch.setenv("SCRAPE_TIMEZONE", "America/Santiago")
    monkeypatch.setenv("WEB_PORT", "9000")

    config = load_config()

    assert config.max_parallel_adapters == 4
    assert config.http_timeout_seconds == 12.5
    assert config.reuters_cookie == "session=abc"
    assert config.scrape_schedule_cron == "*/30 * * * *"
    assert config.scrape_timezone == "America/Santiago"
    assert config.web_port == 9000


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("1", True), ("YES", True), ("false", False), ("0", False), ("", False)],
)
def test_run_on_start_parsing(monkeypatch, raw, expected):
    monkeypatch.setenv("DATABASE_PATH", "./test.db")
    monkeypatch.setenv("RUN_ON_START", raw)
    assert load_config().run_on_start is expected


def test_web_can_be_disabled(monkeypatch):
    monkeypatch.setenv("DATABASE_PATH", "./test.db")
    monkeypatch.setenv("WEB_ENABLED", "false")
    assert load_config().web_enabled is False


def test_malformed_cron_raises(monkeypatch):
    monkeypatch.setenv("DATABASE_PATH", "./test.db")
    monkeypatch.setenv("SCRAPE_SCHEDULE_CRON", "0 * *")
    with pytest.raises(ValueError, match="SCRAPE_SCHEDULE_CRON"):
        load_config()


def test_zero_parallelism_raises(monkeypatch):
    monkeypatch.setenv("DATABASE_PATH", "./test.db")
    monkeypatch.setenv("MAX_PARALLEL_ADAPTERS", "0")
    with pytest.raises(ValueError, match="MAX_PARALLEL_ADAPTERS"):
        load_config()


def test_config_is_frozen(monkeypatch):
    """Config is immutable after creation."""
    monkeypatch.setenv("DATABASE_PATH", "./test.db")

    config = load_config()

    with pytest.raises(AttributeError):
        config.database_path = "/other.db"
