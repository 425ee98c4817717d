"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class Config:
    """Application configuration. All values sourced from environment variables."""

    # Required
    database_path: str

    # Optional: Ingestion
    sources_config_path: str = "./config/sources.json"
    max_parallel_adapters: int = 1
    http_timeout_seconds: float = 30.0
    reuters_cookie: str = ""

    # Optional: Schedule
    scrape_schedule_cron: str = "0 0,3,6,9,12,15,18,21 * * *"
    scrape_timezone: str = "UTC"
    scrape_start_jitter_seconds: int = 15
    run_on_start: bool = False

    # Optional: Web
    web_enabled: bool = True
    web_host: str = "0.0.0.0"
    web_port: int = 8080

    # Optional: Application
    log_level: str = "INFO"
    log_format: str = "json"
    app_env: str = "production"


_REQUIRED_VARS = [
    "DATABASE_PATH",
]

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE_VALUES


def load_config(env_path: str | Path | None = None) -> Config:
    """Load configuration from environment variables.

    Loads a .env file if present (for local development), then validates
    that all required variables are set. Raises ValueError listing any
    missing variables or a malformed schedule.
    """
    load_dotenv(dotenv_path=env_path)

    missing = [var for var in _REQUIRED_VARS if not os.environ.get(var)]
    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    cron = os.environ.get("SCRAPE_SCHEDULE_CRON", "0 0,3,6,9,12,15,18,21 * * *")
    if len(cron.split()) != 5:
        raise ValueError(f"SCRAPE_SCHEDULE_CRON must have 5 fields, got {cron!r}")

    max_parallel = int(os.environ.get("MAX_PARALLEL_ADAPTERS", "1"))
    if max_parallel < 1:
        raise ValueError(f"MAX_PARALLEL_ADAPTERS must be >= 1, got {max_parallel}")

    return Config(
        # Required
        database_path=os.environ["DATABASE_PATH"],
        # Optional: Ingestion
        sources_config_path=os.environ.get("SOURCES_CONFIG_PATH", "./config/sources.json"),
        max_parallel_adapters=max_parallel,
        http_timeout_seconds=float(os.environ.get("HTTP_TIMEOUT_SECONDS", "30")),
        reuters_cookie=os.environ.get("REUTERS_COOKIE", ""),
        # Optional: Schedule
        scrape_schedule_cron=cron,
        scrape_timezone=os.environ.get("SCRAPE_TIMEZONE", "UTC"),
        scrape_start_jitter_seconds=int(os.environ.get("SCRAPE_START_JITTER_SECONDS", "15")),
        run_on_start=_env_bool("RUN_ON_START", False),
        # Optional: Web
        web_enabled=_env_bool("WEB_ENABLED", True),
        web_host=os.environ.get("WEB_HOST", "0.0.0.0"),
        web_port=int(os.environ.get("WEB_PORT", "8080")),
        # Optional: Application
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_format=os.environ.get("LOG_FORMAT", "json"),
        app_env=os.environ.get("APP_ENV", "production"),
    )
