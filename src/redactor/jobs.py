"""Scheduled job functions — the scrape run and its bookkeeping."""

from __future__ import annotations

import json
import logging
import random
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

import redactor.ingestion  # noqa: F401  registers the sites
from redactor.config import Config
from redactor.ingestion.adapter import SourceAdapter
from redactor.ingestion.coordinator import RunCoordinator, RunSummary
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.registry import get_site_builder
from redactor.storage.connection import get_connection

logger = logging.getLogger(__name__)


class HourlyRunGuard:
    """Lets at most one scrape start per UTC hour.

    The bucket key is ``YYYY-M-D-H`` of the trigger time in UTC. A trigger
    that lands in the bucket of the previous accepted run is refused.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_bucket: str | None = None

    @staticmethod
    def bucket_key(now: datetime) -> str:
        utc = now.astimezone(timezone.utc) if now.tzinfo else now.replace(tzinfo=timezone.utc)
        return f"{utc.year}-{utc.month}-{utc.day}-{utc.hour}"

    @property
    def last_bucket(self) -> str | None:
        return self._last_bucket

    def try_acquire(self, now: datetime | None = None) -> bool:
        key = self.bucket_key(now or datetime.now(timezone.utc))
        with self._lock:
            if key == self._last_bucket:
                return False
            self._last_bucket = key
            return True

    def reset(self) -> None:
        with self._lock:
            self._last_bucket = None


def load_sources(path: str) -> list[dict[str, Any]]:
    """Read the ``sites`` list from a sources.json file."""
    with open(path, encoding="utf-8") as f:
        sources = json.load(f)
    sites = sources.get("sites", [])
    if not isinstance(sites, list):
        raise ValueError(f"'sites' in {path} must be a list")
    return sites


def build_adapters(
    config: Config,
    fetcher: RateLimitedFetcher,
    sites: list[dict[str, Any]] | None = None,
) -> list[SourceAdapter]:
    """Instantiate the adapters of every enabled, known site.

    A site entry whose overrides are invalid is logged and skipped; the
    remaining sites are still built.
    """
    if sites is None:
        sites = load_sources(config.sources_config_path)

    adapters: list[SourceAdapter] = []
    for site_config in sites:
        site_type = site_config.get("type", "")
        builder = get_site_builder(site_type)
        if builder is None:
            logger.warning("Unknown site type '%s', skipping", site_type)
            continue
        if not site_config.get("enabled", True):
            logger.debug("Site '%s' disabled, skipping", site_type)
            continue
        overrides = dict(site_config)
        if site_type == "reuters" and config.reuters_cookie and "cookie" not in overrides:
            overrides["cookie"] = config.reuters_cookie
        try:
            adapters.extend(builder(fetcher, overrides))
        except Exception as exc:
            logger.error("Invalid configuration for site '%s', skipping: %s", site_type, exc)
    logger.info("Built %d adapter(s) from %d site entries", len(adapters), len(sites))
    return adapters


def _record_run(
    database_path: str,
    run_type: str,
    started_at: str,
    status: str,
    result: dict,
    error: str | None = None,
) -> None:
    """Insert a run record into the pipeline_runs table."""
    finished_at = datetime.now(timezone.utc).isoformat()
    with get_connection(database_path) as conn:
        conn.execute(
            "INSERT INTO pipeline_runs "
            "(id, run_type, started_at, finished_at, status, result, error) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                str(uuid.uuid4()),
                run_type,
                started_at,
                finished_at,
                status,
                json.dumps(result, ensure_ascii=False),
                error,
            ),
        )


def _run_status(summary: RunSummary | None, error: str | None) -> str:
    if error or summary is None or summary.error:
        return "error"
    if summary.results and len(summary.failed_adapters) == len(summary.results):
        return "error"
    if summary.failed_adapters:
        return "partial"
    return "success"


def run_scrapers(
    config: Config,
    guard: HourlyRunGuard | None = None,
    fetcher: RateLimitedFetcher | None = None,
    sleep: Callable[[float], None] = time.sleep,
    rng: random.Random | None = None,
) -> RunSummary | None:
    """Run every configured adapter once and record the run. Never raises.

    Returns None when the guard refuses the trigger, otherwise the run
    summary (an empty one if the adapters could not even be built).
    """
    if guard is not None and not guard.try_acquire():
        logger.info("Scrape already started this hour, skipping trigger")
        return None

    jitter = (rng or random.Random()).uniform(0, max(0, config.scrape_start_jitter_seconds))
    if jitter > 0:
        logger.debug("Delaying scrape start by %.1fs", jitter)
        sleep(jitter)

    started_at = datetime.now(timezone.utc).isoformat()
    owns_fetcher = fetcher is None
    summary: RunSummary | None = None
    error_msg = None
    try:
        if fetcher is None:
            fetcher = RateLimitedFetcher(timeout=config.http_timeout_seconds)
        adapters = build_adapters(config, fetcher)
        coordinator = RunCoordinator(
            adapters,
            config.database_path,
            fetcher,
            max_workers=config.max_parallel_adapters,
        )
        summary = coordinator.run_all()
        error_msg = summary.error
    except Exception as exc:
        logger.exception("Scrape run failed")
        error_msg = f"{type(exc).__name__}: {exc}"
    finally:
        if owns_fetcher and fetcher is not None:
            fetcher.close()

    status = _run_status(summary, error_msg)
    result = summary.to_dict() if summary is not None else {}
    try:
        _record_run(config.database_path, "scrape", started_at, status, result, error=error_msg)
    except Exception:
        logger.exception("Failed to record scrape run")

    if summary is None:
        summary = RunSummary(error=error_msg)
    return summary
