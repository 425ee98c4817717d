"""Application entry point — runs the scrape scheduler and the web server in one process."""

from __future__ import annotations

import json
import logging
import sys
import threading
from contextlib import asynccontextmanager

import uvicorn
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from redactor.config import Config, load_config
from redactor.jobs import HourlyRunGuard, run_scrapers
from redactor.storage import init_db
from redactor.web.app import create_app
from redactor.web.config import WebConfig

logger = logging.getLogger("redactor")


def _setup_logging(log_level: str, log_format: str) -> None:
    """Configure root logger based on config."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps(
                {
                    "time": "%(asctime)s",
                    "level": "%(levelname)s",
                    "logger": "%(name)s",
                    "message": "%(message)s",
                }
            )
        )
    else:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def _cron_trigger(expression: str, timezone: str) -> CronTrigger:
    minute, hour, day, month, day_of_week = expression.split()
    return CronTrigger(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=day_of_week,
        timezone=timezone,
    )


def _build_scheduler(config: Config, guard: HourlyRunGuard, scheduler=None):
    """Create (or fill) a scheduler with the scrape job."""
    if scheduler is None:
        scheduler = BackgroundScheduler()

    scheduler.add_job(
        run_scrapers,
        trigger=_cron_trigger(config.scrape_schedule_cron, config.scrape_timezone),
        args=[config, guard],
        id="scrape",
        name="Scrape all news sites",
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def main() -> None:
    """Load config, set up logging, and start the scheduler (and web server)."""
    config = load_config()

    _setup_logging(config.log_level, config.log_format)

    logger.info(
        "Redactor starting (env=%s, db=%s, schedule=%r)",
        config.app_env,
        config.database_path,
        config.scrape_schedule_cron,
    )

    init_db(config.database_path)
    guard = HourlyRunGuard()

    def _initial_run():
        """Run the scrapers once at startup in a background thread."""
        logger.info("Running initial scrape")
        run_scrapers(config, guard)

    if not config.web_enabled:
        scheduler = _build_scheduler(config, guard, BlockingScheduler())
        if config.run_on_start:
            threading.Thread(target=_initial_run, daemon=True).start()
        logger.info("Scheduler starting (web API disabled)")
        try:
            scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            logger.info("Scheduler stopped")
        return

    scheduler = _build_scheduler(config, guard)
    web_config = WebConfig(
        database_path=config.database_path,
        web_host=config.web_host,
        web_port=config.web_port,
    )

    @asynccontextmanager
    async def lifespan(app):
        logger.info("Scheduler starting")
        scheduler.start()
        if config.run_on_start:
            # Run in background so the web server is available immediately
            threading.Thread(target=_initial_run, daemon=True).start()
        yield
        logger.info("Scheduler shutting down")
        scheduler.shutdown(wait=False)

    app = create_app(web_config, lifespan=lifespan)

    uvicorn.run(app, host=web_config.web_host, port=web_config.web_port)


if __name__ == "__main__":
    main()
