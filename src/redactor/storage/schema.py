"""Database schema definition and initialization."""

from __future__ import annotations

import logging

from redactor.storage.connection import get_connection

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """\
-- Canonical articles, one row per unique URL fingerprint
CREATE TABLE IF NOT EXISTS articles (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    source_id       INTEGER NOT NULL,
    title           TEXT NOT NULL CHECK (length(trim(title)) > 0),
    description     TEXT,
    author          TEXT,
    section         TEXT,
    tags            TEXT NOT NULL DEFAULT '[]',     -- JSON array
    content         TEXT NOT NULL,
    image_url       TEXT,
    url             TEXT NOT NULL,
    published_at    TEXT,
    hash            TEXT NOT NULL UNIQUE,
    scraped_at      TEXT NOT NULL
);

-- Scraper run tracking
CREATE TABLE IF NOT EXISTS pipeline_runs (
    id          TEXT PRIMARY KEY,
    run_type    TEXT NOT NULL CHECK (run_type IN ('scrape')),
    started_at  TEXT NOT NULL,
    finished_at TEXT NOT NULL,
    status      TEXT NOT NULL CHECK (status IN ('success', 'partial', 'error')),
    result      TEXT NOT NULL,   -- JSON
    error       TEXT
);

-- Indexes: articles
CREATE INDEX IF NOT EXISTS idx_articles_source_id ON articles(source_id);
CREATE INDEX IF NOT EXISTS idx_articles_published_at ON articles(published_at);
CREATE INDEX IF NOT EXISTS idx_articles_scraped_at ON articles(scraped_at);

-- Indexes: pipeline_runs
CREATE INDEX IF NOT EXISTS idx_pipeline_runs_started_at ON pipeline_runs(started_at);
"""


def init_db(database_path: str) -> None:
    """Create all tables and indexes if they do not already exist."""
    with get_connection(database_path) as conn:
        conn.executescript(_SCHEMA_SQL)
    logger.info("Database initialized at %s", database_path)
