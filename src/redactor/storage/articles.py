"""Article store — the idempotent, first-write-wins persistence boundary."""

from __future__ import annotations

import enum
import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator

from redactor.ingestion.errors import PersistenceError
from redactor.ingestion.models import CanonicalArticle
from redactor.storage.connection import connect

logger = logging.getLogger(__name__)


class UpsertResult(str, enum.Enum):
    INSERTED = "inserted"
    DUPLICATE = "duplicate"


class ArticleStore:
    """Writes canonical articles keyed by their URL fingerprint.

    One store wraps one SQLite connection for the length of an adapter run.
    Use ``ArticleStore.open(path)`` so the connection is released on both
    success and failure.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @classmethod
    @contextmanager
    def open(cls, database_path: str) -> Generator[ArticleStore, None, None]:
        try:
            conn = connect(database_path)
        except sqlite3.Error as exc:
            raise PersistenceError(f"cannot open article store at {database_path}: {exc}") from exc
        try:
            yield cls(conn)
        finally:
            conn.close()

    def upsert(self, article: CanonicalArticle) -> UpsertResult:
        """Insert the article unless its fingerprint is already stored.

        Existing rows are never updated. Raises PersistenceError for any
        database failure other than the expected duplicate.
        """
        try:
            with self._conn:
                cursor = self._conn.execute(
                    "INSERT INTO articles "
                    "(source_id, title, description, author, section, tags, content, "
                    "image_url, url, published_at, hash, scraped_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
                    "ON CONFLICT(hash) DO NOTHING",
                    (
                        article.source_id,
                        article.title,
                        article.description,
                        article.author,
                        article.section,
                        json.dumps(list(article.tags), ensure_ascii=False),
                        article.content,
                        article.image_url,
                        article.url,
                        article.published_at,
                        article.content_hash,
                        datetime.now(timezone.utc).isoformat(),
                    ),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"failed to store {article.url}: {exc}") from exc

        if cursor.rowcount == 0:
            logger.debug("Duplicate (hash): %s", article.url)
            return UpsertResult.DUPLICATE
        logger.debug("Stored: %s", article.title)
        return UpsertResult.INSERTED

    def get(self, content_hash: str) -> sqlite3.Row | None:
        return self._conn.execute(
            "SELECT * FROM articles WHERE hash = ?", (content_hash,)
        ).fetchone()

    def count(self, source_id: int | None = None) -> int:
        if source_id is None:
            row = self._conn.execute("SELECT COUNT(*) FROM articles").fetchone()
        else:
            row = self._conn.execute(
                "SELECT COUNT(*) FROM articles WHERE source_id = ?", (source_id,)
            ).fetchone()
        return row[0]
