"""Tests for redactor.storage — schema, connection and the article store."""

from __future__ import annotations

import json
import sqlite3

import pytest

from redactor.ingestion.errors import PersistenceError
from redactor.ingestion.models import CanonicalArticle
from redactor.storage import ArticleStore, UpsertResult
from redactor.storage.connection import get_connection
from redactor.storage.schema import init_db

EXPECTED_TABLES = {"articles", "pipeline_runs"}

EXPECTED_INDEXES = {
    "idx_articles_source_id",
    "idx_articles_published_at",
    "idx_articles_scraped_at",
    "idx_pipeline_runs_started_at",
}


@pytest.fixture()
def db_path(tmp_path):
    """Return a database path inside a temporary directory."""
    return str(tmp_path / "test.db")


@pytest.fixture()
def initialized_db(db_path):
    """Initialize the database and return the path."""
    init_db(db_path)
    return db_path


def _article(url="https://www.example.cl/nota-1", **overrides) -> CanonicalArticle:
    fields = {
        "source_id": 1,
        "title": "Titular",
        "url": url,
        "content": "Cuerpo de la nota.",
        "tags": ("Chile", "Economía"),
        "published_at": "2025-06-15T10:00:00+00:00",
    }
    fields.update(overrides)
    return CanonicalArticle(**fields)


# --- Table and index existence ---


def test_init_db_creates_all_tables(initialized_db):
    with get_connection(initialized_db) as conn:
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
        ).fetchall()
        table_names = {row["name"] for row in rows}
    assert EXPECTED_TABLES == table_names


def test_init_db_is_idempotent(db_path):
    init_db(db_path)
    init_db(db_path)  # Should not raise


def test_init_db_creates_indexes(initialized_db):
    with get_connection(initialized_db) as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='index' AND name LIKE 'idx_%'").fetchall()
        index_names = {row["name"] for row in rows}
    assert EXPECTED_INDEXES == index_names


def test_wal_mode_enabled(initialized_db):
    with get_connection(initialized_db) as conn:
        mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
    assert mode == "wal"


def test_get_connection_rolls_back_on_error(initialized_db):
    with pytest.raises(RuntimeError):
        with get_connection(initialized_db) as conn:
            conn.execute(
                "INSERT INTO pipeline_runs (id, run_type, started_at, finished_at, status, result) "
                "VALUES ('r1', 'scrape', 'a', 'b', 'success', '{}')"
            )
            raise RuntimeError("boom")
    with get_connection(initialized_db) as conn:
        assert conn.execute("SELECT COUNT(*) FROM pipeline_runs").fetchone()[0] == 0


def test_hash_unique_constraint(initialized_db):
    with pytest.raises(sqlite3.IntegrityError):
        with get_connection(initialized_db) as conn:
            for _ in range(2):
                conn.execute(
                    "INSERT INTO articles (source_id, title, content, url, hash, scraped_at) "
                    "VALUES (1, 'T', 'C', 'https://a.cl/x', 'same-hash', 'now')"
                )


def test_run_status_check_constraint(initialized_db):
    with pytest.raises(sqlite3.IntegrityError):
        with get_connection(initialized_db) as conn:
            conn.execute(
                "INSERT INTO pipeline_runs (id, run_type, started_at, finished_at, status, result) "
                "VALUES ('r1', 'scrape', 'a', 'b', 'exploded', '{}')"
            )


# --- ArticleStore ---


class TestArticleStore:
    def test_insert_then_duplicate(self, initialized_db):
        with ArticleStore.open(initialized_db) as store:
            assert store.upsert(_article()) is UpsertResult.INSERTED
            assert store.upsert(_article()) is UpsertResult.DUPLICATE
            assert store.count() == 1

    def test_first_write_wins(self, initialized_db):
        with ArticleStore.open(initialized_db) as store:
            store.upsert(_article(title="Original"))
            store.upsert(_article(title="Editado", content="Otro cuerpo"))
            row = store.get(_article().content_hash)
        assert row["title"] == "Original"
        assert row["content"] == "Cuerpo de la nota."

    def test_trailing_slash_urls_are_two_rows(self, initialized_db):
        with ArticleStore.open(initialized_db) as store:
            assert store.upsert(_article("https://a.cl/x")) is UpsertResult.INSERTED
            assert store.upsert(_article("https://a.cl/x/")) is UpsertResult.INSERTED
            assert store.count() == 2

    def test_row_contents(self, initialized_db):
        article = _article(author="Ana", section="Mundo", image_url="https://a.cl/i.jpg")
        with ArticleStore.open(initialized_db) as store:
            store.upsert(article)
            row = store.get(article.content_hash)
        assert row["source_id"] == 1
        assert row["url"] == article.url
        assert row["hash"] == article.content_hash
        assert json.loads(row["tags"]) == ["Chile", "Economía"]
        assert row["author"] == "Ana"
        assert row["section"] == "Mundo"
        assert row["published_at"] == "2025-06-15T10:00:00+00:00"
        assert row["scraped_at"]

    def test_count_by_source(self, initialized_db):
        with ArticleStore.open(initialized_db) as store:
            store.upsert(_article("https://a.cl/1", source_id=1))
            store.upsert(_article("https://a.cl/2", source_id=2))
            store.upsert(_article("https://a.cl/3", source_id=2))
            assert store.count(source_id=2) == 2
            assert store.count(source_id=9) == 0

    def test_get_missing_is_none(self, initialized_db):
        with ArticleStore.open(initialized_db) as store:
            assert store.get("0" * 64) is None

    def test_persistence_error_on_missing_schema(self, db_path):
        with ArticleStore.open(db_path) as store:
            with pytest.raises(PersistenceError, match="failed to store"):
                store.upsert(_article())

    def test_persistence_error_on_constraint_violation(self, initialized_db):
        with ArticleStore.open(initialized_db) as store:
            with pytest.raises(PersistenceError):
                store.upsert(_article(title=" "))

    def test_connection_released_after_block(self, initialized_db):
        with ArticleStore.open(initialized_db) as store:
            pass
        with pytest.raises(sqlite3.ProgrammingError):
            store.count()

    def test_connection_released_on_error(self, initialized_db):
        with pytest.raises(RuntimeError):
            with ArticleStore.open(initialized_db) as store:
                raise RuntimeError("adapter crashed")
        with pytest.raises(sqlite3.ProgrammingError):
            store.count()

    def test_unopenable_path_raises_persistence_error(self, tmp_path):
        missing = str(tmp_path / "no-such-dir" / "db.sqlite")
        with pytest.raises(PersistenceError, match="cannot open"):
            with ArticleStore.open(missing):
                pass
