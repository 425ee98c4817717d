"""Read-only query functions for the web API."""

from __future__ import annotations

import json

from redactor.web.deps import get_readonly_connection

_SUMMARY_COLUMNS = (
    "hash, source_id, title, description, section, url, image_url, "
    "published_at, scraped_at"
)


def _summary(row) -> dict:
    return {
        "hash": row["hash"],
        "source_id": row["source_id"],
        "title": row["title"],
        "description": row["description"],
        "section": row["section"],
        "url": row["url"],
        "image_url": row["image_url"],
        "published_at": row["published_at"],
        "scraped_at": row["scraped_at"],
    }


# ---------------------------------------------------------------------------
# get_stats
# ---------------------------------------------------------------------------
def get_stats(database_path: str) -> dict:
    """Return article counts per source and the latest run."""
    with get_readonly_connection(database_path) as conn:
        total_articles = conn.execute("SELECT COUNT(*) FROM articles").fetchone()[0]
        total_runs = conn.execute("SELECT COUNT(*) FROM pipeline_runs").fetchone()[0]

        latest = conn.execute(
            "SELECT started_at, status FROM pipeline_runs ORDER BY started_at DESC LIMIT 1"
        ).fetchone()

        source_rows = conn.execute(
            "SELECT source_id, COUNT(*) AS cnt, MAX(scraped_at) AS latest "
            "FROM articles GROUP BY source_id ORDER BY source_id"
        ).fetchall()

    return {
        "total_articles": total_articles,
        "total_runs": total_runs,
        "latest_run_at": latest["started_at"] if latest else None,
        "latest_run_status": latest["status"] if latest else None,
        "sources": [
            {"source_id": r["source_id"], "articles": r["cnt"], "latest_scraped_at": r["latest"]}
            for r in source_rows
        ],
    }


# ---------------------------------------------------------------------------
# list_articles
# ---------------------------------------------------------------------------
def list_articles(
    database_path: str,
    *,
    source_id: int | None = None,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[dict], int]:
    """Return a paginated list of articles, most recently scraped first."""
    offset = (page - 1) * per_page
    where_clause = ""
    params: list[object] = []
    if source_id is not None:
        where_clause = "WHERE source_id = ?"
        params.append(source_id)

    with get_readonly_connection(database_path) as conn:
        total = conn.execute(
            f"SELECT COUNT(*) FROM articles {where_clause}", params
        ).fetchone()[0]
        rows = conn.execute(
            f"SELECT {_SUMMARY_COLUMNS} FROM articles {where_clause} "
            f"ORDER BY scraped_at DESC, id DESC LIMIT ? OFFSET ?",
            [*params, per_page, offset],
        ).fetchall()

    return [_summary(r) for r in rows], total


# ---------------------------------------------------------------------------
# get_article_by_hash
# ---------------------------------------------------------------------------
def get_article_by_hash(database_path: str, content_hash: str) -> dict | None:
    """Return a single article by its URL fingerprint, or None."""
    with get_readonly_connection(database_path) as conn:
        row = conn.execute(
            "SELECT * FROM articles WHERE hash = ?", (content_hash,)
        ).fetchone()

    if row is None:
        return None

    return {
        **_summary(row),
        "author": row["author"],
        "tags": json.loads(row["tags"]),
        "content": row["content"],
    }


# ---------------------------------------------------------------------------
# list_pipeline_runs
# ---------------------------------------------------------------------------
def list_pipeline_runs(database_path: str, limit: int = 20) -> tuple[list[dict], int]:
    """Return the most recent runs, newest first, and the total run count."""
    with get_readonly_connection(database_path) as conn:
        total = conn.execute("SELECT COUNT(*) FROM pipeline_runs").fetchone()[0]
        rows = conn.execute(
            "SELECT * FROM pipeline_runs ORDER BY started_at DESC LIMIT ?", (limit,)
        ).fetchall()

    runs = []
    for r in rows:
        runs.append({
            "id": r["id"],
            "run_type": r["run_type"],
            "started_at": r["started_at"],
            "finished_at": r["finished_at"],
            "status": r["status"],
            "result": json.loads(r["result"]),
            "error": r["error"],
        })
    return runs, total
