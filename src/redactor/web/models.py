"""Pydantic v2 response models for the Redactor web API."""

from __future__ import annotations

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------
class SourceCount(BaseModel):
    source_id: int
    articles: int
    latest_scraped_at: str | None


class StatsResponse(BaseModel):
    total_articles: int
    total_runs: int
    latest_run_at: str | None
    latest_run_status: str | None
    sources: list[SourceCount]


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------
class ArticleSummary(BaseModel):
    hash: str
    source_id: int
    title: str
    description: str | None
    section: str | None
    url: str
    image_url: str | None
    published_at: str | None
    scraped_at: str


class ArticleListResponse(BaseModel):
    articles: list[ArticleSummary]
    total: int
    page: int
    per_page: int
    pages: int


class ArticleDetail(ArticleSummary):
    author: str | None
    tags: list[str]
    content: str


# ---------------------------------------------------------------------------
# Pipeline Runs
# ---------------------------------------------------------------------------
class PipelineRun(BaseModel):
    id: str
    run_type: str
    started_at: str
    finished_at: str
    status: str
    result: dict
    error: str | None


class PipelineRunListResponse(BaseModel):
    runs: list[PipelineRun]
    total: int
