"""API route handlers for the Redactor web API."""

from __future__ import annotations

import logging
import math
import sqlite3

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from redactor.web.deps import get_readonly_connection
from redactor.web.models import (
    ArticleDetail,
    ArticleListResponse,
    ArticleSummary,
    PipelineRunListResponse,
    StatsResponse,
)
from redactor.web.queries import (
    get_article_by_hash,
    get_stats,
    list_articles,
    list_pipeline_runs,
)

logger = logging.getLogger(__name__)

router = APIRouter()
health_router = APIRouter()


@health_router.get("/health")
def health(request: Request) -> JSONResponse:
    """Check database connectivity and return health status."""
    database_path = request.app.state.database_path
    try:
        with get_readonly_connection(database_path) as conn:
            conn.execute("SELECT 1 FROM articles LIMIT 1")
        return JSONResponse({"status": "healthy", "database": "ok"})
    except (sqlite3.Error, OSError) as exc:
        logger.warning("Health check failed: %s", exc)
        return JSONResponse(
            {"status": "unhealthy", "database": "error", "detail": str(exc)},
            status_code=503,
        )


@router.get("/stats", response_model=StatsResponse)
def stats(request: Request) -> StatsResponse:
    database_path = request.app.state.database_path
    data = get_stats(database_path)
    return StatsResponse(**data)


@router.get("/articles", response_model=ArticleListResponse)
def articles(
    request: Request,
    source_id: int | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
) -> ArticleListResponse:
    database_path = request.app.state.database_path
    rows, total = list_articles(
        database_path, source_id=source_id, page=page, per_page=per_page,
    )
    pages = math.ceil(total / per_page) if total else 0
    return ArticleListResponse(
        articles=[ArticleSummary(**r) for r in rows],
        total=total,
        page=page,
        per_page=per_page,
        pages=pages,
    )


@router.get("/articles/{content_hash}", response_model=ArticleDetail)
def article_by_hash(request: Request, content_hash: str) -> ArticleDetail:
    database_path = request.app.state.database_path
    data = get_article_by_hash(database_path, content_hash)
    if data is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return ArticleDetail(**data)


@router.get("/runs", response_model=PipelineRunListResponse)
def runs(
    request: Request,
    limit: int = Query(20, ge=1, le=100),
) -> PipelineRunListResponse:
    database_path = request.app.state.database_path
    rows, total = list_pipeline_runs(database_path, limit=limit)
    return PipelineRunListResponse(runs=rows, total=total)
