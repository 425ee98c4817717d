"""El Ciudadano — WordPress posts API, one adapter per category, full text in the listing."""

from __future__ import annotations

from dataclasses import replace
from functools import partial
from typing import Any, Mapping

from redactor.ingestion.adapter import AdapterSettings
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.json_adapter import JsonSourceAdapter
from redactor.ingestion.models import ArticleStub, DelayPolicy, PagingPolicy
from redactor.ingestion.normalize import clean_text, html_to_paragraphs
from redactor.ingestion.sites.wordpress import (
    CATEGORY_TERMS,
    TAG_TERMS,
    AuthorDirectory,
    posts,
    posts_url,
    rendered,
    term_names,
)

SOURCE_ID = 9
BASE_URL = "https://www.elciudadano.com"
API_BASE = f"{BASE_URL}/wp-json/wp/v2"
DEFAULT_SECTION = "General"

# category name -> WordPress category id
CATEGORIES = {
    "actualidad": 9,
    "politica": 8,
    "chile": 42,
    "mundo": 743,
    "economia": 7,
    "cultura": 18,
}
DEFAULT_CATEGORIES = ("actualidad", "politica", "chile", "mundo", "economia")

# Embeds, separators and preformatted boxes inside the post body
DROP_SELECTORS = (
    "figure.wp-block-embed",
    ".wp-block-separator",
    "pre.wp-block-preformatted",
)

SETTINGS = AdapterSettings(
    name="elciudadano",
    source_id=SOURCE_ID,
    base_url=BASE_URL,
    paging=PagingPolicy(max_pages=5, page_size=10, style="page", start=1),
    delay=DelayPolicy.fixed(0.8),
)


def parse_item(post: dict, authors: AuthorDirectory | None = None) -> ArticleStub | None:
    url = post.get("link")
    title = clean_text(rendered(post, "title"))
    if not url or not title:
        return None
    acf = post.get("acf") or {}
    sections = term_names(post, CATEGORY_TERMS)
    return ArticleStub(
        url=url,
        title=title,
        description=acf.get("resume") or acf.get("bajada_titulo") or None,
        author=authors.name(post.get("author")) if authors else None,
        section=sections[0] if sections else DEFAULT_SECTION,
        tags=tuple(term_names(post, TAG_TERMS)),
        content=html_to_paragraphs(rendered(post, "content"), DROP_SELECTORS),
        image_url=post.get("jetpack_featured_media_url"),
        published_at=post.get("date_gmt"),
    )


def build_adapters(fetcher: RateLimitedFetcher, config: Mapping[str, Any]) -> list[JsonSourceAdapter]:
    base = SETTINGS.with_overrides(config)
    authors = AuthorDirectory(fetcher, API_BASE, base.headers)
    adapters = []
    for name in config.get("categories", DEFAULT_CATEGORIES):
        category = CATEGORIES[name]
        adapters.append(
            JsonSourceAdapter(
                replace(base, name=f"elciudadano:{name}"),
                fetcher,
                lambda page, size, category=category: posts_url(API_BASE, page, size, category),
                posts,
                partial(parse_item, authors=authors),
            )
        )
    return adapters
