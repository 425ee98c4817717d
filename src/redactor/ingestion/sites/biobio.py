"""BioBioChile — WordPress JSON list API, one adapter per category group."""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Any, Mapping

from redactor.ingestion.adapter import AdapterSettings
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.json_adapter import JsonSourceAdapter
from redactor.ingestion.models import ArticleStub, DelayPolicy, PagingPolicy
from redactor.ingestion.normalize import html_to_paragraphs

SOURCE_ID = 7
BASE_URL = "https://www.biobiochile.cl"
LIST_API = f"{BASE_URL}/lista/api/get-todo-sin-robin"
UPLOADS_URL = "https://media.biobiochile.cl/wp-content/uploads/"
CATEGORIES = ("group-internacional", "group-nacional", "group-economia")

# Related-article boxes and social embeds interleaved with the body
DROP_SELECTORS = (".lee-tambien-bbcl", "blockquote.instagram-media")

SETTINGS = AdapterSettings(
    name="biobio",
    source_id=SOURCE_ID,
    base_url=BASE_URL,
    paging=PagingPolicy(max_pages=5, page_size=10, style="offset", start=0),
    delay=DelayPolicy.fixed(0.8),
    headers={
        "Accept": "application/json, text/plain, */*",
        "Referer": f"{BASE_URL}/lista/categorias/nacional",
    },
)


def listing_url(category: str, offset: int, size: int) -> str:
    # t= busts the CDN cache on the list endpoint
    return (
        f"{LIST_API}?limit={size}&offset={offset}"
        f"&categorias={category}&t={int(time.time() * 1000)}"
    )


def image_url(item: dict) -> str | None:
    large = (((item.get("post_image") or {}).get("thumbnails") or {}).get("large") or {})
    path = large.get("URL")
    return UPLOADS_URL + path if path else None


def listing_items(payload: Any) -> list[Any]:
    if not isinstance(payload, list):
        raise TypeError(f"expected a list of posts, got {type(payload).__name__}")
    return payload


def parse_item(item: dict) -> ArticleStub | None:
    url = item.get("post_URL_https")
    title = item.get("post_title")
    if not url or not title:
        return None
    return ArticleStub(
        url=url,
        title=title,
        description=item.get("post_excerpt"),
        author=(item.get("author") or {}).get("display_name"),
        section=item.get("primary"),
        tags=tuple(t.get("name") for t in item.get("post_tags") or () if t.get("name")),
        content=html_to_paragraphs(item.get("post_content") or "", DROP_SELECTORS),
        image_url=image_url(item),
        published_at=item.get("raw_post_date"),
    )


def build_adapters(fetcher: RateLimitedFetcher, config: Mapping[str, Any]) -> list[JsonSourceAdapter]:
    base = SETTINGS.with_overrides(config)
    return [
        JsonSourceAdapter(
            replace(base, name=f"biobio:{category}"),
            fetcher,
            lambda offset, size, category=category: listing_url(category, offset, size),
            listing_items,
            parse_item,
        )
        for category in config.get("categories", CATEGORIES)
    ]
