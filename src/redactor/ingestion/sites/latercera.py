"""La Tercera — Arc story feed for the listing, rendered article page for the body."""

from __future__ import annotations

import json
from typing import Any, Mapping
from urllib.parse import quote

from bs4 import BeautifulSoup

from redactor.ingestion.adapter import AdapterSettings
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.json_adapter import JsonSourceAdapter
from redactor.ingestion.models import ArticleStub, DelayPolicy, PagingPolicy
from redactor.ingestion.normalize import join_paragraphs

SOURCE_ID = 1
BASE_URL = "https://www.latercera.com"
EXCLUDED_SECTIONS = "/opinion, /cartas-al-director, /editorial"

SETTINGS = AdapterSettings(
    name="latercera",
    source_id=SOURCE_ID,
    base_url=BASE_URL,
    paging=PagingPolicy(max_pages=5, page_size=12, style="offset", start=0),
    delay=DelayPolicy.fixed(0.3),
)


def listing_url(offset: int, size: int) -> str:
    query = {
        "feedOffset": offset,
        "feedSize": size,
        "fromComponent": "result-list",
        "query": "type:story",
        "sectionsExclude": EXCLUDED_SECTIONS,
    }
    encoded = quote(json.dumps(query, separators=(",", ":")), safe="")
    return f"{BASE_URL}/pf/api/v3/content/fetch/story-feed-query-fetch?query={encoded}&_website=la-tercera"


def listing_items(payload: Any) -> list[Any]:
    return payload["content_elements"]


def parse_item(element: dict) -> ArticleStub | None:
    canonical = element.get("canonical_url")
    title = (element.get("headlines") or {}).get("basic")
    if not canonical or not title:
        return None
    taxonomy = element.get("taxonomy") or {}
    byline = (element.get("credits") or {}).get("by") or []
    return ArticleStub(
        url=BASE_URL + canonical,
        title=title,
        description=(element.get("description") or {}).get("basic"),
        author=byline[0].get("name") if byline else None,
        section=(taxonomy.get("primary_section") or {}).get("name"),
        tags=tuple(t.get("text") for t in taxonomy.get("tags") or () if t.get("text")),
        image_url=((element.get("promo_items") or {}).get("basic") or {}).get("url"),
        published_at=element.get("publish_date"),
    )


def detail_url(stub: ArticleStub) -> str:
    return stub.url


def parse_detail(soup: BeautifulSoup, stub: ArticleStub) -> dict[str, Any]:
    blocks = []
    for element in soup.select(".article-body__paragraph, .article-body__heading-h2"):
        text = element.get_text(" ", strip=True)
        if not text:
            continue
        blocks.append(f"## {text}" if element.name == "h2" else text)
    return {"content": join_paragraphs(blocks)}


def build_adapters(fetcher: RateLimitedFetcher, config: Mapping[str, Any]) -> list[JsonSourceAdapter]:
    return [
        JsonSourceAdapter(
            SETTINGS.with_overrides(config),
            fetcher,
            listing_url,
            listing_items,
            parse_item,
            detail_url=detail_url,
            parse_detail=parse_detail,
            detail_format="html",
        )
    ]
