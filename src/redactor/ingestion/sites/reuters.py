"""Reuters — Arc section collection for the listing, Arc article API for the body.

The Arc endpoints reject anonymous clients; a browser session cookie is
supplied through the ``cookie`` override (``REUTERS_COOKIE``).
"""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any, Mapping
from urllib.parse import quote

from redactor.ingestion.adapter import AdapterSettings
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.json_adapter import JsonSourceAdapter
from redactor.ingestion.models import ArticleStub, DelayPolicy, PagingPolicy
from redactor.ingestion.normalize import join_paragraphs

SOURCE_ID = 6
BASE_URL = "https://www.reuters.com"
API_URL = f"{BASE_URL}/pf/api/v3/content/fetch"
SECTION = "/world/"
DEFAULT_KICKER = "World"

SETTINGS = AdapterSettings(
    name="reuters",
    source_id=SOURCE_ID,
    base_url=BASE_URL,
    paging=PagingPolicy(max_pages=6, page_size=15, style="offset", start=0),
    delay=DelayPolicy.fixed(0.8),
    headers={
        "Accept": "*/*",
        "Accept-Language": "es,en-US;q=0.9,en;q=0.8",
        "Sec-Fetch-Dest": "empty",
        "Sec-Fetch-Mode": "cors",
        "Sec-Fetch-Site": "same-origin",
        "Referer": f"{BASE_URL}{SECTION}",
    },
)


def _arc_url(endpoint: str, query: Mapping[str, Any]) -> str:
    encoded = quote(json.dumps(query, separators=(",", ":")), safe="")
    return f"{API_URL}/{endpoint}?query={encoded}&d=291&mxId=00000000&_website=reuters"


def listing_url(offset: int, size: int) -> str:
    return _arc_url(
        "articles-by-section-alias-or-id-v1",
        {
            "arc-site": "reuters",
            "fetch_type": "collection",
            "offset": offset,
            "section_id": SECTION,
            "size": size,
            "uri": SECTION,
            "website": "reuters",
        },
    )


def detail_url(stub: ArticleStub) -> str:
    uri = stub.extra["uri"]
    return _arc_url(
        "article-by-id-or-url-v1",
        {
            "uri": uri,
            "website": "reuters",
            "published": "true",
            "website_url": uri,
            "arc-site": "reuters",
        },
    )


def listing_items(payload: Any) -> list[Any]:
    return (payload.get("result") or {}).get("articles") or []


def parse_item(item: dict) -> ArticleStub | None:
    uri = item.get("canonical_url")
    if not uri or not item.get("title"):
        return None
    kicker = (item.get("kicker") or {}).get("names") or []
    return ArticleStub(
        url=BASE_URL + uri,
        title=item["title"],
        description=item.get("description"),
        section=kicker[0] if kicker else DEFAULT_KICKER,
        image_url=(item.get("thumbnail") or {}).get("url"),
        published_at=item.get("published_time"),
        extra={"uri": uri},
    )


def parse_detail(payload: Any, stub: ArticleStub) -> dict[str, Any]:
    result = payload.get("result") or {}
    authors = [a.get("name") for a in result.get("authors") or () if a.get("name")]
    paragraphs = [
        el["content"] for el in result.get("content_elements") or ()
        if el.get("type") == "paragraph" and el.get("content")
    ]
    images = (result.get("related_content") or {}).get("images") or []
    return {
        "author": ", ".join(authors) or None,
        "content": join_paragraphs(paragraphs),
        "tags": tuple((result.get("taxonomy") or {}).get("keywords") or ()),
        "image_url": images[0].get("url") if images else None,
    }


def build_adapters(fetcher: RateLimitedFetcher, config: Mapping[str, Any]) -> list[JsonSourceAdapter]:
    settings = SETTINGS.with_overrides(config)
    cookie = config.get("cookie")
    if cookie:
        settings = replace(settings, headers={**settings.headers, "Cookie": cookie})
    return [
        JsonSourceAdapter(
            settings,
            fetcher,
            listing_url,
            listing_items,
            parse_item,
            detail_url=detail_url,
            parse_detail=parse_detail,
        )
    ]
