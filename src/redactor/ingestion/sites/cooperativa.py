"""Cooperativa — paginated RSS page files for the País and Mundo sections."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from redactor.ingestion.adapter import AdapterSettings
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.models import ArticleStub, DelayPolicy, PagingPolicy
from redactor.ingestion.normalize import html_to_paragraphs
from redactor.ingestion.rss_adapter import RssSourceAdapter, default_entry_parser

SOURCE_ID = 8
FEED_BASE = "https://www.cooperativa.cl/noticias/site/tax/port/all"

# adapter suffix -> page-file prefix
FEEDS = {
    "pais": "rss_3___",
    "mundo": "rss_2___",
}

SETTINGS = AdapterSettings(
    name="cooperativa",
    source_id=SOURCE_ID,
    base_url="https://www.cooperativa.cl",
    paging=PagingPolicy(max_pages=5, page_size=20, style="page", start=1),
    delay=DelayPolicy.fixed(1.0),
    headers={"Accept": "application/rss+xml, application/xml"},
)


def feed_url(prefix: str, page: int) -> str:
    return f"{FEED_BASE}/{prefix}{page}.xml"


def parse_entry(entry: dict) -> ArticleStub | None:
    """Feed entry to stub; the lead paragraph travels in a custom ``<descent>`` element."""
    stub = default_entry_parser(entry)
    if stub is None:
        return None
    author = stub.author.replace("Autor :", "").strip() if stub.author else None
    lead = html_to_paragraphs(entry.get("descent") or "")
    return replace(stub, author=author or None, description=lead or stub.description)


def build_adapters(fetcher: RateLimitedFetcher, config: Mapping[str, Any]) -> list[RssSourceAdapter]:
    base = SETTINGS.with_overrides(config)
    return [
        RssSourceAdapter(
            replace(base, name=f"cooperativa:{suffix}"),
            fetcher,
            lambda page, prefix=prefix: feed_url(prefix, page),
            parse_entry=parse_entry,
        )
        for suffix, prefix in FEEDS.items()
    ]
