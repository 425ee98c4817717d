"""EFE — WordPress listing pages under /mundo, article body on the article page."""

from __future__ import annotations

from typing import Any, Mapping

from bs4 import BeautifulSoup, Tag

from redactor.ingestion.adapter import AdapterSettings
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.html_adapter import HtmlSourceAdapter
from redactor.ingestion.models import ArticleStub, DelayPolicy, PagingPolicy
from redactor.ingestion.normalize import absolute_url, clean_text, join_paragraphs

SOURCE_ID = 5
BASE_URL = "https://efe.com/mundo"

SETTINGS = AdapterSettings(
    name="efe",
    source_id=SOURCE_ID,
    base_url="https://efe.com",
    paging=PagingPolicy(max_pages=5, page_size=10, style="page", start=1),
    delay=DelayPolicy.fixed(0.3),
    headers={"Accept": "text/html"},
)


def listing_url(page: int) -> str:
    return BASE_URL if page == 1 else f"{BASE_URL}/page/{page}/"


def listing_items(soup: BeautifulSoup) -> list[Tag]:
    return soup.select("article")


def parse_item(article: Tag, origin: str) -> ArticleStub | None:
    link = article.select_one("h2.entry-title a")
    url = absolute_url(link.get("href") if link else None, origin)
    if not url or "/tax/" in url:
        return None
    time_tag = article.select_one("time.entry-date")
    image = article.select_one(".post-image img")
    summary = article.select_one(".entry-summary p")
    section = article.select_one("footer .cat-links a")
    return ArticleStub(
        url=url,
        title=link.get_text(strip=True),
        description=summary.get_text(" ", strip=True) if summary else None,
        section=section.get_text(strip=True) if section else None,
        tags=tuple(a.get_text(strip=True) for a in article.select(".tags-links a")),
        image_url=absolute_url(image.get("src") if image else None, origin),
        published_at=time_tag.get("datetime") if time_tag else None,
    )


def parse_detail(soup: BeautifulSoup, stub: ArticleStub) -> dict[str, Any]:
    author = soup.select_one(".author__name span") or soup.select_one(".entry-meta .author")
    return {
        "author": clean_text(author.get_text()) if author else None,
        "content": join_paragraphs(
            p.get_text(" ", strip=True) for p in soup.select(".entry-content p")
        ),
    }


def build_adapters(fetcher: RateLimitedFetcher, config: Mapping[str, Any]) -> list[HtmlSourceAdapter]:
    return [
        HtmlSourceAdapter(
            SETTINGS.with_overrides(config),
            fetcher,
            listing_url,
            listing_items,
            parse_item,
            parse_detail,
        )
    ]
