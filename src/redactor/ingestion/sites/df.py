"""Diario Financiero — single "últimas noticias" listing with relative links."""

from __future__ import annotations

from typing import Any, Mapping

from bs4 import BeautifulSoup, Tag

from redactor.ingestion.adapter import AdapterSettings
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.html_adapter import HtmlSourceAdapter
from redactor.ingestion.models import ArticleStub, DelayPolicy, PagingPolicy
from redactor.ingestion.normalize import absolute_url, clean_text, join_paragraphs

SOURCE_ID = 3
BASE_URL = "https://www.df.cl"
START_URL = f"{BASE_URL}/ultimasnoticias"

SETTINGS = AdapterSettings(
    name="df",
    source_id=SOURCE_ID,
    base_url=BASE_URL,
    paging=PagingPolicy(max_pages=1, page_size=20, style="page", start=1),
    delay=DelayPolicy.fixed(0.3),
)


def listing_url(page: int) -> str:
    return START_URL


def listing_items(soup: BeautifulSoup) -> list[Tag]:
    return soup.select("article.card.card__horizontal")


def parse_item(card: Tag, origin: str) -> ArticleStub | None:
    links = [
        a["href"] for a in card.select("a[href^='/']")
        if a.get("href") and "/tax/" not in a["href"]
    ]
    if not links:
        return None
    # Cards link to both the section and the story; the story path is the longest.
    url = absolute_url(max(links, key=len), origin)
    title = card.select_one("h3.card__title")
    tag = card.select_one("a.card__tag")
    section, _, date = (tag.get_text(strip=True) if tag else "").partition("|")
    image = card.select_one("img")
    return ArticleStub(
        url=url,
        title=title.get_text(" ", strip=True) if title else "",
        section=section.strip() or None,
        published_at=date.strip() or None,
        image_url=absolute_url(image.get("src") if image else None, origin),
    )


def parse_detail(soup: BeautifulSoup, stub: ArticleStub) -> dict[str, Any]:
    lead = " ".join(
        el.get_text(" ", strip=True) for el in soup.select(".enc-main__description")
    )
    author = soup.select_one(".author__name, .bold")
    return {
        "description": lead or None,
        "author": clean_text(author.get_text()).removeprefix("Por: ") if author else None,
        "content": join_paragraphs(
            el.get_text(" ", strip=True)
            for el in soup.select("#articleLock p, #articleLock div.art-box")
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
