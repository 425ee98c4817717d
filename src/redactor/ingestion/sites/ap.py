"""AP News — world and US section fronts, one adapter per front."""

from __future__ import annotations

from dataclasses import replace
from functools import partial
from typing import Any, Mapping

from bs4 import BeautifulSoup, Tag

from redactor.ingestion.adapter import AdapterSettings
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.html_adapter import HtmlSourceAdapter
from redactor.ingestion.models import ArticleStub, DelayPolicy, PagingPolicy
from redactor.ingestion.normalize import absolute_url, clean_text, join_paragraphs

SOURCE_ID = 4
BASE_URL = "https://apnews.com"

# section path -> section label
SECTIONS = {
    "world-news": "World",
    "us-news": "U.S.",
}

SETTINGS = AdapterSettings(
    name="ap",
    source_id=SOURCE_ID,
    base_url=BASE_URL,
    paging=PagingPolicy(max_pages=1, page_size=20, style="page", start=1),
    delay=DelayPolicy.fixed(0.3),
)


def high_res_image(srcset: str) -> str | None:
    """Return the last (widest) candidate URL of an ``srcset`` attribute."""
    candidates = [c.strip() for c in srcset.split(",") if c.strip()]
    if not candidates:
        return None
    return candidates[-1].split(" ")[0] or None


def _timestamp(promo) -> int | str | None:
    stamp = promo.select_one("[data-timestamp]") or promo.select_one("span.Timestamp")
    if stamp is None:
        return None
    raw = stamp.get("data-timestamp")
    if raw and raw.isdigit():
        return int(raw)
    return stamp.get_text(strip=True) or None


def listing_items(soup: BeautifulSoup) -> list[Tag]:
    return soup.select(".PagePromo")


def parse_item(promo: Tag, origin: str, section: str = "World") -> ArticleStub | None:
    link = promo.select_one("h3.PagePromo-title a")
    href = link.get("href") if link else None
    if not href or not href.startswith("http"):
        return None
    title = promo.select_one("h3.PagePromo-title span.PagePromoContentIcons-text") or link
    description = promo.select_one(".PagePromo-description")
    image = promo.select_one("img.PagePromo-image-img")
    return ArticleStub(
        url=href,
        title=title.get_text(" ", strip=True),
        description=description.get_text(" ", strip=True) if description else None,
        section=section,
        image_url=absolute_url(image.get("src") if image else None, origin),
        published_at=_timestamp(promo),
    )


def parse_detail(soup: BeautifulSoup, stub: ArticleStub) -> dict[str, Any]:
    author = soup.select_one(".Page-byline-info .Page-authors span.Link")
    modified = soup.select_one(".Page-byline-info .Page-dateModified span[data-date]")
    image = soup.select_one(".RichTextBody img.Image")
    return {
        "author": clean_text(author.get_text()) if author else None,
        "published_at": modified.get_text(strip=True) if modified else None,
        "image_url": high_res_image(image.get("srcset", "")) if image else None,
        "content": join_paragraphs(
            p.get_text(" ", strip=True) for p in soup.select(".RichTextStoryBody p")
        ),
    }


def build_adapters(fetcher: RateLimitedFetcher, config: Mapping[str, Any]) -> list[HtmlSourceAdapter]:
    base = SETTINGS.with_overrides(config)
    adapters = []
    for path, label in SECTIONS.items():
        settings = replace(base, name=f"ap:{path}")
        adapters.append(
            HtmlSourceAdapter(
                settings,
                fetcher,
                listing_url=lambda page, path=path: f"{BASE_URL}/{path}",
                listing_items=listing_items,
                parse_item=partial(parse_item, section=label),
                parse_detail=parse_detail,
            )
        )
    return adapters
