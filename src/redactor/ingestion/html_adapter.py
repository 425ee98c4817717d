"""HTML-scrape adapter — listing and detail are two separately rendered pages."""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, Iterable, Mapping

from bs4 import BeautifulSoup, Tag

from redactor.ingestion.adapter import AdapterSettings, collect_stubs, page_from
from redactor.ingestion.fetcher import RateLimitedFetcher, require_success
from redactor.ingestion.models import ArticleStub, CanonicalArticle, Page
from redactor.ingestion.normalize import article_from_detail, failed_article

logger = logging.getLogger(__name__)

ListingItems = Callable[[BeautifulSoup], Iterable[Tag]]
ItemParser = Callable[[Tag, str], "ArticleStub | None"]
DetailParser = Callable[[BeautifulSoup, ArticleStub], Mapping[str, Any]]


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class HtmlSourceAdapter:
    """Scrapes rendered listing pages and article pages with CSS selectors.

    ``listing_url(cursor)`` builds the URL of a listing page;
    ``listing_items(soup)`` selects one element per story and
    ``parse_item(element, origin)`` maps it to a stub with an absolute URL.
    ``parse_detail(soup, stub)`` returns the article fields found on the
    article page. An empty ``content`` from the detail parser counts as an
    extraction failure.
    """

    kind = "html"

    def __init__(
        self,
        settings: AdapterSettings,
        fetcher: RateLimitedFetcher,
        listing_url: Callable[[int], str],
        listing_items: ListingItems,
        parse_item: ItemParser,
        parse_detail: DetailParser,
    ) -> None:
        self.settings = settings
        self.name = settings.name
        self.source_id = settings.source_id
        self.paging = settings.paging
        self.delay = settings.delay
        self.keep_failed_extractions = settings.keep_failed_extractions
        self._fetcher = fetcher
        self._listing_url = listing_url
        self._listing_items = listing_items
        self._parse_item = parse_item
        self._parse_detail = parse_detail

    def __repr__(self) -> str:
        return f"<HtmlSourceAdapter {self.name!r} source_id={self.source_id}>"

    def initial_cursor(self) -> int:
        return self.paging.start

    def list_page(self, cursor: Hashable) -> Page:
        url = self._listing_url(cursor)
        response = require_success(
            self._fetcher.fetch(url, delay=self.delay, headers=self.settings.headers)
        )
        soup = soup_of(response.text)
        origin = self.settings.origin
        stubs, rejected, complete = collect_stubs(
            self.name,
            lambda: self._listing_items(soup),
            lambda element: self._parse_item(element, origin),
        )
        logger.info("%s: page %s -> %d item(s)", self.name, cursor, len(stubs))
        return page_from(self, cursor, stubs, complete, rejected)

    def fetch_detail(self, stub: ArticleStub) -> CanonicalArticle:
        try:
            response = require_success(
                self._fetcher.fetch(stub.url, headers=self.settings.headers)
            )
            fields = dict(self._parse_detail(soup_of(response.text), stub))
        except Exception:
            logger.warning("%s: detail fetch failed for %s", self.name, stub.url, exc_info=True)
            return failed_article(stub, self.source_id)

        if not fields.get("content"):
            logger.warning("%s: no article body found at %s", self.name, stub.url)
            return failed_article(stub, self.source_id)
        return article_from_detail(stub, self.source_id, fields)
