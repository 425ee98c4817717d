"""JSON REST adapter — paginated JSON listings with optional per-item detail calls."""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, Iterable, Mapping

from redactor.ingestion.adapter import AdapterSettings, collect_stubs, page_from
from redactor.ingestion.fetcher import RateLimitedFetcher, require_success
from redactor.ingestion.html_adapter import soup_of
from redactor.ingestion.models import ArticleStub, CanonicalArticle, Page
from redactor.ingestion.normalize import article_from_detail, build_article, failed_article

logger = logging.getLogger(__name__)

DETAIL_FORMATS = frozenset({"json", "html"})


class JsonSourceAdapter:
    """Reads structured items from a paginated JSON endpoint.

    ``listing_url(cursor, page_size)`` builds the request; the cursor is an
    offset or a page number depending on ``settings.paging.style``.
    ``listing_items(payload)`` returns the raw items of the decoded response
    (a missing key there means the payload is unusable) and
    ``parse_item(item)`` maps one of them to a stub. When the backend keeps the full
    body behind another endpoint, ``detail_url(stub)`` and
    ``parse_detail(payload, stub)`` describe the secondary call; the payload
    is decoded JSON or a BeautifulSoup tree according to ``detail_format``.
    Without them ``fetch_detail`` is a passthrough.
    """

    kind = "json"

    def __init__(
        self,
        settings: AdapterSettings,
        fetcher: RateLimitedFetcher,
        listing_url: Callable[[int, int], str],
        listing_items: Callable[[Any], Iterable[Any]],
        parse_item: Callable[[Any], "ArticleStub | None"],
        detail_url: Callable[[ArticleStub], str] | None = None,
        parse_detail: Callable[[Any, ArticleStub], Mapping[str, Any]] | None = None,
        detail_format: str = "json",
    ) -> None:
        if (detail_url is None) != (parse_detail is None):
            raise ValueError("detail_url and parse_detail must be given together")
        if detail_format not in DETAIL_FORMATS:
            raise ValueError(f"detail_format must be one of {sorted(DETAIL_FORMATS)}")
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
        self._detail_url = detail_url
        self._parse_detail = parse_detail
        self._detail_format = detail_format

    def __repr__(self) -> str:
        return f"<JsonSourceAdapter {self.name!r} source_id={self.source_id}>"

    @property
    def has_detail_endpoint(self) -> bool:
        return self._detail_url is not None

    def initial_cursor(self) -> int:
        return self.paging.start

    def list_page(self, cursor: Hashable) -> Page:
        url = self._listing_url(cursor, self.paging.page_size)
        response = require_success(
            self._fetcher.fetch(url, delay=self.delay, headers=self.settings.headers)
        )
        try:
            payload = response.json()
        except ValueError:
            logger.warning("%s: listing at offset/page %s is not valid JSON", self.name, cursor)
            return page_from(self, cursor, [], complete=False)

        stubs, rejected, complete = collect_stubs(
            self.name, lambda: self._listing_items(payload), self._parse_item
        )
        logger.info("%s: page %s -> %d item(s)", self.name, cursor, len(stubs))
        return page_from(self, cursor, stubs, complete, rejected)

    def fetch_detail(self, stub: ArticleStub) -> CanonicalArticle:
        if self._detail_url is None:
            return build_article(stub, self.source_id)

        try:
            response = require_success(
                self._fetcher.fetch(self._detail_url(stub), headers=self.settings.headers)
            )
            payload = response.json() if self._detail_format == "json" else soup_of(response.text)
            fields = dict(self._parse_detail(payload, stub))
        except Exception:
            logger.warning("%s: detail fetch failed for %s", self.name, stub.url, exc_info=True)
            return failed_article(stub, self.source_id)

        if not fields.get("content") and not stub.content:
            logger.warning("%s: detail for %s has no body", self.name, stub.url)
            return failed_article(stub, self.source_id)
        return article_from_detail(stub, self.source_id, fields)
