"""Tests for redactor.ingestion.html_adapter — listing and detail scraping."""

from __future__ import annotations

import httpx
import pytest

from redactor.ingestion.adapter import AdapterSettings, SourceAdapter
from redactor.ingestion.errors import TransportError
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.html_adapter import HtmlSourceAdapter
from redactor.ingestion.models import CONTENT_UNAVAILABLE, ArticleStub, DelayPolicy, PagingPolicy

ORIGIN = "https://news.example.cl"

LISTING_PAGE = """\
<html><body>
  <article class="story"><a href="/mundo/uno">Noticia uno</a></article>
  <article class="story"><a href="/mundo/dos">Noticia dos</a></article>
  <article class="story"><a href="https://news.example.cl/mundo/tres">Noticia tres</a></article>
  <article class="story"><span>sin enlace</span></article>
</body></html>
"""

EMPTY_PAGE = "<html><body><p>No hay noticias</p></body></html>"

ARTICLE_PAGE = """\
<html><body>
  <span class="byline">Ana Pérez</span>
  <div class="body"><p>Primer párrafo.</p><p>Segundo párrafo.</p></div>
</body></html>
"""

ARTICLE_WITHOUT_BODY = "<html><body><span class='byline'>Ana</span></body></html>"


def listing_items(soup):
    return soup.select("article.story")


def parse_item(story, origin):
    link = story.select_one("a")
    if link is None:
        return None
    href = link["href"]
    return ArticleStub(
        url=href if href.startswith("http") else origin + href,
        title=link.get_text(strip=True),
    )


def parse_detail(soup, stub):
    byline = soup.select_one(".byline")
    return {
        "author": byline.get_text(strip=True) if byline else None,
        "content": "\n\n".join(p.get_text(strip=True) for p in soup.select(".body p")),
    }


def _routes(request):
    path = request.url.path
    if path == "/lista/1":
        return httpx.Response(200, text=LISTING_PAGE)
    if path == "/lista/2":
        return httpx.Response(200, text=EMPTY_PAGE)
    if path == "/lista/9":
        return httpx.Response(500, text="error")
    if path == "/mundo/uno":
        return httpx.Response(200, text=ARTICLE_PAGE)
    if path == "/mundo/dos":
        return httpx.Response(200, text=ARTICLE_WITHOUT_BODY)
    return httpx.Response(404)


@pytest.fixture()
def sleeps():
    return []


@pytest.fixture()
def adapter(sleeps):
    client = httpx.Client(transport=httpx.MockTransport(_routes))
    fetcher = RateLimitedFetcher(client=client, identity={}, sleep=sleeps.append)
    settings = AdapterSettings(
        name="example",
        source_id=42,
        base_url=ORIGIN,
        paging=PagingPolicy(max_pages=3, style="page", start=1),
        delay=DelayPolicy.fixed(0.2),
    )
    return HtmlSourceAdapter(
        settings,
        fetcher,
        listing_url=lambda page: f"{ORIGIN}/lista/{page}",
        listing_items=listing_items,
        parse_item=parse_item,
        parse_detail=parse_detail,
    )


class TestContract:
    def test_satisfies_protocol(self, adapter):
        assert isinstance(adapter, SourceAdapter)
        assert adapter.kind == "html"
        assert adapter.source_id == 42

    def test_initial_cursor(self, adapter):
        assert adapter.initial_cursor() == 1


class TestListPage:
    def test_extracts_stubs_in_order(self, adapter):
        page = adapter.list_page(1)
        assert [s.url for s in page.stubs] == [
            f"{ORIGIN}/mundo/uno",
            f"{ORIGIN}/mundo/dos",
            f"{ORIGIN}/mundo/tres",
        ]
        assert page.has_more is True
        assert page.next_cursor == 2

    def test_empty_page_ends_pagination(self, adapter):
        page = adapter.list_page(2)
        assert page.stubs == ()
        assert page.has_more is False
        assert page.next_cursor is None

    def test_http_error_raises_transport_error(self, adapter):
        with pytest.raises(TransportError) as exc_info:
            adapter.list_page(9)
        assert exc_info.value.status_code == 500

    def test_listing_uses_adapter_delay(self, adapter, sleeps):
        adapter.list_page(1)
        assert sleeps == [0.2]

    def test_item_failure_keeps_rest_of_page(self, sleeps):
        def fragile(story, origin):
            if "dos" in story.a["href"]:
                raise ValueError("unexpected markup")
            return parse_item(story, origin)

        client = httpx.Client(transport=httpx.MockTransport(_routes))
        fetcher = RateLimitedFetcher(client=client, identity={}, sleep=sleeps.append)
        adapter = HtmlSourceAdapter(
            AdapterSettings(name="fragile", source_id=1, base_url=ORIGIN),
            fetcher,
            listing_url=lambda page: f"{ORIGIN}/lista/{page}",
            listing_items=lambda soup: soup.select("article.story")[:3],
            parse_item=fragile,
            parse_detail=parse_detail,
        )
        page = adapter.list_page(1)
        assert [s.url for s in page.stubs] == [f"{ORIGIN}/mundo/uno", f"{ORIGIN}/mundo/tres"]
        assert page.rejected == 1
        assert page.has_more is True

    def test_unreadable_listing_ends_pagination(self, sleeps):
        def no_items(soup):
            raise KeyError("stories")

        client = httpx.Client(transport=httpx.MockTransport(_routes))
        fetcher = RateLimitedFetcher(client=client, identity={}, sleep=sleeps.append)
        adapter = HtmlSourceAdapter(
            AdapterSettings(name="broken", source_id=1, base_url=ORIGIN),
            fetcher,
            listing_url=lambda page: f"{ORIGIN}/lista/{page}",
            listing_items=no_items,
            parse_item=parse_item,
            parse_detail=parse_detail,
        )
        page = adapter.list_page(1)
        assert page.stubs == ()
        assert page.rejected == 0
        assert page.has_more is False


class TestFetchDetail:
    def test_builds_article(self, adapter):
        stub = ArticleStub(url=f"{ORIGIN}/mundo/uno", title="Noticia uno")
        article = adapter.fetch_detail(stub)
        assert article.source_id == 42
        assert article.author == "Ana Pérez"
        assert article.content == "Primer párrafo.\n\nSegundo párrafo."
        assert not article.extraction_failed

    def test_missing_body_gives_sentinel(self, adapter):
        stub = ArticleStub(url=f"{ORIGIN}/mundo/dos", title="Noticia dos")
        article = adapter.fetch_detail(stub)
        assert article.content == CONTENT_UNAVAILABLE
        assert article.title == "Noticia dos"

    def test_http_error_gives_sentinel(self, adapter):
        stub = ArticleStub(url=f"{ORIGIN}/mundo/perdida", title="Perdida")
        article = adapter.fetch_detail(stub)
        assert article.extraction_failed

    def test_unknown_detail_field_gives_sentinel(self, sleeps):
        client = httpx.Client(transport=httpx.MockTransport(_routes))
        fetcher = RateLimitedFetcher(client=client, identity={}, sleep=sleeps.append)
        adapter = HtmlSourceAdapter(
            AdapterSettings(name="example", source_id=42, base_url=ORIGIN),
            fetcher,
            listing_url=lambda page: f"{ORIGIN}/lista/{page}",
            listing_items=listing_items,
            parse_item=parse_item,
            parse_detail=lambda soup, stub: {"content": "Cuerpo", "byline": "Ana"},
        )
        article = adapter.fetch_detail(ArticleStub(url=f"{ORIGIN}/mundo/uno", title="Uno"))
        assert article.content == CONTENT_UNAVAILABLE
        assert article.title == "Uno"

    def test_empty_title_override_gives_sentinel(self, sleeps):
        client = httpx.Client(transport=httpx.MockTransport(_routes))
        fetcher = RateLimitedFetcher(client=client, identity={}, sleep=sleeps.append)
        adapter = HtmlSourceAdapter(
            AdapterSettings(name="example", source_id=42, base_url=ORIGIN),
            fetcher,
            listing_url=lambda page: f"{ORIGIN}/lista/{page}",
            listing_items=listing_items,
            parse_item=parse_item,
            parse_detail=lambda soup, stub: {"content": "Cuerpo", "title": "   "},
        )
        article = adapter.fetch_detail(ArticleStub(url=f"{ORIGIN}/mundo/uno", title="Uno"))
        assert article.extraction_failed
        assert article.title == "Uno"

    def test_detail_fetch_has_no_delay(self, adapter, sleeps):
        adapter.fetch_detail(ArticleStub(url=f"{ORIGIN}/mundo/uno", title="Uno"))
        assert sleeps == []
