"""CIPER Chile — WordPress posts API for the listing, article page for the body."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from bs4 import BeautifulSoup

from redactor.ingestion.adapter import AdapterSettings
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.json_adapter import JsonSourceAdapter
from redactor.ingestion.models import ArticleStub, DelayPolicy, PagingPolicy
from redactor.ingestion.normalize import clean_text, join_paragraphs, optional_text
from redactor.ingestion.sites.wordpress import (
    CATEGORY_TERMS,
    TAG_TERMS,
    featured_image,
    posts,
    posts_url,
    rendered,
    term_names,
)

SOURCE_ID = 10
BASE_URL = "https://www.ciperchile.cl"
API_BASE = f"{BASE_URL}/wp-json/wp/v2"
DEFAULT_AUTHOR = "CIPER"
DEFAULT_SECTION = "General"
DESCRIPTION_FALLBACK_CHARS = 200

# category name -> WordPress category id
CATEGORIES = {
    "actualidad": 3,
    "columna": 725,
}
DEFAULT_CATEGORIES = ("actualidad",)

# Excerpts shorter than this are placeholders, not a lead
MIN_EXCERPT_LENGTH = 10

SETTINGS = AdapterSettings(
    name="ciper",
    source_id=SOURCE_ID,
    base_url=BASE_URL,
    paging=PagingPolicy(max_pages=5, page_size=10, style="page", start=1),
    delay=DelayPolicy.fixed(0.8),
)


def clean_content(html: str) -> str:
    """Post HTML to paragraph text; blockquotes are kept as ``> `` quoted paragraphs."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup.select("script, style, .relacionados, .tags, .autor"):
        element.decompose()
    blocks = []
    for element in soup.find_all(["p", "blockquote"]):
        if element.name == "p" and element.find_parent("blockquote") is not None:
            continue
        text = element.get_text(" ", strip=True)
        if text:
            blocks.append(f"> {text}" if element.name == "blockquote" else text)
    return join_paragraphs(blocks)


def clean_description(html: str) -> str | None:
    if len(html) < MIN_EXCERPT_LENGTH:
        return None
    return optional_text(html)


def parse_item(post: dict) -> ArticleStub | None:
    url = post.get("link")
    title = clean_text(rendered(post, "title"))
    if not url or not title:
        return None
    sections = term_names(post, CATEGORY_TERMS)
    return ArticleStub(
        url=url,
        title=title,
        description=clean_description(rendered(post, "excerpt")),
        author=(post.get("yoast_head_json") or {}).get("author") or DEFAULT_AUTHOR,
        section=sections[0] if sections else DEFAULT_SECTION,
        tags=tuple(term_names(post, TAG_TERMS)),
        content=clean_content(rendered(post, "content")),
        image_url=featured_image(post),
        published_at=post.get("date_gmt"),
    )


def detail_url(stub: ArticleStub) -> str:
    return stub.url


def parse_detail(soup: BeautifulSoup, stub: ArticleStub) -> dict[str, Any]:
    """Body of the rendered article page, falling back to the API content."""
    body = ""
    node = soup.select_one("div.col-lg-9")
    if node is not None:
        for element in node.select('a[href*="posgrados.udp.cl"], .wp-caption'):
            element.decompose()
        body = join_paragraphs(
            el.get_text(" ", strip=True) for el in node.select("p.texto-nota, h2.titulo-nota")
        )
    fields: dict[str, Any] = {"content": body or None}
    if not stub.description:
        lead = (body or stub.content or "")[:DESCRIPTION_FALLBACK_CHARS].strip()
        fields["description"] = lead or None
    return fields


def build_adapters(fetcher: RateLimitedFetcher, config: Mapping[str, Any]) -> list[JsonSourceAdapter]:
    base = SETTINGS.with_overrides(config)
    adapters = []
    for name in config.get("categories", DEFAULT_CATEGORIES):
        category = CATEGORIES[name]
        adapters.append(
            JsonSourceAdapter(
                replace(base, name=f"ciper:{name}"),
                fetcher,
                lambda page, size, category=category: posts_url(API_BASE, page, size, category),
                posts,
                parse_item,
                detail_url=detail_url,
                parse_detail=parse_detail,
                detail_format="html",
            )
        )
    return adapters
