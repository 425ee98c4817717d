"""Canonicalization — text, URL and date cleanup, and CanonicalArticle assembly."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from html import unescape
from typing import Iterable, Mapping
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from redactor.ingestion.errors import ExtractionError
from redactor.ingestion.models import CONTENT_UNAVAILABLE, ArticleStub, CanonicalArticle

logger = logging.getLogger(__name__)

_HTML_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_BLOCK_BREAK_RE = re.compile(r"<br\s*/?>|</(?:div|p|li|h[1-6])>", re.IGNORECASE)
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")

PARAGRAPH_SEPARATOR = "\n\n"


def strip_html(text: str) -> str:
    """Remove HTML tags and unescape entities."""
    return unescape(_HTML_TAG_RE.sub("", text)).strip()


def clean_text(text: str | None) -> str:
    """Strip markup and collapse all whitespace runs to single spaces."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", strip_html(text)).strip()


def optional_text(text: str | None) -> str | None:
    """Like clean_text, but returns None for values that clean to nothing."""
    cleaned = clean_text(text)
    return cleaned or None


def join_paragraphs(paragraphs: Iterable[str]) -> str:
    """Join non-blank paragraphs with a blank-line separator."""
    return PARAGRAPH_SEPARATOR.join(p.strip() for p in paragraphs if p and p.strip())


def html_to_paragraphs(html: str, drop_selectors: Iterable[str] = ()) -> str:
    """Extract ``<p>`` text from an HTML fragment as blank-line separated paragraphs.

    Elements matching ``drop_selectors`` (related-article boxes, social
    embeds) and scripts are removed first.
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for selector in ("script", "style", *drop_selectors):
        for element in soup.select(selector):
            element.decompose()
    paragraphs = [p.get_text(" ", strip=True) for p in soup.find_all("p")]
    return join_paragraphs(paragraphs)


def html_to_text(html: str) -> str:
    """Convert loosely structured HTML (div/br separated) into paragraph text."""
    if not html:
        return ""
    text = _BLOCK_BREAK_RE.sub("\n", html)
    text = unescape(_HTML_TAG_RE.sub("", text))
    lines = (line.strip() for line in _BLANK_LINES_RE.split(text))
    return join_paragraphs(lines)


def absolute_url(href: str | None, base_url: str) -> str | None:
    """Resolve a relative or protocol-relative URL against ``base_url``."""
    if not href or not href.strip():
        return None
    resolved = urljoin(base_url, href.strip())
    return resolved if is_absolute_url(resolved) else None


def is_absolute_url(url: str | None) -> bool:
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def parse_datetime(value: object) -> str | None:
    """Parse a backend date into an ISO 8601 string.

    Accepts ISO 8601 strings (including a trailing ``Z``), RFC 2822 strings
    as found in RSS, epoch seconds or milliseconds, and ``datetime``
    objects. Returns None for anything missing or unparseable; a date is
    never defaulted to the current time.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > 1e11 else value
        try:
            dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        raw = value.strip()
        try:
            dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            try:
                dt = parsedate_to_datetime(raw)
            except (TypeError, ValueError, IndexError):
                logger.debug("Unparseable date: %r", value)
                return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def clean_tags(tags: Iterable[object] | None) -> tuple[str, ...]:
    """Normalize a tag list, dropping blanks and keeping first-seen order."""
    if not tags:
        return ()
    seen: dict[str, None] = {}
    for tag in tags:
        label = clean_text(str(tag)) if tag is not None else ""
        if label:
            seen.setdefault(label, None)
    return tuple(seen)


def build_article(
    stub: ArticleStub,
    source_id: int,
    **overrides: object,
) -> CanonicalArticle:
    """Assemble a CanonicalArticle from a stub plus detail-fetch overrides.

    Fields in ``overrides`` win over the stub's when they are not None.
    Raises ExtractionError if the title is empty or the URL is not absolute.
    """
    fields = {
        "title": stub.title,
        "description": stub.description,
        "author": stub.author,
        "section": stub.section,
        "tags": stub.tags,
        "content": stub.content,
        "image_url": stub.image_url,
        "published_at": stub.published_at,
        "url": stub.url,
    }
    for key, value in overrides.items():
        if key not in fields:
            raise TypeError(f"unknown article field '{key}'")
        if value is not None:
            fields[key] = value

    title = clean_text(fields["title"])
    if not title:
        raise ExtractionError(f"article at {stub.url!r} has an empty title")
    url = str(fields["url"] or "").strip()
    if not is_absolute_url(url):
        raise ExtractionError(f"article URL {url!r} is not absolute")
    image_url = fields["image_url"]
    if image_url is not None:
        image_url = absolute_url(str(image_url), url)

    return CanonicalArticle(
        source_id=source_id,
        title=title,
        url=url,
        content=str(fields["content"] or "").strip(),
        description=optional_text(fields["description"]),
        author=optional_text(fields["author"]),
        section=optional_text(fields["section"]),
        tags=clean_tags(fields["tags"]),
        image_url=image_url,
        published_at=parse_datetime(fields["published_at"]),
    )


def failed_article(stub: ArticleStub, source_id: int) -> CanonicalArticle:
    """Build the article for a stub whose body could not be retrieved."""
    return build_article(stub, source_id, content=CONTENT_UNAVAILABLE)


def article_from_detail(
    stub: ArticleStub, source_id: int, fields: Mapping[str, object]
) -> CanonicalArticle:
    """Apply detail-page fields to a stub, falling back to the sentinel article.

    Unknown field names, or overrides that leave an empty title or a
    relative URL, are logged and give ``failed_article(stub)``. That call
    still raises ExtractionError when the stub alone is invalid.
    """
    try:
        return build_article(stub, source_id, **fields)
    except (TypeError, ExtractionError) as exc:
        logger.warning("Detail fields for %s rejected: %s", stub.url, exc)
        return failed_article(stub, source_id)
