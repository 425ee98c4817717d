"""SoyChile — regional network search feed from the ecn search API."""

from __future__ import annotations

import re
from typing import Any, Mapping

from redactor.ingestion.adapter import AdapterSettings
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.json_adapter import JsonSourceAdapter
from redactor.ingestion.models import ArticleStub, DelayPolicy, PagingPolicy
from redactor.ingestion.normalize import clean_text, html_to_text
from redactor.ingestion.sites.ecn import API_BASE, hits, media_items

SOURCE_ID = 11
LISTING_URL = f"{API_BASE}/grm/buscar"
DEFAULT_AUTHOR = "SoyChile"
DEFAULT_SECTION = "General"

# Inline embed placeholders such as {IMAGEN 1} or {VIDEO ...}
_PLACEHOLDER_RE = re.compile(r"\{[^}]+\}")

SETTINGS = AdapterSettings(
    name="soychile",
    source_id=SOURCE_ID,
    base_url="https://www.soychile.cl",
    paging=PagingPolicy(max_pages=5, page_size=20, style="offset", start=0),
    delay=DelayPolicy.fixed(0.8),
)


def listing_url(offset: int, size: int) -> str:
    return f"{LISTING_URL}?q=&size={size}&from={offset}"


def clean_content(text: str) -> str:
    return html_to_text(_PLACEHOLDER_RE.sub("", text or ""))


def parse_item(hit: dict) -> ArticleStub | None:
    source = hit["_source"]
    url = source.get("permalink")
    title = clean_text(source.get("titulo"))
    if not url or not title:
        return None
    media = media_items(source)
    bajada = source.get("bajada") or []
    return ArticleStub(
        url=url,
        title=title,
        description=bajada[0].get("texto") if bajada else None,
        author=source.get("autor") or DEFAULT_AUTHOR,
        section=source.get("seccion") or DEFAULT_SECTION,
        tags=tuple(
            t["nombre"].replace("#tema#", "")
            for t in source.get("temas") or ()
            if t.get("nombre")
        ),
        content=clean_content(source.get("texto") or ""),
        image_url=media[0].get("Url") if media else None,
        published_at=source.get("fechaPublicacion"),
    )


def build_adapters(fetcher: RateLimitedFetcher, config: Mapping[str, Any]) -> list[JsonSourceAdapter]:
    return [
        JsonSourceAdapter(SETTINGS.with_overrides(config), fetcher, listing_url, hits, parse_item)
    ]
