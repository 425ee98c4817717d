"""Emol — "último minuto" feed from the ecn search API, full text in the listing."""

from __future__ import annotations

import re
from typing import Any, Mapping

from redactor.ingestion.adapter import AdapterSettings
from redactor.ingestion.fetcher import RateLimitedFetcher
from redactor.ingestion.json_adapter import JsonSourceAdapter
from redactor.ingestion.models import ArticleStub, DelayPolicy, PagingPolicy
from redactor.ingestion.normalize import clean_text, html_to_text
from redactor.ingestion.sites.ecn import API_BASE, hits, media_items

SOURCE_ID = 2
LISTING_URL = f"{API_BASE}/emol/ultimoMinuto/*/not:109"
MEDIA_HOST = "staticemol.gen.emol.cl"
PUBLIC_HOST = "static.emol.cl/emol50"
PHOTO_MEDIA_TYPE = 1

SETTINGS = AdapterSettings(
    name="emol",
    source_id=SOURCE_ID,
    base_url="https://www.emol.com",
    paging=PagingPolicy(max_pages=5, page_size=15, style="offset", start=0),
    delay=DelayPolicy.fixed(0.5),
)


def listing_url(offset: int, size: int) -> str:
    return f"{LISTING_URL}?size={size}&from={offset}"


def image_url(source: dict) -> str | None:
    """First photo of the item, rewritten to the public CDN rendition."""
    for media in media_items(source):
        if media.get("IdTipoMedio") != PHOTO_MEDIA_TYPE or not media.get("Url"):
            continue
        url = media["Url"].replace(MEDIA_HOST, PUBLIC_HOST).replace(".jpg", "_0lx0.jpg", 1)
        return re.sub(r"^http:", "https:", url)
    return None


def parse_item(hit: dict) -> ArticleStub | None:
    source = hit["_source"]
    url = source.get("permalink")
    title = clean_text(source.get("titulo"))
    if not url or not title:
        return None
    bajada = source.get("bajada") or []
    return ArticleStub(
        url=url,
        title=title,
        description=bajada[0].get("texto") if bajada else None,
        author=source.get("autor"),
        section=source.get("seccion"),
        tags=tuple(t.get("nombre") for t in source.get("temas") or () if t.get("nombre")),
        content=html_to_text(source.get("texto") or ""),
        image_url=image_url(source),
        published_at=source.get("fechaModificacion") or source.get("fechaPublicacion"),
    )


def build_adapters(fetcher: RateLimitedFetcher, config: Mapping[str, Any]) -> list[JsonSourceAdapter]:
    return [
        JsonSourceAdapter(SETTINGS.with_overrides(config), fetcher, listing_url, hits, parse_item)
    ]
