"""Helpers for WordPress REST API backends (CIPER, El Ciudadano)."""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping
from urllib.parse import urlencode

from redactor.ingestion.errors import TransportError
from redactor.ingestion.fetcher import RateLimitedFetcher, require_success

logger = logging.getLogger(__name__)

# _embedded["wp:term"] holds one list per taxonomy, categories first
CATEGORY_TERMS = 0
TAG_TERMS = 1


def posts_url(api_base: str, page: int, per_page: int, category: int) -> str:
    query = urlencode({
        "page": page,
        "per_page": per_page,
        "categories": category,
        "_embed": "true",
    })
    return f"{api_base}/posts?{query}"


def posts(payload: Any) -> list[Any]:
    """Return the post list of a ``/posts`` response."""
    if not isinstance(payload, list):
        raise TypeError(f"expected a list of posts, got {type(payload).__name__}")
    return payload


def rendered(post: Mapping[str, Any], key: str) -> str:
    """The ``rendered`` HTML of a field such as ``title`` or ``content``."""
    return (post.get(key) or {}).get("rendered") or ""


def term_names(post: Mapping[str, Any], taxonomy: int) -> list[str]:
    terms = (post.get("_embedded") or {}).get("wp:term") or []
    if len(terms) <= taxonomy:
        return []
    return [t["name"] for t in terms[taxonomy] or () if t.get("name")]


def featured_image(post: Mapping[str, Any]) -> str | None:
    media = (post.get("_embedded") or {}).get("wp:featuredmedia") or []
    return media[0].get("source_url") if media else None


class AuthorDirectory:
    """Resolves WordPress user ids to display names through ``/users/{id}``.

    Names are cached for the lifetime of the directory, which is shared by
    every adapter of one site. A failed lookup is logged, returns None and
    is retried the next time the id appears.
    """

    def __init__(
        self,
        fetcher: RateLimitedFetcher,
        api_base: str,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._api_base = api_base
        self._headers = dict(headers or {})
        self._names: dict[int, str] = {}
        self._lock = threading.Lock()

    def name(self, user_id: int | None) -> str | None:
        if user_id is None:
            return None
        with self._lock:
            cached = self._names.get(user_id)
        if cached is not None:
            return cached

        url = f"{self._api_base}/users/{user_id}"
        try:
            response = require_success(self._fetcher.fetch(url, headers=self._headers))
            name = response.json().get("name")
        except (TransportError, ValueError, AttributeError) as exc:
            logger.warning("Author lookup failed for user %s: %s", user_id, exc)
            return None
        if not name:
            return None
        with self._lock:
            self._names[user_id] = name
        return name
