"""Content identity — URL fingerprints used as the store's uniqueness key."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from redactor.ingestion.models import CanonicalArticle


def compute_content_hash(url: str) -> str:
    """Compute the SHA-256 fingerprint of an article URL.

    The URL is hashed verbatim: no case folding, no trailing-slash or query
    normalization. ``https://a.cl/x`` and ``https://a.cl/x/`` are two
    different identities.
    """
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


def identify(article: Union[CanonicalArticle, str]) -> str:
    """Return the fingerprint of an article (or of a bare URL).

    Only ``url`` takes part; title edits or re-scraped content never change
    an article's identity.
    """
    url = article if isinstance(article, str) else article.url
    return compute_content_hash(url)
