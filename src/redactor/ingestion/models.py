"""Canonical article model and the value types exchanged with source adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, Mapping

from redactor.ingestion.dedup import compute_content_hash

# Stored in ``content`` when the body could not be retrieved, so consumers can
# tell an extraction failure apart from a genuinely empty article.
CONTENT_UNAVAILABLE = "[ERROR AL CARGAR CONTENIDO]"

PAGING_STYLES = frozenset({"offset", "page"})
DELAY_TIMING = frozenset({"before", "after"})


@dataclass(frozen=True)
class CanonicalArticle:
    """Normalized article record produced by every adapter."""

    source_id: int
    title: str
    url: str
    content: str
    description: str | None = None
    author: str | None = None
    section: str | None = None
    tags: tuple[str, ...] = ()
    image_url: str | None = None
    published_at: str | None = None  # ISO 8601

    @property
    def content_hash(self) -> str:
        return compute_content_hash(self.url)

    @property
    def extraction_failed(self) -> bool:
        return self.content == CONTENT_UNAVAILABLE


@dataclass(frozen=True)
class ArticleStub:
    """Partially populated listing item.

    ``url`` and ``title`` are always present; everything else is best-effort.
    ``extra`` carries adapter-private data such as the raw JSON item or the
    key of a separate detail endpoint.
    """

    url: str
    title: str
    description: str | None = None
    author: str | None = None
    section: str | None = None
    tags: tuple[str, ...] = ()
    content: str | None = None
    image_url: str | None = None
    published_at: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Page:
    """One page of listing results."""

    stubs: tuple[ArticleStub, ...]
    next_cursor: Hashable | None
    has_more: bool
    rejected: int = 0  # listing items whose mapping to a stub raised


@dataclass(frozen=True)
class PagingPolicy:
    """Declared pagination limits for one adapter.

    ``style`` is ``offset`` (cursor advances by ``page_size``) or ``page``
    (cursor advances by one). ``start`` is the initial cursor value.
    """

    max_pages: int = 5
    page_size: int = 10
    style: str = "page"
    start: int = 1

    def __post_init__(self) -> None:
        if self.max_pages < 1:
            raise ValueError(f"max_pages must be >= 1, got {self.max_pages}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")
        if self.style not in PAGING_STYLES:
            raise ValueError(f"paging style '{self.style}' must be one of {sorted(PAGING_STYLES)}")

    def advance(self, cursor: int) -> int:
        return cursor + self.page_size if self.style == "offset" else cursor + 1


@dataclass(frozen=True)
class DelayPolicy:
    """Delay applied around outbound requests.

    Fixed when ``min_seconds == max_seconds``, uniformly random otherwise.
    """

    min_seconds: float = 0.0
    max_seconds: float = 0.0
    when: str = "after"

    def __post_init__(self) -> None:
        if self.min_seconds < 0 or self.max_seconds < self.min_seconds:
            raise ValueError(
                f"invalid delay bounds: min={self.min_seconds}, max={self.max_seconds}"
            )
        if self.when not in DELAY_TIMING:
            raise ValueError(f"delay timing '{self.when}' must be 'before' or 'after'")

    @classmethod
    def fixed(cls, seconds: float, when: str = "after") -> DelayPolicy:
        return cls(seconds, seconds, when)

    @property
    def is_random(self) -> bool:
        return self.max_seconds > self.min_seconds
