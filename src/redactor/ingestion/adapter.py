"""Source adapter interface.

Every adapter satisfies the same capability protocol; the three transport
shapes (``html``, ``json``, ``rss``) are separate implementations tagged by
``kind``, and each news site is a configured instance of one of them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import (
    Any,
    Callable,
    Hashable,
    Iterable,
    Literal,
    Mapping,
    Protocol,
    runtime_checkable,
)

from redactor.ingestion.models import (
    ArticleStub,
    CanonicalArticle,
    DelayPolicy,
    Page,
    PagingPolicy,
)

logger = logging.getLogger(__name__)

AdapterKind = Literal["html", "json", "rss"]


@runtime_checkable
class SourceAdapter(Protocol):
    """Listing + detail retrieval for one backend endpoint."""

    name: str
    kind: AdapterKind
    source_id: int
    paging: PagingPolicy
    delay: DelayPolicy
    keep_failed_extractions: bool

    def initial_cursor(self) -> Hashable:
        """Cursor for the first listing page."""
        ...

    def list_page(self, cursor: Hashable) -> Page:
        """Fetch one listing page.

        Returns an empty page with ``has_more=False`` when nothing can be
        extracted. Items that cannot be read are left out and counted in
        ``Page.rejected``. Raises TransportError only when the backend is
        unreachable or answers non-2xx.
        """
        ...

    def fetch_detail(self, stub: ArticleStub) -> CanonicalArticle:
        """Resolve a stub into a canonical article.

        Per-item network or parse failures, and detail fields that cannot be
        applied, yield an article whose content is CONTENT_UNAVAILABLE
        instead of an exception. Raises ExtractionError only when the stub
        itself cannot form an article (empty title, relative URL).
        """
        ...


@dataclass(frozen=True)
class AdapterSettings:
    """Static configuration shared by all adapter variants."""

    name: str
    source_id: int
    base_url: str
    paging: PagingPolicy = field(default_factory=PagingPolicy)
    delay: DelayPolicy = field(default_factory=DelayPolicy)
    headers: Mapping[str, str] = field(default_factory=dict)
    keep_failed_extractions: bool = False

    def with_overrides(self, overrides: Mapping[str, Any]) -> AdapterSettings:
        """Apply ``sources.json`` overrides (page limits, delay bounds)."""
        paging = self.paging
        delay = self.delay
        if "max_pages" in overrides or "page_size" in overrides:
            paging = replace(
                paging,
                max_pages=int(overrides.get("max_pages", paging.max_pages)),
                page_size=int(overrides.get("page_size", paging.page_size)),
            )
        if "delay_min_seconds" in overrides or "delay_max_seconds" in overrides:
            low = float(overrides.get("delay_min_seconds", delay.min_seconds))
            high = float(overrides.get("delay_max_seconds", max(low, delay.max_seconds)))
            delay = replace(delay, min_seconds=low, max_seconds=high)
        return replace(
            self,
            paging=paging,
            delay=delay,
            keep_failed_extractions=bool(
                overrides.get("keep_failed_extractions", self.keep_failed_extractions)
            ),
        )

    @property
    def origin(self) -> str:
        return self.base_url.rstrip("/")


def collect_stubs(
    adapter_name: str,
    read_items: Callable[[], Iterable[Any]],
    parse_item: Callable[[Any], ArticleStub | None],
) -> tuple[list[ArticleStub], int, bool]:
    """Map raw listing items to stubs, isolating each item's failure.

    ``read_items()`` is drained in full first; if that raises, the listing
    structure is unusable and ``([], 0, False)`` is returned. An item
    whose ``parse_item`` call raises is logged and counted as rejected,
    and the rest of the page is still mapped. ``None`` results (items the
    parser chose to skip) are dropped.

    Returns ``(stubs, rejected, complete)``.
    """
    try:
        raw_items = list(read_items())
    except Exception:
        logger.warning("%s: listing has an unexpected structure", adapter_name, exc_info=True)
        return [], 0, False

    collected: list[ArticleStub] = []
    rejected = 0
    for position, item in enumerate(raw_items, start=1):
        try:
            stub = parse_item(item)
        except Exception:
            rejected += 1
            logger.warning(
                "%s: listing item %d/%d could not be read",
                adapter_name, position, len(raw_items), exc_info=True,
            )
            continue
        if stub is not None:
            collected.append(stub)
    return collected, rejected, True


def page_from(
    adapter: SourceAdapter,
    cursor: Hashable,
    stubs: list[ArticleStub],
    complete: bool,
    rejected: int = 0,
) -> Page:
    """Build a Page, ending pagination on empty or malformed listings."""
    has_more = complete and (bool(stubs) or rejected > 0)
    next_cursor = adapter.paging.advance(cursor) if has_more else None
    return Page(stubs=tuple(stubs), next_cursor=next_cursor, has_more=has_more, rejected=rejected)
