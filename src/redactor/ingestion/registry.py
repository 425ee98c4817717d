"""Site registry — maps ``sources.json`` type strings to adapter builders."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping

if TYPE_CHECKING:
    from redactor.ingestion.adapter import SourceAdapter
    from redactor.ingestion.fetcher import RateLimitedFetcher

# A builder receives the shared fetcher and the site's config entry and
# returns one adapter per fixed endpoint (category, feed, listing page).
SiteBuilder = Callable[["RateLimitedFetcher", Mapping[str, Any]], "list[SourceAdapter]"]

_REGISTRY: dict[str, SiteBuilder] = {}


def register_site(type_name: str, builder: SiteBuilder) -> None:
    """Register an adapter builder for a given site type name."""
    _REGISTRY[type_name] = builder


def get_site_builder(type_name: str) -> SiteBuilder | None:
    """Look up a site builder by type name. Returns None if not found."""
    return _REGISTRY.get(type_name)


def registered_sites() -> list[str]:
    """Return a sorted list of all registered site type names."""
    return sorted(_REGISTRY)
