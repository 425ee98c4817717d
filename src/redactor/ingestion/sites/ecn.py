"""Helpers for the El Mercurio newsapi.ecn.cl search backend (Emol, SoyChile)."""

from __future__ import annotations

from typing import Any

API_BASE = "https://newsapi.ecn.cl/NewsApi"


def hits(payload: Any) -> list[Any]:
    """Return the hit list of a search response; each hit wraps one ``_source``."""
    return payload["hits"]["hits"]


def media_items(source: dict) -> list[dict]:
    tables = source.get("tablas") or {}
    return tables.get("tablaMedios") or []
