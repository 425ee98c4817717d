"""Tests for redactor.ingestion.registry — site registry."""

from __future__ import annotations

import redactor.ingestion  # noqa: F401  registers the built-in sites
from redactor.ingestion.registry import (
    _REGISTRY,
    get_site_builder,
    register_site,
    registered_sites,
)

BUILT_IN_SITES = [
    "ap", "biobio", "ciper", "cooperativa", "df", "efe", "elciudadano", "emol",
    "latercera", "reuters", "soychile",
]


def _dummy_builder(fetcher, config):
    return []


class TestRegistry:
    def setup_method(self):
        self._original = dict(_REGISTRY)

    def teardown_method(self):
        _REGISTRY.clear()
        _REGISTRY.update(self._original)

    def test_register_and_lookup(self):
        register_site("dummy", _dummy_builder)
        assert get_site_builder("dummy") is _dummy_builder

    def test_lookup_unknown_returns_none(self):
        assert get_site_builder("nonexistent") is None

    def test_registered_sites_sorted(self):
        register_site("zzz", _dummy_builder)
        register_site("aaa", _dummy_builder)
        sites = registered_sites()
        assert sites[0] == "aaa"
        assert sites == sorted(sites)
        assert "zzz" in sites

    def test_built_in_sites_registered(self):
        for site in BUILT_IN_SITES:
            assert get_site_builder(site) is not None, site
