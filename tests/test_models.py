"""Tests for redactor.ingestion.models — value types shared by adapters."""

from __future__ import annotations

import dataclasses

import pytest

from redactor.ingestion.models import (
    CONTENT_UNAVAILABLE,
    ArticleStub,
    CanonicalArticle,
    DelayPolicy,
    PagingPolicy,
)


class TestPagingPolicy:
    def test_offset_advances_by_page_size(self):
        policy = PagingPolicy(max_pages=5, page_size=15, style="offset", start=0)
        assert policy.advance(0) == 15
        assert policy.advance(15) == 30

    def test_page_advances_by_one(self):
        policy = PagingPolicy(style="page", start=1)
        assert policy.advance(1) == 2

    def test_defaults(self):
        policy = PagingPolicy()
        assert policy.max_pages == 5
        assert policy.page_size == 10
        assert policy.style == "page"
        assert policy.start == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_pages": 0},
            {"page_size": 0},
            {"style": "cursor"},
        ],
    )
    def test_invalid_values_raise(self, kwargs):
        with pytest.raises(ValueError):
            PagingPolicy(**kwargs)


class TestDelayPolicy:
    def test_fixed(self):
        delay = DelayPolicy.fixed(0.8)
        assert delay.min_seconds == delay.max_seconds == 0.8
        assert delay.when == "after"
        assert not delay.is_random

    def test_random_range(self):
        assert DelayPolicy(1.0, 2.0).is_random

    def test_negative_raises(self):
        with pytest.raises(ValueError):
            DelayPolicy(-1.0, 1.0)

    def test_inverted_bounds_raise(self):
        with pytest.raises(ValueError):
            DelayPolicy(2.0, 1.0)

    def test_bad_timing_raises(self):
        with pytest.raises(ValueError, match="before"):
            DelayPolicy(0.1, 0.1, when="during")


class TestCanonicalArticle:
    def test_frozen(self):
        article = CanonicalArticle(source_id=1, title="T", url="https://a.cl/x", content="C")
        with pytest.raises(dataclasses.FrozenInstanceError):
            article.title = "Otro"

    def test_extraction_failed(self):
        ok = CanonicalArticle(source_id=1, title="T", url="https://a.cl/x", content="C")
        failed = dataclasses.replace(ok, content=CONTENT_UNAVAILABLE)
        assert not ok.extraction_failed
        assert failed.extraction_failed


class TestArticleStub:
    def test_extra_not_part_of_equality(self):
        a = ArticleStub(url="https://a.cl/x", title="T", extra={"uri": "/x"})
        b = ArticleStub(url="https://a.cl/x", title="T")
        assert a == b
