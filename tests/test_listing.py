"""Paginated enumeration and key filtering."""
from __future__ import annotations

import pytest

from backend.mutator.errors import ListingError, PatternCompileError
from backend.mutator.listing import KeyFilter, compile_pattern, iter_pages


def test_iter_pages_yields_each_page(make_s3):
    s3 = make_s3([["logs/a", "logs/b"], ["logs/c"], []])

    pages = list(iter_pages(s3, "bucket", "logs/"))

    assert pages == [("logs/a", "logs/b"), ("logs/c",), ()]
    assert s3.calls_for("list_objects_v2") == [{"Bucket": "bucket", "Prefix": "logs/"}]


def test_iter_pages_respects_prefix(make_s3):
    s3 = make_s3([["logs/a", "other/b"], ["logs/c"]])
    assert list(iter_pages(s3, "bucket", "logs/")) == [("logs/a",), ("logs/c",)]


def test_listing_failure_raises_after_delivered_pages(make_s3):
    s3 = make_s3([["a", "b"], ["c"]], list_error_after=1)
    pages = iter_pages(s3, "bucket", "")

    assert next(pages) == ("a", "b")
    with pytest.raises(ListingError) as excinfo:
        next(pages)
    assert excinfo.value.bucket == "bucket"
    assert "InternalError" in str(excinfo.value)


def test_default_filter_matches_everything():
    key_filter = KeyFilter()
    assert key_filter.pattern == ".*"
    assert key_filter.matches("")
    assert key_filter.matches("deep/nested/key.bin")


def test_filter_searches_whole_key():
    key_filter = KeyFilter(compile_pattern(r"\.jpg$"))
    assert key_filter.matches("photos/2024/cat.jpg")
    assert not key_filter.matches("photos/2024/cat.jpg.bak")


def test_invalid_pattern_fails_fast():
    with pytest.raises(PatternCompileError) as excinfo:
        compile_pattern("([unclosed")
    assert excinfo.value.pattern == "([unclosed"
