"""Paginated object enumeration and key filtering."""
from __future__ import annotations

import logging
import re
from typing import Iterator

from botocore.exceptions import BotoCoreError, ClientError

from .errors import ListingError, PatternCompileError
from .types import ObjectKey

LOGGER = logging.getLogger(__name__)

DEFAULT_PATTERN = ".*"


def iter_pages(client, bucket: str, prefix: str = "") -> Iterator[tuple[ObjectKey, ...]]:  # type: ignore[no-untyped-def]
    """Yield the keys of each ``list_objects_v2`` page under ``prefix``.

    A page is fully read before its keys are yielded. Any listing failure
    stops the enumeration and is raised as ``ListingError``.
    """
    paginator = client.get_paginator("list_objects_v2")
    pages = paginator.paginate(Bucket=bucket, Prefix=prefix)
    page_number = 0
    try:
        for page in pages:
            page_number += 1
            keys = tuple(obj["Key"] for obj in page.get("Contents", []) if obj.get("Key"))
            LOGGER.debug("Listed page %d of %s/%s with %d keys", page_number, bucket, prefix, len(keys))
            yield keys
    except (ClientError, BotoCoreError) as exc:
        raise ListingError(bucket, prefix, str(exc)) from exc


def compile_pattern(pattern: str | None) -> re.Pattern[str]:
    """Compile the inclusion regex once, failing fast on invalid input."""
    source = DEFAULT_PATTERN if pattern is None else pattern
    try:
        return re.compile(source)
    except re.error as exc:
        raise PatternCompileError(source, str(exc)) from exc


class KeyFilter:
    """Predicate selecting which enumerated keys are eligible for mutation."""

    def __init__(self, pattern: re.Pattern[str] | None = None):
        self._pattern = pattern or compile_pattern(DEFAULT_PATTERN)

    @property
    def pattern(self) -> str:
        return self._pattern.pattern

    def matches(self, key: ObjectKey) -> bool:
        return self._pattern.search(key) is not None


__all__ = ["DEFAULT_PATTERN", "KeyFilter", "compile_pattern", "iter_pages"]
