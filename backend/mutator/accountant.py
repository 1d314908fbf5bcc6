"""Thread-safe run accounting."""
from __future__ import annotations

import threading

from .types import Counters, DryRunState, ObjectKey

# Failed keys kept for the report; the failed count stays exact past this.
MAX_RECORDED_FAILURES = 1000


class Accountant:
    """Owns the four run counters; shared by reference with every worker.

    All updates go through one lock. ``finalize`` must be called exactly once,
    after the worker pool has been joined.
    """

    def __init__(self, max_recorded_failures: int = MAX_RECORDED_FAILURES) -> None:
        self._lock = threading.Lock()
        self._seen = 0
        self._matched = 0
        self._succeeded = 0
        self._failed = 0
        self._failures: list[tuple[ObjectKey, str]] = []
        self._max_recorded_failures = max_recorded_failures
        self._finalized = False

    def record_seen(self) -> None:
        with self._lock:
            self._seen += 1

    def record_matched(self) -> None:
        with self._lock:
            self._matched += 1

    def record_success(self) -> None:
        with self._lock:
            self._succeeded += 1

    def record_failure(self, key: ObjectKey | None = None, error: str | None = None) -> None:
        with self._lock:
            self._failed += 1
            if key is not None and len(self._failures) < self._max_recorded_failures:
                self._failures.append((key, error or "unknown error"))

    def finalize(self) -> Counters:
        with self._lock:
            if self._finalized:
                raise RuntimeError("Accountant already finalized")
            self._finalized = True
            return Counters(
                seen=self._seen,
                matched=self._matched,
                succeeded=self._succeeded,
                failed=self._failed,
            )

    @property
    def failures(self) -> list[tuple[ObjectKey, str]]:
        """First failed keys with their last error, in completion order (capped)."""
        with self._lock:
            return list(self._failures)


def format_summary(counters: Counters, dry_run: DryRunState) -> str:
    return (
        f"{dry_run.label_prefix}Summary: ACL changed: {counters.succeeded}, "
        f"objects matched: {counters.matched}, total objects: {counters.seen}, "
        f"errors: {counters.failed}"
    )


__all__ = ["MAX_RECORDED_FAILURES", "Accountant", "format_summary"]
