"""Reporting utilities for sweep outcomes."""
from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

# Avoid runtime circular imports by type-checking only
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .job import SweepOutcome


def generate_summary(outcome: SweepOutcome, timestamp: datetime | None = None) -> dict[str, Any]:
    """Produce a structured summary for a sweep outcome."""
    swept_at = _timestamp(timestamp or outcome.started_at)
    failures = [{"key": key, "error": error} for key, error in outcome.failures]
    if outcome.fatal:
        status = "error"
    elif outcome.counters.failed:
        status = "partial"
    else:
        status = "success"
    return {
        "swept_at": swept_at,
        "bucket": outcome.bucket,
        "prefix": outcome.prefix,
        "dry_run": outcome.dry_run.active,
        "status": status,
        "summary": outcome.counters.to_dict(),
        "duration_ms": round(outcome.duration_ms, 3),
        "failures": failures,
        "error": str(outcome.listing_error) if outcome.listing_error else None,
    }


def render(report_payload: Mapping[str, Any], fmt: str = "json") -> str:
    """Render the report payload as JSON or CSV."""
    if fmt == "csv":
        return _render_csv(report_payload.get("failures", []), report_payload.get("swept_at"))
    return json.dumps(report_payload, indent=2, default=str, ensure_ascii=False)


def _render_csv(rows: Sequence[Mapping[str, Any]], timestamp: str | None) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=["key", "error", "ts"])
    writer.writeheader()
    for row in rows:
        payload = dict(row)
        payload.setdefault("ts", timestamp or "")
        writer.writerow(payload)
    return buffer.getvalue()


def _timestamp(value: datetime | None) -> str:
    when = value or datetime.now(timezone.utc)
    return when.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


__all__ = ["generate_summary", "render"]
