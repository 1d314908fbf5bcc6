"""Utility helpers for emitting AWS EMF metrics."""
from __future__ import annotations

from datetime import datetime, timezone

import json
import logging
import time

from .types import Counters

LOGGER = logging.getLogger(__name__)

NAMESPACE = "S3RecursiveAcl"
DIMENSIONS = [["Bucket", "Mode"]]


def now() -> datetime:
    """Return a timezone-aware timestamp used for run reports."""
    return datetime.now(timezone.utc)


def put_run_metric(
    *,
    bucket_name: str,
    dry_run: bool,
    counters: Counters,
    duration_ms: float,
) -> dict[str, object]:
    """Emit an Embedded Metric Format (EMF) log entry summarising one sweep."""
    metric = {
        "_aws": {
            "Timestamp": int(time.time() * 1000),
            "CloudWatchMetrics": [
                {
                    "Namespace": NAMESPACE,
                    "Dimensions": DIMENSIONS,
                    "Metrics": [
                        {"Name": "Seen", "Unit": "Count"},
                        {"Name": "Matched", "Unit": "Count"},
                        {"Name": "Succeeded", "Unit": "Count"},
                        {"Name": "Failed", "Unit": "Count"},
                        {"Name": "Duration", "Unit": "Milliseconds"},
                    ],
                }
            ],
        },
        "Bucket": str(bucket_name or "unknown"),
        "Mode": "DRY_RUN" if dry_run else "ENFORCE",
        "Seen": counters.seen,
        "Matched": counters.matched,
        "Succeeded": counters.succeeded,
        "Failed": counters.failed,
        "Duration": duration_ms,
    }
    LOGGER.info("EMF %s", json.dumps(metric))
    return metric
