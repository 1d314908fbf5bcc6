"""Sweep orchestration: enumerate, filter, dispatch, drain, account."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ProfileNotFound

from ..mutator import acl_lib, grants, metrics
from ..mutator.accountant import Accountant, format_summary
from ..mutator.errors import ConfigError, ListingError
from ..mutator.listing import KeyFilter, iter_pages
from ..mutator.pool import WorkerPool
from ..mutator.types import Counters, DryRunState, MutationTask
from .config import SweepConfig

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SweepOutcome:
    bucket: str
    prefix: str
    counters: Counters
    dry_run: DryRunState
    started_at: datetime
    duration_ms: float
    failures: Sequence[tuple[str, str]] = field(default_factory=tuple)
    listing_error: ListingError | None = None

    @property
    def fatal(self) -> bool:
        return self.listing_error is not None

    @property
    def summary_line(self) -> str:
        return format_summary(self.counters, self.dry_run)


def run_sweep(
    config: SweepConfig,
    *,
    client=None,  # type: ignore[no-untyped-def]
    session=None,  # type: ignore[no-untyped-def]
    now: datetime | None = None,
) -> SweepOutcome:
    """Apply ``config.acl`` to every matching object under ``config.prefix``.

    Counters are read only after the worker pool has been joined. A listing
    failure stops enumeration but already queued objects are still mutated
    before the outcome is returned with ``listing_error`` set.
    """
    s3 = client or make_s3_client(config, session=session)
    accountant = Accountant()
    key_filter = KeyFilter(config.pattern)
    label = config.dry_run.label_prefix
    started_at = now or metrics.now()
    start = time.perf_counter()
    listing_error: ListingError | None = None

    def _work(task: MutationTask) -> None:
        outcome = acl_lib.apply_acl(s3, task, dry_run=config.dry_run, accountant=accountant)
        LOGGER.debug(
            "%s'%s': %s (attempts=%d, acl_read=%s)",
            label,
            outcome.key,
            outcome.message,
            outcome.attempts,
            outcome.acl_read,
        )

    def _crash(task: MutationTask, exc: BaseException) -> None:
        accountant.record_failure(task.key, str(exc))

    LOGGER.info(
        "%sApplying %s to s3://%s/%s with %d workers (regex %s)",
        label,
        grants.describe(config.acl),
        config.bucket,
        config.prefix,
        config.parallel,
        key_filter.pattern,
    )
    with WorkerPool(config.parallel, _work, on_error=_crash) as pool:
        try:
            _dispatch(s3, config, key_filter, accountant, pool)
        except ListingError as exc:
            LOGGER.error("%s%s", label, exc)
            listing_error = exc

    counters = accountant.finalize()
    duration_ms = (time.perf_counter() - start) * 1000
    outcome = SweepOutcome(
        bucket=config.bucket,
        prefix=config.prefix,
        counters=counters,
        dry_run=config.dry_run,
        started_at=started_at,
        duration_ms=duration_ms,
        failures=tuple(accountant.failures),
        listing_error=listing_error,
    )
    metrics.put_run_metric(
        bucket_name=config.bucket,
        dry_run=config.dry_run.active,
        counters=counters,
        duration_ms=duration_ms,
    )
    return outcome


def make_s3_client(config: SweepConfig, session=None):  # type: ignore[no-untyped-def]
    """Build one S3 client shared by all workers, pooled for ``parallel`` connections.

    An unknown profile or malformed endpoint is raised as ``ConfigError``.
    """
    try:
        session = session or boto3.Session(profile_name=config.profile, region_name=config.region)
        return session.client(
            "s3",
            region_name=config.region,
            endpoint_url=config.endpoint_url,
            config=BotoConfig(
                max_pool_connections=max(config.parallel, 10),
                retries={"mode": "standard"},
            ),
        )
    except ProfileNotFound as exc:
        raise ConfigError(str(exc)) from exc
    except ValueError as exc:
        raise ConfigError(f"Invalid S3 endpoint '{config.endpoint_url}': {exc}") from exc


def _dispatch(
    s3,  # type: ignore[no-untyped-def]
    config: SweepConfig,
    key_filter: KeyFilter,
    accountant: Accountant,
    pool: WorkerPool[MutationTask],
) -> None:
    label = config.dry_run.label_prefix
    for keys in iter_pages(s3, config.bucket, config.prefix):
        for key in keys:
            accountant.record_seen()
            if not key_filter.matches(key):
                LOGGER.info("%sSkipping '%s'", label, key)
                continue
            accountant.record_matched()
            pool.submit(MutationTask(bucket=config.bucket, key=key, acl=config.acl))


__all__ = ["SweepOutcome", "make_s3_client", "run_sweep"]
