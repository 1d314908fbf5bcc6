"""Resolution and validation of the sweep configuration."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Mapping

from ..mutator.errors import ConfigError
from ..mutator.grants import resolve_acl_spec
from ..mutator.listing import compile_pattern
from ..mutator.types import AclSpec, DryRunState

REGION_ENVS = ("AWS_REGION", "AWS_DEFAULT_REGION")
DEFAULT_PARALLEL = 32


@dataclass(frozen=True, slots=True)
class SweepConfig:
    """Validated inputs for one sweep; immutable once built."""

    bucket: str
    prefix: str
    region: str
    parallel: int
    acl: AclSpec
    pattern: re.Pattern[str]
    dry_run: DryRunState
    profile: str | None = None
    endpoint_url: str | None = None


def build_config(
    *,
    bucket: str | None,
    region: str | None = None,
    prefix: str | None = "",
    parallel: int = DEFAULT_PARALLEL,
    acl: str | None = None,
    grants: str | None = None,
    regex: str | None = None,
    dry_run: bool = False,
    profile: str | None = None,
    endpoint_url: str | None = None,
    env: Mapping[str, str] | None = None,
) -> SweepConfig:
    """Validate raw inputs, raising ``ConfigError`` before any network call."""
    env = os.environ if env is None else env
    if not bucket:
        raise ConfigError("bucket is mandatory")
    resolved_region = region or _region_from_env(env)
    if not resolved_region:
        raise ConfigError("region is mandatory (use --region, AWS_REGION or AWS_DEFAULT_REGION)")
    if isinstance(parallel, bool) or not isinstance(parallel, int) or parallel < 1:
        raise ConfigError(f"parallel must be at least 1, got {parallel!r}")

    return SweepConfig(
        bucket=bucket,
        prefix=prefix or "",
        region=resolved_region,
        parallel=parallel,
        acl=resolve_acl_spec(acl, grants),
        pattern=compile_pattern(regex),
        dry_run=DryRunState.from_flag(dry_run),
        profile=profile or None,
        endpoint_url=endpoint_url or None,
    )


def _region_from_env(env: Mapping[str, str]) -> str | None:
    for name in REGION_ENVS:
        value = env.get(name)
        if value:
            return value
    return None


__all__ = ["DEFAULT_PARALLEL", "SweepConfig", "build_config"]
