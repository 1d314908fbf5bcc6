"""Command-line interface for the recursive S3 object ACL sweeper."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from ..mutator import __version__
from ..mutator.errors import ConfigError
from ..mutator.grants import CANNED_ACLS, DEFAULT_CANNED_ACL
from ..mutator.listing import DEFAULT_PATTERN
from . import job, report
from .config import DEFAULT_PARALLEL, build_config

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_LISTING_ERROR = 1
EXIT_CONFIG_ERROR = 2


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        config = build_config(
            bucket=args.bucket,
            region=args.region,
            prefix=args.path,
            parallel=args.parallel,
            acl=args.acl,
            grants=args.grants,
            regex=args.regex,
            dry_run=args.dry_run,
            profile=args.profile,
            endpoint_url=args.endpoint,
        )
        client = job.make_s3_client(config)
    except ConfigError as exc:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    outcome = job.run_sweep(config, client=client)
    _emit_outputs(outcome, args)

    if outcome.fatal:
        LOGGER.error("Sweep aborted: %s", outcome.listing_error)
        return EXIT_LISTING_ERROR
    # Per-object failures only show up in the summary counts.
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3-recursive-acl",
        description="Recursively apply a canned ACL or explicit grants to S3 objects under a prefix",
    )
    parser.add_argument("--bucket", help="Bucket name", default=None)
    parser.add_argument("--path", help="Prefix to recurse under", default="")
    parser.add_argument("--region", help="AWS region (default: AWS_REGION / AWS_DEFAULT_REGION)", default=None)
    parser.add_argument("--profile", help="AWS credentials profile name", default=None)
    parser.add_argument("--endpoint", help="Custom S3 endpoint URL", default=None)
    parser.add_argument(
        "--parallel",
        type=int,
        default=DEFAULT_PARALLEL,
        help="Number of parallel workers; too many may exhaust open files or hit rate limits",
    )
    parser.add_argument("--acl", choices=CANNED_ACLS, default=DEFAULT_CANNED_ACL, help="Canned ACL to assign objects")
    parser.add_argument(
        "--grants",
        default=None,
        help=(
            "Grants as JSON; when set --acl is ignored, e.g. "
            '\'[{"Grantee":{"ID":"123456789","Type":"CanonicalUser"},"Permission":"FULL_CONTROL"}]\''
        ),
    )
    parser.add_argument("--regex", default=DEFAULT_PATTERN, help="Only update keys matching this regex")
    parser.add_argument("--dry-run", action="store_true", help="Read ACLs but don't change them")
    parser.add_argument("--out", help="Write JSON report to path", default=None)
    parser.add_argument("--csv", help="Write CSV of failed keys to path", default=None)
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s %(name)s - %(message)s")


def _emit_outputs(outcome: job.SweepOutcome, args) -> None:  # type: ignore[no-untyped-def]
    print(outcome.summary_line)
    if not args.out and not args.csv:
        return
    report_payload = report.generate_summary(outcome)
    if args.out:
        _write_file(args.out, report.render(report_payload, fmt="json"))
    if args.csv:
        _write_file(args.csv, report.render(report_payload, fmt="csv"))


def _write_file(path: str, data: str) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(data)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
