"""Mutator package applying one ACL change across an S3 prefix."""

__version__ = "1.0.0"

__all__ = [
    "acl_lib",
    "accountant",
    "errors",
    "grants",
    "listing",
    "metrics",
    "pool",
    "types",
]
