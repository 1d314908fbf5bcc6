"""Exception hierarchy for the recursive ACL sweeper."""
from __future__ import annotations


class SweepError(Exception):
    """Base class for all sweeper errors."""


class ConfigError(SweepError):
    """Raised before the pipeline starts when the configuration is invalid."""


class PatternCompileError(ConfigError):
    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Failed to compile regex '{pattern}': {reason}")
        self.pattern = pattern


class ListingError(SweepError):
    """Enumeration failed; fatal to the run."""

    def __init__(self, bucket: str, prefix: str, reason: str):
        super().__init__(f"Failed to list objects in '{bucket}' under '{prefix}': {reason}")
        self.bucket = bucket
        self.prefix = prefix


class ReadAclError(SweepError):
    def __init__(self, key: str, reason: str):
        super().__init__(f"Failed to read acl on '{key}': {reason}")
        self.key = key


class WriteAclError(SweepError):
    def __init__(self, key: str, attempts: int, reason: str):
        super().__init__(f"Failed to change permissions on '{key}' after {attempts} attempt(s): {reason}")
        self.key = key
        self.attempts = attempts


__all__ = [
    "ConfigError",
    "ListingError",
    "PatternCompileError",
    "ReadAclError",
    "SweepError",
    "WriteAclError",
]
