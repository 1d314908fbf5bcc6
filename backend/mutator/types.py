"""Typed value objects shared across mutator modules."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

ObjectKey = str
"""Alias for an S3 object key within a bucket."""

DRY_RUN_LABEL = "DRY RUN: "


@dataclass(frozen=True, slots=True)
class Grantee:
    """Identity receiving a grant (canonical user, email or group URI)."""

    type: str
    id: str | None = None
    uri: str | None = None
    email_address: str | None = None
    display_name: str | None = None

    def to_boto(self) -> dict[str, str]:
        payload = {"Type": self.type}
        if self.id:
            payload["ID"] = self.id
        if self.uri:
            payload["URI"] = self.uri
        if self.email_address:
            payload["EmailAddress"] = self.email_address
        if self.display_name:
            payload["DisplayName"] = self.display_name
        return payload


@dataclass(frozen=True, slots=True)
class Grant:
    """A single grantee/permission pair."""

    grantee: Grantee
    permission: str

    def to_boto(self) -> dict[str, Any]:
        return {"Grantee": self.grantee.to_boto(), "Permission": self.permission}


@dataclass(frozen=True, slots=True)
class CannedAcl:
    """Predefined ACL applied wholesale with a single write."""

    value: str


@dataclass(frozen=True, slots=True)
class GrantList:
    """Explicit grants replacing whatever the object currently carries."""

    grants: tuple[Grant, ...]


AclSpec = Union[CannedAcl, GrantList]


@dataclass(frozen=True, slots=True)
class MutationTask:
    """One unit of work: apply ``acl`` to ``bucket/key``."""

    bucket: str
    key: ObjectKey
    acl: AclSpec


@dataclass(frozen=True, slots=True)
class DryRunState:
    active: bool = False
    label_prefix: str = ""

    @classmethod
    def from_flag(cls, active: bool) -> DryRunState:
        return cls(active=active, label_prefix=DRY_RUN_LABEL if active else "")


@dataclass(frozen=True, slots=True)
class Counters:
    """Final snapshot of the run accounting."""

    seen: int = 0
    matched: int = 0
    succeeded: int = 0
    failed: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "seen": self.seen,
            "matched": self.matched,
            "succeeded": self.succeeded,
            "failed": self.failed,
        }


@dataclass(slots=True)
class MutationOutcome:
    """Describes the result of mutating a single object."""

    key: ObjectKey
    succeeded: bool
    attempts: int = 0
    acl_read: bool = False
    error: str | None = None
    message: str | None = None
