"""Parsing helpers turning CLI input into an ``AclSpec``."""
from __future__ import annotations

import json
import logging
from typing import Mapping, Sequence

from .errors import ConfigError
from .types import AclSpec, CannedAcl, Grant, Grantee, GrantList

LOGGER = logging.getLogger(__name__)

# https://docs.aws.amazon.com/AmazonS3/latest/userguide/acl-overview.html#canned-acl
CANNED_ACLS = (
    "private",
    "public-read",
    "public-read-write",
    "aws-exec-read",
    "authenticated-read",
    "bucket-owner-read",
    "bucket-owner-full-control",
)
DEFAULT_CANNED_ACL = "private"

GRANTEE_TYPES = {"CanonicalUser", "AmazonCustomerByEmail", "Group"}
PERMISSIONS = {"FULL_CONTROL", "WRITE", "WRITE_ACP", "READ", "READ_ACP"}

# Field each grantee type needs to identify the principal.
_REQUIRED_IDENTITY = {
    "CanonicalUser": "ID",
    "AmazonCustomerByEmail": "EmailAddress",
    "Group": "URI",
}


def parse_grants(raw: str) -> tuple[Grant, ...]:
    """Parse a JSON grant list, e.g. ``[{"Grantee": {...}, "Permission": "READ"}]``."""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid grants JSON: {exc}") from exc
    if isinstance(payload, Mapping):
        payload = [payload]
    if not isinstance(payload, list):
        raise ConfigError("Grants must be a JSON list of grant objects")
    if not payload:
        raise ConfigError("Grants list is empty; omit --grants to apply a canned ACL")
    return tuple(_parse_grant(entry, index) for index, entry in enumerate(payload))


def resolve_acl_spec(canned_acl: str | None, grants_json: str | None) -> AclSpec:
    """Decide once between canned and explicit grant mode.

    Grants always win; the canned value is ignored when grants are supplied.
    """
    if grants_json:
        grants = parse_grants(grants_json)
        if canned_acl and canned_acl != DEFAULT_CANNED_ACL:
            LOGGER.warning("Grants supplied; ignoring canned ACL %s", canned_acl)
        return GrantList(grants=grants)
    value = canned_acl or DEFAULT_CANNED_ACL
    if value not in CANNED_ACLS:
        raise ConfigError(f"Unknown canned ACL '{value}' (expected one of {', '.join(CANNED_ACLS)})")
    return CannedAcl(value=value)


def summarize_grants(grants: Sequence[Grant]) -> list[str]:
    """Render grants as ``principal:PERMISSION`` strings for logs and reports."""
    summaries: list[str] = []
    for grant in grants:
        grantee = grant.grantee
        principal = grantee.uri or grantee.display_name or grantee.id or grantee.email_address or grantee.type
        summaries.append(f"{principal}:{grant.permission}")
    return summaries


def describe(spec: AclSpec) -> str:
    if isinstance(spec, GrantList):
        return "grants [{}]".format(", ".join(summarize_grants(spec.grants)))
    return f"canned ACL {spec.value}"


def _parse_grant(entry: object, index: int) -> Grant:
    if not isinstance(entry, Mapping):
        raise ConfigError(f"Grant #{index} is not an object")
    grantee_raw = entry.get("Grantee")
    if not isinstance(grantee_raw, Mapping):
        raise ConfigError(f"Grant #{index} is missing a Grantee object")
    grantee_type = grantee_raw.get("Type")
    if grantee_type not in GRANTEE_TYPES:
        raise ConfigError(f"Grant #{index} has unsupported grantee type {grantee_type!r}")
    identity_field = _REQUIRED_IDENTITY[grantee_type]
    if not grantee_raw.get(identity_field):
        raise ConfigError(f"Grant #{index} of type {grantee_type} requires {identity_field}")
    permission = entry.get("Permission")
    if permission not in PERMISSIONS:
        raise ConfigError(f"Grant #{index} has unsupported permission {permission!r}")
    grantee = Grantee(
        type=grantee_type,
        id=_optional_str(grantee_raw.get("ID")),
        uri=_optional_str(grantee_raw.get("URI")),
        email_address=_optional_str(grantee_raw.get("EmailAddress")),
        display_name=_optional_str(grantee_raw.get("DisplayName")),
    )
    return Grant(grantee=grantee, permission=permission)


def _optional_str(value: object) -> str | None:
    return str(value) if value else None


__all__ = [
    "CANNED_ACLS",
    "DEFAULT_CANNED_ACL",
    "describe",
    "parse_grants",
    "resolve_acl_spec",
    "summarize_grants",
]
