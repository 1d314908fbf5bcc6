"""Object ACL mutation with a single write retry."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from botocore.exceptions import BotoCoreError, ClientError

from .accountant import Accountant
from .errors import ReadAclError, WriteAclError
from .types import DryRunState, GrantList, MutationOutcome, MutationTask

LOGGER = logging.getLogger(__name__)

# First write plus exactly one retry.
WRITE_ATTEMPTS = 2


def apply_acl(
    client,  # type: ignore[no-untyped-def]
    task: MutationTask,
    *,
    dry_run: DryRunState,
    accountant: Accountant,
) -> MutationOutcome:
    """Apply ``task.acl`` to one object and record exactly one outcome.

    Canned ACLs are written directly. Grant lists first read the object's
    owner, then write a policy made of that owner and the supplied grants;
    a failed read fails the object without writing. Under dry-run nothing is
    written and success is recorded after a read-only ACL check.
    """
    try:
        if dry_run.active:
            outcome = _simulate(client, task, dry_run)
        else:
            outcome = _mutate(client, task, dry_run)
    except (ReadAclError, WriteAclError) as exc:
        LOGGER.error("%s%s", dry_run.label_prefix, exc)
        accountant.record_failure(task.key, str(exc))
        return MutationOutcome(
            key=task.key,
            succeeded=False,
            attempts=getattr(exc, "attempts", 0),
            error=str(exc),
            message="ACL change failed",
        )
    accountant.record_success()
    return outcome


def build_access_control_policy(owner: Mapping[str, Any], grants: GrantList) -> dict[str, Any]:
    """Combine the current owner with the new grants; existing grants are dropped."""
    return {
        "Owner": dict(owner),
        "Grants": [grant.to_boto() for grant in grants.grants],
    }


def _mutate(client, task: MutationTask, dry_run: DryRunState) -> MutationOutcome:  # type: ignore[no-untyped-def]
    params: dict[str, Any] = {"Bucket": task.bucket, "Key": task.key}
    if isinstance(task.acl, GrantList):
        current = _get_object_acl(client, task)
        params["AccessControlPolicy"] = build_access_control_policy(current.get("Owner", {}), task.acl)
    else:
        params["ACL"] = task.acl.value

    LOGGER.info("%sUpdating '%s'", dry_run.label_prefix, task.key)
    attempts = _put_with_retry(client, task.key, params)
    return MutationOutcome(key=task.key, succeeded=True, attempts=attempts, message="ACL updated")


def _simulate(client, task: MutationTask, dry_run: DryRunState) -> MutationOutcome:  # type: ignore[no-untyped-def]
    acl_read = True
    try:
        _get_object_acl(client, task)
    except ReadAclError as exc:
        LOGGER.warning("%sACL read check failed: %s", dry_run.label_prefix, exc)
        acl_read = False
    LOGGER.info("%sUpdating '%s'", dry_run.label_prefix, task.key)
    return MutationOutcome(
        key=task.key,
        succeeded=True,
        attempts=0,
        acl_read=acl_read,
        message="Dry run - ACL unchanged",
    )


def _get_object_acl(client, task: MutationTask) -> Mapping[str, Any]:  # type: ignore[no-untyped-def]
    try:
        return client.get_object_acl(Bucket=task.bucket, Key=task.key)
    except (ClientError, BotoCoreError) as exc:
        raise ReadAclError(task.key, str(exc)) from exc


def _put_with_retry(client, key: str, params: Mapping[str, Any]) -> int:  # type: ignore[no-untyped-def]
    last_error: Exception | None = None
    for attempt in range(1, WRITE_ATTEMPTS + 1):
        try:
            client.put_object_acl(**params)
            return attempt
        except (ClientError, BotoCoreError) as exc:
            last_error = exc
            if attempt < WRITE_ATTEMPTS:
                LOGGER.warning("Write failed on '%s' (attempt %d), retrying: %s", key, attempt, exc)
    raise WriteAclError(key, WRITE_ATTEMPTS, str(last_error)) from last_error


__all__ = ["WRITE_ATTEMPTS", "apply_acl", "build_access_control_policy"]
