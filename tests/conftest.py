"""Shared fixtures: an in-process fake of the three S3 calls the sweeper uses."""
from __future__ import annotations

import threading
import time

import pytest
from botocore.exceptions import ClientError

OWNER = {"ID": "owner-canonical-id", "DisplayName": "owner"}


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} (fake)"}}, operation)


class FakePaginator:
    def __init__(self, s3: FakeS3):
        self._s3 = s3

    def paginate(self, **params):  # type: ignore[no-untyped-def]
        self._s3.record("list_objects_v2", params)
        prefix = params.get("Prefix", "")
        for index, page in enumerate(self._s3.pages):
            if self._s3.list_error_after is not None and index >= self._s3.list_error_after:
                raise client_error("InternalError", "ListObjectsV2")
            yield {"Contents": [{"Key": key} for key in page if key.startswith(prefix)]}


class FakeS3:
    def __init__(
        self,
        pages,
        *,
        list_error_after: int | None = None,
        read_failures=(),
        write_failures=None,
        write_delay: float = 0.0,
    ):
        self.pages = [list(page) for page in pages]
        self.list_error_after = list_error_after
        self.read_failures = set(read_failures)
        # key -> number of consecutive put_object_acl failures still to raise
        self.write_failures = dict(write_failures or {})
        self.write_delay = write_delay
        self.calls: list[tuple[str, dict]] = []
        self.acls: dict[str, dict] = {}
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def record(self, operation: str, params) -> None:  # type: ignore[no-untyped-def]
        with self._lock:
            self.calls.append((operation, dict(params)))

    def get_paginator(self, name: str) -> FakePaginator:
        assert name == "list_objects_v2"
        return FakePaginator(self)

    def get_object_acl(self, **params):  # type: ignore[no-untyped-def]
        self.record("get_object_acl", params)
        if params["Key"] in self.read_failures:
            raise client_error("AccessDenied", "GetObjectAcl")
        return {
            "Owner": dict(OWNER),
            "Grants": [{"Grantee": {"Type": "CanonicalUser", **OWNER}, "Permission": "FULL_CONTROL"}],
        }

    def put_object_acl(self, **params):  # type: ignore[no-untyped-def]
        self.record("put_object_acl", params)
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.write_delay:
                time.sleep(self.write_delay)
            key = params["Key"]
            with self._lock:
                remaining = self.write_failures.get(key, 0)
                if remaining:
                    self.write_failures[key] = remaining - 1
            if remaining:
                raise client_error("SlowDown", "PutObjectAcl")
            with self._lock:
                self.acls[key] = params.get("AccessControlPolicy") or {"ACL": params.get("ACL")}
            return {}
        finally:
            with self._lock:
                self.in_flight -= 1

    def calls_for(self, operation: str) -> list[dict]:
        with self._lock:
            return [params for name, params in self.calls if name == operation]


@pytest.fixture
def make_s3():
    return FakeS3


@pytest.fixture
def aws_credentials(monkeypatch):
    for key, value in {
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_SESSION_TOKEN": "testing",
        "AWS_DEFAULT_REGION": "us-east-1",
    }.items():
        monkeypatch.setenv(key, value)
