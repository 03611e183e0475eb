"""Shared fixtures: an in-memory stand-in for the OVHcloud API."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from ovhctl.errors import OvhctlError, RequestFailed

ZONE = "example.com"


def record_data(record_id: int, field_type: str, sub_domain: str, target: str, ttl: int = 0) -> Dict[str, Any]:
    return {
        "id": record_id,
        "fieldType": field_type,
        "subDomain": sub_domain,
        "target": target,
        "ttl": ttl,
        "zone": ZONE,
    }


def instance_data(
    instance_id: str,
    name: str,
    addresses: List[Tuple[str, str, int]],
) -> Dict[str, Any]:
    """Build an instance payload; `addresses` holds (ip, type, version) tuples."""
    return {
        "id": instance_id,
        "name": name,
        "ipAddresses": [
            {"ip": ip, "type": kind, "version": version, "networkId": "net"}
            for ip, kind, version in addresses
        ],
        "flavorId": "flavor",
        "imageId": "image",
        "region": "GRA11",
        "status": "ACTIVE",
        "planCode": "d2-2.consumption",
    }


class FakeOvhClient:
    """OvhClient double with static GET responses and a live record store for one zone.

    Every call is appended to `calls` as (method, path). Entries of `failures`
    keyed by (method, path) are raised instead of answering.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        records: Optional[List[Dict[str, Any]]] = None,
        zone: str = ZONE,
    ):
        self.responses: Dict[str, Any] = dict(responses or {})
        self.zone = zone
        self.records: Dict[int, Dict[str, Any]] = {r["id"]: dict(r) for r in records or []}
        self.calls: List[Tuple[str, str]] = []
        self.bodies: List[Any] = []
        self.failures: Dict[Tuple[str, str], OvhctlError] = {}
        self._next_id = 1000

    @property
    def _records_path(self) -> str:
        return f"domain/zone/{self.zone}/record"

    def _track(self, method: str, path: str) -> None:
        self.calls.append((method, path))
        failure = self.failures.get((method, path))
        if failure is not None:
            raise failure

    def get(self, path: str) -> Any:
        self._track("GET", path)
        if path == self._records_path:
            return sorted(self.records)
        if path.startswith(self._records_path + "/"):
            record_id = int(path.rsplit("/", 1)[1])
            if record_id not in self.records:
                raise RequestFailed(path, 404)
            return dict(self.records[record_id])
        if path not in self.responses:
            raise RequestFailed(path, 404)
        return self.responses[path]

    def post(self, path: str, body: Any = None) -> Any:
        self._track("POST", path)
        self.bodies.append(body)
        if path == self._records_path:
            self._next_id += 1
            created = dict(body, id=self._next_id, zone=self.zone)
            created.setdefault("ttl", 0)
            self.records[self._next_id] = created
            return dict(created)
        return self.responses.get(path)

    def post_unauthenticated(self, path: str, body: Any = None) -> Any:
        return self.post(path, body)

    def delete(self, path: str) -> None:
        self._track("DELETE", path)
        if path.startswith(self._records_path + "/"):
            self.records.pop(int(path.rsplit("/", 1)[1]), None)

    def paths(self, method: str) -> List[str]:
        return [p for m, p in self.calls if m == method]


@pytest.fixture
def fake_client() -> FakeOvhClient:
    return FakeOvhClient()
