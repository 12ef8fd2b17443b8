"""
tests/test_models.py
────────────────────
Snapshot models and their from_manifest() builders.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dracpu.shared.models import (
    CPU_CAPACITY_KEY,
    Container,
    DeviceCapacityRecord,
    PodResourceClaim,
    PodSnapshot,
    ResourceClaim,
)


POD_OBJ = {
    "apiVersion": "v1",
    "kind": "Pod",
    "metadata": {"namespace": "team-a", "name": "pod-ok"},
    "spec": {
        "resourceClaims": [
            {"name": "cpus", "resourceClaimName": "claim-4"},
            {"name": "tmpl", "resourceClaimTemplateName": "cpu-template"},
        ],
        "initContainers": [
            {"name": "init", "resources": {"requests": {"cpu": "8"}}},
        ],
        "containers": [
            {
                "name": "main",
                "resources": {
                    "requests": {"cpu": "4", "memory": "1Gi"},
                    "claims": [{"name": "cpus"}],
                },
            },
            {"name": "sidecar"},
        ],
    },
}

CLAIM_OBJ = {
    "apiVersion": "resource.k8s.io/v1",
    "kind": "ResourceClaim",
    "metadata": {"namespace": "team-a", "name": "claim-4"},
    "spec": {
        "devices": {
            "requests": [
                {"name": "plain", "exactly": {"deviceClassName": "dra.cpu", "count": 2}},
                {
                    "name": "grouped",
                    "exactly": {
                        "deviceClassName": "dra.cpu",
                        "capacity": {"requests": {CPU_CAPACITY_KEY: "2"}},
                    },
                },
                {"name": "first-available", "firstAvailable": [{"name": "a"}]},
            ]
        }
    },
    "status": {
        "allocation": {
            "devices": {
                "results": [
                    {"request": "plain", "driver": "dra.cpu", "pool": "node-1", "device": "cpu-0"},
                ]
            }
        }
    },
}

SLICE_OBJ = {
    "apiVersion": "resource.k8s.io/v1",
    "kind": "ResourceSlice",
    "spec": {
        "driver": "dra.cpu",
        "devices": [
            {"name": "group-0", "capacity": {CPU_CAPACITY_KEY: {"value": "8"}}},
            {"name": "cpu-3"},
        ],
    },
}


class TestPodSnapshot:

    def test_from_manifest_reads_containers_and_claims(self) -> None:
        pod = PodSnapshot.from_manifest(POD_OBJ)
        assert pod.namespace == "team-a"
        assert pod.name == "pod-ok"
        assert [c.name for c in pod.containers] == ["main", "sidecar"]
        assert pod.containers[0].cpu_request.as_int() == 4
        assert pod.containers[0].claims == ["cpus"]
        assert pod.containers[1].cpu_request is None
        assert pod.containers[1].claims == []

    def test_init_containers_are_ignored(self) -> None:
        pod = PodSnapshot.from_manifest(POD_OBJ)
        assert "init" not in [c.name for c in pod.containers]

    def test_missing_namespace_defaults(self) -> None:
        pod = PodSnapshot.from_manifest({"metadata": {"name": "p"}, "spec": {}})
        assert pod.namespace == "default"
        assert pod.containers == []

    def test_claim_reference_map_drops_incomplete_entries(self) -> None:
        pod = PodSnapshot(
            resource_claims=[
                PodResourceClaim(name="a", resource_claim_name="claim-a"),
                PodResourceClaim(name="", resource_claim_name="claim-b"),
                PodResourceClaim(name="tmpl"),
            ]
        )
        assert pod.claim_reference_map() == {"a": "claim-a"}

    def test_invalid_cpu_request_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Container(name="main", cpu_request="lots")

    def test_snapshot_is_read_only(self) -> None:
        pod = PodSnapshot.from_manifest(POD_OBJ)
        with pytest.raises(ValidationError):
            pod.namespace = "other"


class TestResourceClaim:

    def test_from_manifest_reads_requests(self) -> None:
        claim = ResourceClaim.from_manifest(CLAIM_OBJ)
        assert (claim.namespace, claim.name) == ("team-a", "claim-4")
        plain, grouped, first_available = claim.requests
        assert plain.exactly.device_class_name == "dra.cpu"
        assert plain.exactly.count == 2
        assert plain.exactly.capacity is None
        assert grouped.exactly.count == 1
        assert grouped.exactly.capacity.requests[CPU_CAPACITY_KEY].as_int() == 2
        assert first_available.exactly is None

    def test_from_manifest_reads_allocation(self) -> None:
        claim = ResourceClaim.from_manifest(CLAIM_OBJ)
        assert claim.is_allocated
        assert [(d.driver, d.device) for d in claim.allocation.devices] == [("dra.cpu", "cpu-0")]

    def test_unallocated_claim(self) -> None:
        obj = {key: value for key, value in CLAIM_OBJ.items() if key != "status"}
        claim = ResourceClaim.from_manifest(obj)
        assert not claim.is_allocated


class TestDeviceCapacityRecord:

    def test_from_slice_manifest(self) -> None:
        records = DeviceCapacityRecord.from_slice_manifest(SLICE_OBJ)
        assert [(r.driver, r.device) for r in records] == [
            ("dra.cpu", "group-0"),
            ("dra.cpu", "cpu-3"),
        ]
        assert records[0].cpu.as_int() == 8
        assert records[1].cpu is None
