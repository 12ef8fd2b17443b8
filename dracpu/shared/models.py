"""
dracpu/shared/models.py
───────────────────────
Read-only views of the cluster objects the admission check looks at.

Every model answers one question: "What does the CPU-claim check need to
know about this object?" Fields that play no part in the check are not
modelled at all.

Reading guide
-------------
Read top-to-bottom:
    SECTION 1 — constants and the Quantity field type
    SECTION 2 — the pod snapshot (what the workload asks for)
    SECTION 3 — resource claims (what the claim asks for / was granted)
    SECTION 4 — device capacities (what the resource slices advertise)

Each top-level model has a from_manifest() builder that reads the matching
Kubernetes object as decoded JSON (camelCase keys, as served by the API).
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainValidator

from dracpu.shared.quantity import Quantity


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 1: CONSTANTS
# ─────────────────────────────────────────────────────────────────────────────

DEFAULT_DRIVER_NAME: str = "dra.cpu"
"""Device class / driver whose claims are validated unless configured otherwise."""

CPU_CAPACITY_KEY: str = "dra.cpu/cpu"
"""Qualified capacity name carrying a CPU count.

Appears in two places:
  • ResourceSlice device capacities (grouped mode: one device = N cores)
  • capacity-based requests inside a claim's exact device request
"""

QuantityField = Annotated[Quantity, PlainValidator(Quantity.parse)]


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 2: POD SNAPSHOT
# ─────────────────────────────────────────────────────────────────────────────

class Container(_Snapshot):
    """
    One regular container of a pod.

    Fields:
        name        → Container name (messages only).
        cpu_request → resources.requests.cpu, None when not declared.
        claims      → Names from resources.claims[]. Each refers to an entry
                      in the pod-level resource_claims list.
    """
    name: str = ""
    cpu_request: Optional[QuantityField] = None
    claims: List[str] = Field(default_factory=list)


class PodResourceClaim(_Snapshot):
    """
    A pod-level claim reference: spec.resourceClaims[].

    resource_claim_name is None when the entry points at a claim template
    instead of a named ResourceClaim.
    """
    name: str = ""
    resource_claim_name: Optional[str] = None


class PodSnapshot(_Snapshot):
    """The parts of a Pod the CPU-claim check reads."""
    namespace: str = "default"
    name: str = ""
    containers: List[Container] = Field(default_factory=list)
    resource_claims: List[PodResourceClaim] = Field(default_factory=list)

    def claim_reference_map(self) -> Dict[str, str]:
        """
        Map reference name → ResourceClaim name.

        Entries with an empty reference name or no backing claim name are
        dropped.
        """
        return {
            ref.name: ref.resource_claim_name
            for ref in self.resource_claims
            if ref.name and ref.resource_claim_name
        }

    @classmethod
    def from_manifest(cls, obj: Dict[str, Any]) -> "PodSnapshot":
        """
        Build a snapshot from a core/v1 Pod object.

        Init containers are ignored; only spec.containers count towards the
        pod CPU total.

        Raises:
            pydantic.ValidationError: if a CPU request is not a valid quantity.
        """
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}

        containers = []
        for raw in spec.get("containers") or []:
            resources = raw.get("resources") or {}
            requests = resources.get("requests") or {}
            containers.append(
                Container(
                    name=raw.get("name", ""),
                    cpu_request=requests.get("cpu"),
                    claims=[ref.get("name", "") for ref in resources.get("claims") or []],
                )
            )

        return cls(
            namespace=metadata.get("namespace") or "default",
            name=metadata.get("name", ""),
            containers=containers,
            resource_claims=[
                PodResourceClaim(
                    name=ref.get("name", ""),
                    resource_claim_name=ref.get("resourceClaimName"),
                )
                for ref in spec.get("resourceClaims") or []
            ],
        )


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 3: RESOURCE CLAIMS
# ─────────────────────────────────────────────────────────────────────────────

class CapacityRequirements(_Snapshot):
    """Capacity-based request: qualified capacity name → amount per device."""
    requests: Dict[str, QuantityField] = Field(default_factory=dict)


class ExactDeviceRequest(_Snapshot):
    """
    A request for an exact number of devices of one device class.

    Fields:
        device_class_name → Which driver / device class this targets.
        count             → Number of devices. Values < 1 count as 1.
        capacity          → Optional per-device capacity request. When it
                            carries CPU_CAPACITY_KEY, each device stands for
                            that many cores.
    """
    device_class_name: str
    count: int = 1
    capacity: Optional[CapacityRequirements] = None


class DeviceRequest(_Snapshot):
    name: str = ""
    exactly: Optional[ExactDeviceRequest] = None


class DeviceAllocationResult(_Snapshot):
    """One concrete device granted to a claim by the scheduler."""
    request: str = ""
    driver: str
    pool: str = ""
    device: str


class AllocationResult(_Snapshot):
    devices: List[DeviceAllocationResult] = Field(default_factory=list)


class ResourceClaim(_Snapshot):
    """
    A ResourceClaim as seen at admission time.

    allocation is None until a scheduler commits devices to the claim. Once
    set, the claim belongs to some consumer and must not be reused.
    """
    namespace: str
    name: str
    requests: List[DeviceRequest] = Field(default_factory=list)
    allocation: Optional[AllocationResult] = None

    @property
    def is_allocated(self) -> bool:
        return self.allocation is not None

    @classmethod
    def from_manifest(cls, obj: Dict[str, Any]) -> "ResourceClaim":
        """Build a claim from a resource.k8s.io/v1 ResourceClaim object."""
        metadata = obj.get("metadata") or {}
        devices = (obj.get("spec") or {}).get("devices") or {}

        requests = []
        for raw in devices.get("requests") or []:
            exactly = raw.get("exactly")
            exact_request = None
            if exactly is not None:
                capacity = exactly.get("capacity")
                exact_request = ExactDeviceRequest(
                    device_class_name=exactly.get("deviceClassName", ""),
                    count=exactly.get("count", 1),
                    capacity=(
                        CapacityRequirements(requests=capacity.get("requests") or {})
                        if capacity is not None
                        else None
                    ),
                )
            requests.append(DeviceRequest(name=raw.get("name", ""), exactly=exact_request))

        allocation = None
        raw_allocation = (obj.get("status") or {}).get("allocation")
        if raw_allocation is not None:
            results = (raw_allocation.get("devices") or {}).get("results") or []
            allocation = AllocationResult(
                devices=[
                    DeviceAllocationResult(
                        request=result.get("request", ""),
                        driver=result.get("driver", ""),
                        pool=result.get("pool", ""),
                        device=result.get("device", ""),
                    )
                    for result in results
                ]
            )

        return cls(
            namespace=metadata.get("namespace") or "default",
            name=metadata.get("name", ""),
            requests=requests,
            allocation=allocation,
        )


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 4: DEVICE CAPACITIES
# ─────────────────────────────────────────────────────────────────────────────

class DeviceCapacityRecord(_Snapshot):
    """
    One device advertised by a driver in a ResourceSlice.

    cpu is None when the device advertises no CPU capacity (individual mode:
    the device is a single core).
    """
    driver: str
    device: str
    cpu: Optional[QuantityField] = None

    @classmethod
    def from_slice_manifest(cls, obj: Dict[str, Any]) -> List["DeviceCapacityRecord"]:
        """Expand a resource.k8s.io/v1 ResourceSlice into one record per device."""
        spec = obj.get("spec") or {}
        driver = spec.get("driver", "")
        records = []
        for device in spec.get("devices") or []:
            capacity = (device.get("capacity") or {}).get(CPU_CAPACITY_KEY)
            records.append(
                cls(
                    driver=driver,
                    device=device.get("name", ""),
                    cpu=capacity.get("value") if capacity is not None else None,
                )
            )
        return records
