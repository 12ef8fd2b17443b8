"""
dracpu/admission/cpu_counting.py
────────────────────────────────
The two ways of turning a ResourceClaim into a CPU count.

1. cpu_count_from_devices(claim, driver_name, capacities)
     For an ALLOCATED claim. Looks up each granted device of the driver in
     the ResourceSlice capacity catalog:
       device advertises CPU_CAPACITY_KEY  → that many cores (grouped mode)
       device listed without it            → 1 core (individual mode)
       device not in the catalog           → 0

2. cpu_count_from_requests(requests, driver_name)
     For an UNALLOCATED claim. Sums the exact device requests that target
     the driver:
       plain request              → count
       capacity request for CPU   → count × per-device CPU (whole cores only)

count < 1 is read as 1 throughout; the API defaults Count to 1.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Set

from dracpu.shared.models import (
    CPU_CAPACITY_KEY,
    DeviceRequest,
    ExactDeviceRequest,
    ResourceClaim,
)
from dracpu.shared.quantity import Quantity


def allocated_device_names(claim: ResourceClaim, driver_name: str) -> Set[str]:
    """Distinct non-empty device names granted to `claim` by `driver_name`."""
    if claim.allocation is None:
        return set()
    return {
        result.device
        for result in claim.allocation.devices
        if result.driver == driver_name and result.device
    }


def cpu_count_from_devices(
    claim: ResourceClaim,
    driver_name: str,
    capacities: Dict[str, Optional[Quantity]],
) -> int:
    """
    Total cores of the devices allocated to `claim`.

    Args:
        claim:       The claim; returns 0 if it has no allocation.
        driver_name: Only devices of this driver are counted.
        capacities:  Device name → advertised CPU capacity for the driver.
    """
    total = 0
    for device in allocated_device_names(claim, driver_name):
        if device not in capacities:
            continue
        capacity = capacities[device]
        if capacity is None:
            total += 1
            continue
        total += capacity.value()
    return total


def exact_request_cpu_count(request: Optional[ExactDeviceRequest]) -> int:
    """CPU count of one exact device request."""
    if request is None:
        return 0
    count = max(request.count, 1)
    if request.capacity is not None and request.capacity.requests:
        quantity = request.capacity.requests.get(CPU_CAPACITY_KEY)
        if quantity is None:
            return 0
        value = quantity.as_int()
        if value is None or value < 1:
            return 0
        return value * count
    return count


def cpu_count_from_requests(requests: Iterable[DeviceRequest], driver_name: str) -> int:
    total = 0
    for request in requests:
        if request.exactly is None or request.exactly.device_class_name != driver_name:
            continue
        total += exact_request_cpu_count(request.exactly)
    return total
