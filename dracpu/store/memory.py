"""
dracpu/store/memory.py
──────────────────────
InMemoryClaimStore: a ClaimStore backed by plain dicts.

Used to wire the admission service without a cluster and as the store in
tests. Claim visibility can be delayed by a number of lookups to reproduce
the window in which a pod is admitted before the claim generated from its
template has been created.

    store = InMemoryClaimStore()
    store.add_claim(claim, visible_after=2)   # first 2 lookups → not found
    store.add_devices(DeviceCapacityRecord.from_slice_manifest(slice_obj))
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, Optional, Tuple

from dracpu.shared.models import DeviceCapacityRecord, ResourceClaim
from dracpu.shared.quantity import Quantity
from dracpu.store.base import ClaimNotFoundError


class InMemoryClaimStore:
    """
    Dict-backed ClaimStore.

    Attributes:
        lookups: Number of get_claim() calls per (namespace, name). Tests use
                 it to observe the resolver's retry behaviour.
    """

    def __init__(self) -> None:
        self._claims: Dict[Tuple[str, str], ResourceClaim] = {}
        self._hidden_for: Dict[Tuple[str, str], int] = {}
        self._devices: Dict[str, Dict[str, Optional[Quantity]]] = defaultdict(dict)
        self.lookups: Dict[Tuple[str, str], int] = defaultdict(int)

    def add_claim(self, claim: ResourceClaim, visible_after: int = 0) -> None:
        """Register a claim. The first `visible_after` lookups report not-found."""
        key = (claim.namespace, claim.name)
        self._claims[key] = claim
        self._hidden_for[key] = visible_after

    def add_devices(self, records: Iterable[DeviceCapacityRecord]) -> None:
        for record in records:
            self._devices[record.driver][record.device] = record.cpu

    def get_claim(self, namespace: str, name: str) -> ResourceClaim:
        key = (namespace, name)
        self.lookups[key] += 1
        claim = self._claims.get(key)
        if claim is None or self.lookups[key] <= self._hidden_for.get(key, 0):
            raise ClaimNotFoundError(namespace, name)
        return claim

    def list_device_capacities(self, driver: str) -> Dict[str, Optional[Quantity]]:
        return dict(self._devices.get(driver, {}))
