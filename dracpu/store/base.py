"""
dracpu/store/base.py
────────────────────
The claim store contract consumed by ClaimCPUResolver.

How claims and slices travel over the wire is not the resolver's concern.
It only needs two lookups, and it needs "not found" kept apart from every
other failure: not-found is retried (claims created from templates appear
asynchronously), anything else is reported immediately.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol

from dracpu.shared.models import ResourceClaim
from dracpu.shared.quantity import Quantity


class ClaimNotFoundError(LookupError):
    """
    Raised by ClaimStore.get_claim() when the claim does not exist (yet).

    Attributes:
        namespace: Namespace that was searched.
        name:      Claim name that was not found.
    """

    def __init__(self, namespace: str, name: str) -> None:
        self.namespace = namespace
        self.name = name
        super().__init__(f"resourceclaim {namespace}/{name} not found")


class ClaimStore(Protocol):
    """
    Read access to ResourceClaims and ResourceSlice device capacities.

    get_claim() raises ClaimNotFoundError for a missing claim. Any other
    exception is treated as a store failure.
    """

    def get_claim(self, namespace: str, name: str) -> ResourceClaim:
        ...

    def list_device_capacities(self, driver: str) -> Dict[str, Optional[Quantity]]:
        """
        Device name → advertised CPU capacity for every device of `driver`.

        The value is None for devices that advertise no CPU capacity.
        """
        ...
