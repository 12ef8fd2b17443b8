"""
dracpu/store — where ResourceClaims and device capacities come from.

Public API:
    ClaimStore          — protocol consumed by ClaimCPUResolver
    ClaimNotFoundError  — raised by get_claim() for a missing claim
    InMemoryClaimStore  — dict-backed implementation
"""

from dracpu.store.base import ClaimNotFoundError, ClaimStore
from dracpu.store.memory import InMemoryClaimStore

__all__ = ["ClaimNotFoundError", "ClaimStore", "InMemoryClaimStore"]
