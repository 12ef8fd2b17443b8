"""
dracpu/admission/errors.py
──────────────────────────
Classified failures of claim resolution.

Callers branch on the exception class (or on .kind) rather than on message
text:

    ClaimResolutionError            base, carries .kind and .reason
      ├── ClaimAlreadyAllocatedError  claim already committed to a consumer
      ├── ClaimLookupError            store failure other than not-found
      └── AdmissionCancelledError     request cancelled / deadline exceeded

A claim that is simply not found is not an error at this level: the resolver
retries it and then counts it as zero.
"""

from __future__ import annotations

from enum import Enum


class ClaimErrorKind(str, Enum):
    ALREADY_ALLOCATED = "already-allocated"
    LOOKUP_FAILED = "lookup-failed"
    CANCELLED = "cancelled"


class ClaimResolutionError(Exception):
    """
    Raised when a claim's CPU count cannot be determined.

    Attributes:
        reason: Human-readable explanation.
        kind:   ClaimErrorKind classifying the failure.
    """

    kind: ClaimErrorKind = ClaimErrorKind.LOOKUP_FAILED

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class ClaimAlreadyAllocatedError(ClaimResolutionError):
    """The ResourceClaim already carries an allocation."""

    kind = ClaimErrorKind.ALREADY_ALLOCATED

    def __init__(self, namespace: str, name: str) -> None:
        self.namespace = namespace
        self.name = name
        super().__init__(f"resourceclaim {namespace}/{name} already allocated")


class ClaimLookupError(ClaimResolutionError):
    kind = ClaimErrorKind.LOOKUP_FAILED


class AdmissionCancelledError(ClaimResolutionError):
    kind = ClaimErrorKind.CANCELLED
