"""
dracpu/admission — the pod CPU-claim admission check.

Public API:

    validate_pod_claims()       — pod snapshot → list of violations
    ClaimCPUCounter             — protocol the validator resolves claims through
    ClaimCPUResolver            — ClaimCPUCounter backed by a ClaimStore
    cpu_count_from_devices()    — CPUs of an allocated claim's devices
    cpu_count_from_requests()   — CPUs of a claim's request spec
    AdmissionContext            — request deadline + cancellation
    PodAdmissionService         — settings-driven admit / deny decisions
    AdmissionDecision

    Errors:
        ClaimResolutionError, ClaimAlreadyAllocatedError, ClaimLookupError,
        AdmissionCancelledError, ClaimErrorKind
"""

from dracpu.admission.errors import (
    AdmissionCancelledError,
    ClaimAlreadyAllocatedError,
    ClaimErrorKind,
    ClaimLookupError,
    ClaimResolutionError,
)
from dracpu.admission.context import AdmissionContext
from dracpu.admission.cpu_counting import (
    cpu_count_from_devices,
    cpu_count_from_requests,
)
from dracpu.admission.claim_resolver import ClaimCPUResolver
from dracpu.admission.pod_validation import ClaimCPUCounter, validate_pod_claims
from dracpu.admission.service import AdmissionDecision, PodAdmissionService

__all__ = [
    "AdmissionCancelledError",
    "ClaimAlreadyAllocatedError",
    "ClaimErrorKind",
    "ClaimLookupError",
    "ClaimResolutionError",
    "AdmissionContext",
    "cpu_count_from_devices",
    "cpu_count_from_requests",
    "ClaimCPUResolver",
    "ClaimCPUCounter",
    "validate_pod_claims",
    "AdmissionDecision",
    "PodAdmissionService",
]
