"""
dracpu/admission/pod_validation.py
──────────────────────────────────
Pod-level CPU-claim check: container CPU requests must add up to the CPUs
of the ResourceClaims the pod references.

What it checks
───────────────
  1. Claim reuse: a referenced claim that is already allocated is reported
     by name.
  2. Claim resolution: any other failure to resolve a claim is reported
     with the claim name and the underlying error.
  3. CPU totals: Σ container CPU requests (rounded up to whole cores) must
     equal Σ claim CPU counts, once that claim total is > 0.

What it does NOT check
───────────────────────
  • Pods without claim references. They pass untouched.
  • Pods whose claims all resolve to 0 CPUs (e.g. claims not created yet).
  • Init containers. They do not hold claim CPUs for the pod's lifetime.

Every problem is collected; one bad claim does not stop the others from
being checked. An empty list means the pod is admitted.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from dracpu.admission.context import AdmissionContext
from dracpu.admission.errors import ClaimAlreadyAllocatedError, ClaimResolutionError
from dracpu.shared.models import PodSnapshot
from dracpu.shared.quantity import cpu_request_count

logger = logging.getLogger(__name__)


class ClaimCPUCounter(Protocol):
    """Resolves a ResourceClaim to its CPU count. See ClaimCPUResolver."""

    def claim_cpu_count(self, ctx: AdmissionContext, namespace: str, claim_name: str) -> int:
        ...


def validate_pod_claims(
    pod: Optional[PodSnapshot],
    driver_name: str,
    counter: ClaimCPUCounter,
    ctx: Optional[AdmissionContext] = None,
) -> List[str]:
    """
    Check a pod's CPU requests against the claims it references.

    Args:
        pod:         The pod under admission. None is accepted as "nothing to check".
        driver_name: Driver whose claims are being validated (messages only).
        counter:     Resolves claim names to CPU counts.
        ctx:         Request deadline / cancellation. A context without a
                     deadline is used when omitted.

    Returns:
        Human-readable violations in container order, per-claim problems
        first and the totals mismatch last. Empty list = admit.
    """
    if pod is None or not pod.resource_claims:
        return []

    claim_names = pod.claim_reference_map()
    if not claim_names:
        return []

    if ctx is None:
        ctx = AdmissionContext()

    total_pod_cpu = 0
    total_claim_cpu = 0
    errors: List[str] = []

    for container in pod.containers:
        if container.cpu_request is not None:
            total_pod_cpu += cpu_request_count(container.cpu_request)

        for reference in container.claims:
            claim_name = claim_names.get(reference)
            if claim_name is None:
                continue
            try:
                claim_cpu = counter.claim_cpu_count(ctx, pod.namespace, claim_name)
            except ClaimAlreadyAllocatedError:
                errors.append(f"ResourceClaim {claim_name!r} is already allocated")
                continue
            except ClaimResolutionError as e:
                errors.append(f"failed to get ResourceClaim {claim_name!r}: {e}")
                continue
            logger.debug(
                "Pod %s/%s container %s: claim %s → %d CPUs",
                pod.namespace, pod.name, container.name, claim_name, claim_cpu,
            )
            total_claim_cpu += claim_cpu

    if total_claim_cpu > 0 and total_pod_cpu != total_claim_cpu:
        errors.append(
            f"pod CPU requests ({total_pod_cpu}) must match "
            f"{driver_name} claim total ({total_claim_cpu})"
        )

    return errors
