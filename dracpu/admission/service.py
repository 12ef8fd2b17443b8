"""
dracpu/admission/service.py
───────────────────────────
PodAdmissionService: turns a pod into an admit / deny decision.

Pipeline
─────────
  1. Decode (review_manifest only): Pod object → PodSnapshot
  2. Fresh AdmissionContext bounded by settings.admission_review_timeout
  3. validate_pod_claims() with a ClaimCPUResolver built from settings
  4. AdmissionDecision: allowed iff no violations; violations joined by "; "

The surrounding webhook (HTTP, TLS, AdmissionReview envelope) owns decoding
the review itself and copying the decision into its response.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from dracpu.admission.claim_resolver import ClaimCPUResolver
from dracpu.admission.context import AdmissionContext
from dracpu.admission.pod_validation import validate_pod_claims
from dracpu.shared.config import AdmissionSettings
from dracpu.shared.models import PodSnapshot
from dracpu.store.base import ClaimStore

logger = logging.getLogger(__name__)


class AdmissionDecision(BaseModel):
    """
    Outcome of one pod review.

    Fields:
        allowed    → True when the pod passes every check.
        message    → Violations joined by "; ". Empty when allowed.
        violations → The individual violation strings, in order.
    """
    allowed: bool
    message: str = ""
    violations: List[str] = Field(default_factory=list)

    @classmethod
    def allow(cls) -> "AdmissionDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, violations: List[str]) -> "AdmissionDecision":
        return cls(allowed=False, message="; ".join(violations), violations=list(violations))


class PodAdmissionService:
    """
    Validates pods against the dra.cpu claims they reference.

    Public API:
        review(pod, ctx=None)           → AdmissionDecision
        review_manifest(obj, ctx=None)  → AdmissionDecision

    Attributes:
        settings: Frozen AdmissionSettings the service was built with.
        resolver: ClaimCPUResolver shared by all reviews (holds no request state).
    """

    def __init__(self, store: ClaimStore, settings: Optional[AdmissionSettings] = None) -> None:
        self.settings = settings or AdmissionSettings()
        self.resolver = ClaimCPUResolver(
            store=store,
            driver_name=self.settings.driver_name,
            retry_wait_s=self.settings.claim_get_retry_wait,
            retry_total_s=self.settings.claim_get_retry_total,
            count_allocated_devices=self.settings.count_allocated_devices,
        )
        logger.info(
            "PodAdmissionService initialised for driver %s (retry wait %.3fs, window %.3fs)",
            self.settings.driver_name,
            self.settings.claim_get_retry_wait,
            self.settings.claim_get_retry_total,
        )

    def review(
        self, pod: PodSnapshot, ctx: Optional[AdmissionContext] = None
    ) -> AdmissionDecision:
        """
        Run the CPU-claim check for one pod.

        Args:
            pod: The pod under admission.
            ctx: Request context. A new one bounded by
                 settings.admission_review_timeout is created when omitted.
        """
        if ctx is None:
            ctx = AdmissionContext(timeout_s=self.settings.admission_review_timeout)

        try:
            violations = validate_pod_claims(pod, self.settings.driver_name, self.resolver, ctx)
        except Exception as e:
            logger.exception("Unexpected error validating pod %s/%s", pod.namespace, pod.name)
            return AdmissionDecision.deny(
                [f"unexpected error: {e.__class__.__name__}: {e}"]
            )

        if violations:
            logger.warning(
                "Pod %s/%s denied: %s", pod.namespace, pod.name, "; ".join(violations)
            )
            return AdmissionDecision.deny(violations)

        logger.info("Pod %s/%s admitted", pod.namespace, pod.name)
        return AdmissionDecision.allow()

    def review_manifest(
        self, obj: Dict[str, Any], ctx: Optional[AdmissionContext] = None
    ) -> AdmissionDecision:
        """Decode a core/v1 Pod object, then review() it."""
        try:
            pod = PodSnapshot.from_manifest(obj)
        except (ValidationError, AttributeError, TypeError) as e:
            logger.warning("Failed to decode Pod: %s", e)
            return AdmissionDecision.deny([f"failed to decode Pod: {e}"])
        return self.review(pod, ctx)
