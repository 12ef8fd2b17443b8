"""
dracpu/admission/claim_resolver.py
──────────────────────────────────
ClaimCPUResolver: ResourceClaim name → number of CPU cores it stands for.

Resolution steps
─────────────────
1. Fetch the claim from the store. A not-found answer is retried every
   retry_wait_s until retry_total_s has elapsed or the request deadline is
   reached, whichever comes first. A claim that never shows up counts as 0.
   Pods using claim templates are admitted before the generated claim exists,
   so a short wait avoids spurious mismatches without failing the pod.
2. An allocated claim is rejected with ClaimAlreadyAllocatedError: it has
   already been handed to some consumer.
3. Count CPUs from allocated devices (cpu_count_from_devices). A positive
   total wins.
4. Otherwise count CPUs from the claim's request spec
   (cpu_count_from_requests).

Because step 2 returns first, step 3 only ever sees unallocated claims and
contributes nothing. Setting count_allocated_devices=True skips the
rejection in step 2, so allocated claims are counted from their devices.

Error handling contract
────────────────────────
  ClaimAlreadyAllocatedError: step 2.
  ClaimLookupError:           any store failure other than not-found,
                              including capacity catalog lookups. Never
                              retried.
  AdmissionCancelledError:    the request was cancelled, or its deadline
                              passed, while waiting between retries.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from dracpu.admission.context import AdmissionContext
from dracpu.admission.cpu_counting import (
    allocated_device_names,
    cpu_count_from_devices,
    cpu_count_from_requests,
)
from dracpu.admission.errors import ClaimAlreadyAllocatedError, ClaimLookupError
from dracpu.shared.models import DEFAULT_DRIVER_NAME, ResourceClaim
from dracpu.store.base import ClaimNotFoundError, ClaimStore

logger = logging.getLogger(__name__)

DEFAULT_CLAIM_GET_RETRY_WAIT_S: float = 0.05
"""Delay between ResourceClaim lookups while the claim is not found."""

DEFAULT_CLAIM_GET_RETRY_TOTAL_S: float = 0.5
"""Total window for not-found retries, before the request deadline caps it."""


class ClaimCPUResolver:
    """
    Resolves claim CPU counts against a ClaimStore.

    Implements the ClaimCPUCounter protocol used by validate_pod_claims().
    Holds only read-only configuration; one instance serves any number of
    concurrent requests.
    """

    def __init__(
        self,
        store: ClaimStore,
        driver_name: str = DEFAULT_DRIVER_NAME,
        retry_wait_s: float = DEFAULT_CLAIM_GET_RETRY_WAIT_S,
        retry_total_s: float = DEFAULT_CLAIM_GET_RETRY_TOTAL_S,
        count_allocated_devices: bool = False,
    ) -> None:
        self.store = store
        self.driver_name = driver_name
        self.retry_wait_s = retry_wait_s if retry_wait_s > 0 else DEFAULT_CLAIM_GET_RETRY_WAIT_S
        self.retry_total_s = max(retry_total_s, 0.0)
        self.count_allocated_devices = count_allocated_devices

    def claim_cpu_count(self, ctx: AdmissionContext, namespace: str, claim_name: str) -> int:
        """
        Total CPU cores represented by ResourceClaim `namespace/claim_name`.

        Returns 0 for a claim that does not appear within the retry window.

        Raises:
            ClaimAlreadyAllocatedError, ClaimLookupError, AdmissionCancelledError
        """
        claim = self._get_claim_with_retry(ctx, namespace, claim_name)
        if claim is None:
            logger.debug(
                "ResourceClaim %s/%s not found within retry window; counting 0",
                namespace, claim_name,
            )
            return 0

        if claim.is_allocated and not self.count_allocated_devices:
            raise ClaimAlreadyAllocatedError(namespace, claim_name)

        total = self._cpu_count_from_slices(claim)
        if total > 0:
            return total
        return cpu_count_from_requests(claim.requests, self.driver_name)

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _get_claim_with_retry(
        self, ctx: AdmissionContext, namespace: str, name: str
    ) -> Optional[ResourceClaim]:
        retry_deadline = time.monotonic() + self.retry_total_s
        if ctx.deadline is not None and ctx.deadline < retry_deadline:
            retry_deadline = ctx.deadline

        attempt = 0
        while True:
            attempt += 1
            try:
                return self.store.get_claim(namespace, name)
            except ClaimNotFoundError:
                pass
            except Exception as e:
                raise ClaimLookupError(str(e)) from e

            now = time.monotonic()
            if now > retry_deadline:
                return None
            sleep_for = min(self.retry_wait_s, retry_deadline - now)
            if sleep_for <= 0:
                return None
            logger.debug(
                "ResourceClaim %s/%s not found (attempt %d); retrying in %.3fs",
                namespace, name, attempt, sleep_for,
            )
            if ctx.wait(sleep_for):
                raise ctx.err()

    def _cpu_count_from_slices(self, claim: ResourceClaim) -> int:
        # Catalog is only fetched when the claim has matching devices.
        if not allocated_device_names(claim, self.driver_name):
            return 0
        try:
            capacities = self.store.list_device_capacities(self.driver_name)
        except Exception as e:
            raise ClaimLookupError(f"failed to list device capacities: {e}") from e
        return cpu_count_from_devices(claim, self.driver_name, capacities)
