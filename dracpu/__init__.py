"""
dracpu — admission check for DRA CPU claims.

A pod that references dra.cpu ResourceClaims must request exactly as many
CPUs as those claims provide, and must not reuse a claim that is already
allocated.

Usage:
    from dracpu.admission import PodAdmissionService
    from dracpu.store import InMemoryClaimStore

    service = PodAdmissionService(store=InMemoryClaimStore())
    decision = service.review_manifest(pod_obj)
"""

__version__ = "0.1.0"
