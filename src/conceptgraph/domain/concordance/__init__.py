"""Concordance resolution, mutation planning and reconstruction."""

from __future__ import annotations

from .contracts import Classification, ConcordancePlan, EquivalenceStatus, StaleIssuerEdge
from .engine import ConceptService
from .plan import plan_write
from .reconstruct import reconstruct
from .resolve import classify, resolve_concordance

__all__ = [
    "Classification",
    "ConceptService",
    "ConcordancePlan",
    "EquivalenceStatus",
    "StaleIssuerEdge",
    "classify",
    "plan_write",
    "reconstruct",
    "resolve_concordance",
]
