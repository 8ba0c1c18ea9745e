"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import AggregateRow, ConceptGraphRepository, EquivalenceRecord
from .unit_of_work import ConceptGraphRepositories, ConceptGraphUnitOfWork

__all__ = [
    "AggregateRow",
    "ConceptGraphRepositories",
    "ConceptGraphRepository",
    "ConceptGraphUnitOfWork",
    "EquivalenceRecord",
]
