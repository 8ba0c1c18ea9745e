"""Domain model of the concept graph."""

from __future__ import annotations

from .concept import AggregatedConcept, Concept, MembershipRole
from .enums import Authority, ConceptType, EventType, IdentifierLabel, RelationshipKind
from .events import ConceptChanges, ConceptEvent, ConcordanceEvent, Event, EventDetails
from .hierarchy import (
    WRITABLE_TYPES,
    label_chain,
    most_specific_type,
    parent_of,
    parse_type,
)
from .identifiers import (
    INTERNAL_IDENTIFIER_LABEL,
    identifier_label_for,
    is_recognised_authority,
)

__all__ = [
    "INTERNAL_IDENTIFIER_LABEL",
    "WRITABLE_TYPES",
    "AggregatedConcept",
    "Authority",
    "Concept",
    "ConceptChanges",
    "ConceptEvent",
    "ConceptType",
    "ConcordanceEvent",
    "Event",
    "EventDetails",
    "EventType",
    "IdentifierLabel",
    "MembershipRole",
    "RelationshipKind",
    "identifier_label_for",
    "is_recognised_authority",
    "label_chain",
    "most_specific_type",
    "parent_of",
    "parse_type",
]
