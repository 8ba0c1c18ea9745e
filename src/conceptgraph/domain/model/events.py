"""Change records emitted by a successful write."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from conceptgraph.domain.model.enums import EventType


@dataclass(frozen=True, slots=True, kw_only=True)
class ConceptEvent:
    type: Literal[EventType.CONCEPT_UPDATED] = EventType.CONCEPT_UPDATED


@dataclass(frozen=True, slots=True, kw_only=True)
class ConcordanceEvent:
    type: Literal[EventType.CONCORDANCE_ADDED, EventType.CONCORDANCE_REMOVED]
    old_id: str
    new_id: str


type EventDetails = ConceptEvent | ConcordanceEvent


@dataclass(frozen=True, slots=True, kw_only=True)
class Event:
    concept_type: str
    concept_uuid: str
    aggregate_hash: str
    transaction_id: str
    details: EventDetails


@dataclass(slots=True)
class ConceptChanges:
    """Ids to notify downstream plus the ordered list of typed events."""

    updated_ids: list[str] = field(default_factory=list[str])
    changed_records: list[Event] = field(default_factory=list[Event])
