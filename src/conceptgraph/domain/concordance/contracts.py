"""Shared concordance resolution contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from conceptgraph.domain.model import Concept, ConceptChanges

if TYPE_CHECKING:
    from conceptgraph.domain.ports import EquivalenceRecord


class EquivalenceStatus(StrEnum):
    """Stored concordance state of a source claimed by a write."""

    ABSENT = "absent"
    UNATTACHED = "unattached"
    SINGLETON_ANCHOR = "singleton_anchor"
    SINGLETON_NON_ANCHOR = "singleton_non_anchor"
    ALREADY_MEMBER = "already_member"
    FOREIGN_ANCHOR = "foreign_anchor"
    STALE_MEMBER = "stale_member"


@dataclass(frozen=True, slots=True, kw_only=True)
class Classification:
    """Status of one claimed source together with the record it was derived from."""

    source_uuid: str
    status: EquivalenceStatus
    record: EquivalenceRecord | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class StaleIssuerEdge:
    """``ISSUED_BY`` edge from another instrument to an issuer being written."""

    instrument_uuid: str
    issuer_uuid: str


@dataclass(slots=True, kw_only=True)
class ConcordancePlan:
    """Decisions of the resolution engine for one write.

    ``orphaned_canonicals`` are canonical ids left without members once the
    write is applied; ``unconcorded`` are prior members of the written group
    that become their own singleton concordance.
    """

    changes: ConceptChanges = field(default_factory=ConceptChanges)
    orphaned_canonicals: list[str] = field(default_factory=list[str])
    unconcorded: list[Concept] = field(default_factory=list[Concept])
