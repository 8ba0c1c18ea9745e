"""Ports for reading and mutating the concept graph store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from conceptgraph.domain.model import RelationshipKind
    from conceptgraph.domain.operations import GraphOperation


@dataclass(frozen=True, slots=True, kw_only=True)
class EquivalenceRecord:
    """Current concordance state of one stored source node.

    ``member_count`` is the number of sources pointing at the canonical node
    ``pref_uuid``; it is 0 when the source has no equivalence edge.
    """

    source_uuid: str
    pref_uuid: str | None
    member_count: int


@dataclass(frozen=True, slots=True, kw_only=True)
class AggregateRow:
    """One canonical x source x neighbour row of an aggregate read.

    Sources without neighbours come back once with ``relationship`` and
    ``target_uuid`` set to ``None``.
    """

    canonical_properties: dict[str, Any]
    canonical_labels: tuple[str, ...]
    source_properties: dict[str, Any]
    source_labels: tuple[str, ...]
    relationship: RelationshipKind | None = None
    target_uuid: str | None = None
    relationship_properties: dict[str, Any] = field(default_factory=dict[str, Any])


@runtime_checkable
class ConceptGraphRepository(Protocol):
    """Persistence contract of the concept graph."""

    def equivalence(self, uuid: str) -> Sequence[EquivalenceRecord]: ...

    def aggregate_rows(self, pref_uuid: str) -> Sequence[AggregateRow]: ...

    def issued_instruments(self, issuer_uuid: str) -> Sequence[str]: ...

    def apply(self, operations: Sequence[GraphOperation]) -> None: ...

    def check(self) -> None: ...

    def ensure_schema(self) -> None: ...
