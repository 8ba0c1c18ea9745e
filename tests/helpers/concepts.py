"""Builders and fakes for concept graph tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from conceptgraph.domain.model import AggregatedConcept, Concept, MembershipRole
from conceptgraph.domain.ports import ConceptGraphRepositories, EquivalenceRecord

if TYPE_CHECKING:
    from collections.abc import Sequence

    from conceptgraph.domain.operations import GraphOperation
    from conceptgraph.domain.ports import AggregateRow


def make_source(
    uuid: str,
    *,
    type: str = "Brand",  # noqa: A002
    authority: str = "TME",
    **fields: Any,
) -> Concept:
    """Create a valid source record, overriding any field through ``fields``."""

    fields.setdefault("pref_label", f"Label {uuid}")
    fields.setdefault("authority_value", f"{authority}-{uuid}")
    return Concept(uuid=uuid, type=type, authority=authority, **fields)


def make_aggregate(
    pref_uuid: str,
    sources: Sequence[Concept] | None = None,
    *,
    type: str = "Brand",  # noqa: A002
    **fields: Any,
) -> AggregatedConcept:
    """Create a valid aggregate; defaults to a lone concept whose source is ``pref_uuid``."""

    fields.setdefault("pref_label", f"Canonical {pref_uuid}")
    if sources is None:
        sources = [make_source(pref_uuid, type=type)]
    return AggregatedConcept(
        pref_uuid=pref_uuid,
        type=type,
        source_representations=list(sources),
        **fields,
    )


def make_membership(pref_uuid: str, *source_uuids: str, **fields: Any) -> AggregatedConcept:
    """Create a valid membership aggregate with one role per source."""

    def roles() -> list[MembershipRole]:
        return [MembershipRole(role_uuid="role-1", inception_date="2020-01-31")]

    sources = [
        make_source(
            uuid,
            type="Membership",
            authority="Smartlogic",
            person_uuid="person-1",
            organisation_uuid="org-1",
            membership_roles=roles(),
        )
        for uuid in (source_uuids or (pref_uuid,))
    ]
    fields.setdefault("person_uuid", "person-1")
    fields.setdefault("organisation_uuid", "org-1")
    fields.setdefault("membership_roles", roles())
    return make_aggregate(pref_uuid, sources, type="Membership", **fields)


def equivalence(source_uuid: str, pref_uuid: str | None, member_count: int) -> EquivalenceRecord:
    return EquivalenceRecord(source_uuid=source_uuid, pref_uuid=pref_uuid, member_count=member_count)


@dataclass(slots=True)
class FakeConceptGraphRepository:
    """In-memory stand-in for the graph store port."""

    records: dict[str, list[EquivalenceRecord]] = field(default_factory=dict[str, list[EquivalenceRecord]])
    rows: dict[str, list[AggregateRow]] = field(default_factory=dict[str, list["AggregateRow"]])
    issuers: dict[str, list[str]] = field(default_factory=dict[str, list[str]])
    applied: list[GraphOperation] = field(default_factory=list["GraphOperation"])
    lookups: list[str] = field(default_factory=list[str])
    schema_ensured: bool = False

    def equivalence(self, uuid: str) -> list[EquivalenceRecord]:
        self.lookups.append(uuid)
        return list(self.records.get(uuid, []))

    def aggregate_rows(self, pref_uuid: str) -> list[AggregateRow]:
        return list(self.rows.get(pref_uuid, []))

    def issued_instruments(self, issuer_uuid: str) -> list[str]:
        return list(self.issuers.get(issuer_uuid, []))

    def apply(self, operations: Sequence[GraphOperation]) -> None:
        self.applied.extend(operations)

    def check(self) -> None:
        return None

    def ensure_schema(self) -> None:
        self.schema_ensured = True


class FakeUnitOfWork:
    """Unit of work over a ``FakeConceptGraphRepository`` that records commits."""

    def __init__(self, repository: FakeConceptGraphRepository) -> None:
        self._repositories = ConceptGraphRepositories(concepts=repository)
        self.committed = False
        self.rolled_back = False

    @property
    def repositories(self) -> ConceptGraphRepositories:
        return self._repositories

    def __enter__(self) -> FakeUnitOfWork:
        return self

    def __exit__(self, exc_type: object, exc_value: object, traceback: object) -> bool:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True
