from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from conceptgraph.domain.concordance import EquivalenceStatus, classify, resolve_concordance
from conceptgraph.domain.errors import ConcordanceConflictError, DataIntegrityError, InvalidRequestError
from conceptgraph.domain.model import ConcordanceEvent, EventType
from tests.helpers.concepts import (
    FakeConceptGraphRepository,
    equivalence,
    make_aggregate,
    make_source,
)

if TYPE_CHECKING:
    from conceptgraph.domain.concordance import ConcordancePlan
    from conceptgraph.domain.model import AggregatedConcept
    from conceptgraph.domain.ports import EquivalenceRecord

type EventSummary = tuple[str, EventType, str | None, str | None]


def _resolve(
    aggregate: AggregatedConcept,
    repository: FakeConceptGraphRepository,
    existing: AggregatedConcept | None = None,
) -> ConcordancePlan:
    return resolve_concordance(
        aggregate,
        existing,
        repository.equivalence,
        aggregate_hash="hash-1",
        transaction_id="tid_test",
    )


def _event_summary(plan: ConcordancePlan) -> list[EventSummary]:
    summary: list[EventSummary] = []
    for event in plan.changes.changed_records:
        details = event.details
        if isinstance(details, ConcordanceEvent):
            summary.append((event.concept_uuid, details.type, details.old_id, details.new_id))
        else:
            summary.append((event.concept_uuid, details.type, None, None))
    return summary


@pytest.mark.parametrize(
    ("records", "expected"),
    [
        ([], EquivalenceStatus.ABSENT),
        ([equivalence("s", None, 0)], EquivalenceStatus.UNATTACHED),
        ([equivalence("s", "s", 1)], EquivalenceStatus.SINGLETON_ANCHOR),
        ([equivalence("s", "other", 1)], EquivalenceStatus.SINGLETON_NON_ANCHOR),
        ([equivalence("s", "p", 2)], EquivalenceStatus.ALREADY_MEMBER),
        ([equivalence("s", "s", 2)], EquivalenceStatus.FOREIGN_ANCHOR),
        ([equivalence("s", "other", 2)], EquivalenceStatus.STALE_MEMBER),
    ],
)
def test_classify_covers_every_stored_state(
    records: list[EquivalenceRecord],
    expected: EquivalenceStatus,
) -> None:
    assert classify("s", records, "p").status is expected


def test_classify_rejects_duplicate_source_nodes() -> None:
    records = [equivalence("s", "p", 1), equivalence("s", "q", 1)]

    with pytest.raises(DataIntegrityError, match="Multiple source concepts found with matching uuid: s"):
        classify("s", records, "p")


def test_new_lone_concept_only_emits_concept_updated() -> None:
    plan = _resolve(make_aggregate("p"), FakeConceptGraphRepository())

    assert _event_summary(plan) == [("p", EventType.CONCEPT_UPDATED, None, None)]
    assert plan.changes.updated_ids == ["p"]
    assert plan.changes.changed_records[0].concept_type == "Brand"
    assert plan.changes.changed_records[0].aggregate_hash == "hash-1"
    assert plan.changes.changed_records[0].transaction_id == "tid_test"
    assert plan.orphaned_canonicals == []


def test_unseen_non_anchor_source_is_added_to_concordance() -> None:
    aggregate = make_aggregate("p", [make_source("p"), make_source("s", type="Topic")])

    plan = _resolve(aggregate, FakeConceptGraphRepository())

    assert _event_summary(plan) == [
        ("s", EventType.CONCEPT_UPDATED, None, None),
        ("s", EventType.CONCORDANCE_ADDED, "s", "p"),
        ("p", EventType.CONCEPT_UPDATED, None, None),
    ]
    assert plan.changes.changed_records[0].concept_type == "Topic"
    assert plan.changes.updated_ids == ["p", "s"]


def test_singleton_anchor_transfers_and_orphans_old_canonical() -> None:
    repository = FakeConceptGraphRepository(records={"s": [equivalence("s", "s", 1)]})
    aggregate = make_aggregate("p", [make_source("p"), make_source("s")])

    plan = _resolve(aggregate, repository)

    assert plan.orphaned_canonicals == ["s"]
    assert _event_summary(plan) == [
        ("s", EventType.CONCORDANCE_ADDED, "s", "p"),
        ("p", EventType.CONCEPT_UPDATED, None, None),
    ]


def test_singleton_anchor_of_own_canonical_is_not_orphaned() -> None:
    repository = FakeConceptGraphRepository(records={"p": [equivalence("p", "p", 1)]})

    plan = _resolve(make_aggregate("p"), repository)

    assert plan.orphaned_canonicals == []
    assert _event_summary(plan) == [("p", EventType.CONCEPT_UPDATED, None, None)]


def test_unattached_and_already_member_sources_emit_nothing_extra() -> None:
    repository = FakeConceptGraphRepository(
        records={
            "a": [equivalence("a", None, 0)],
            "b": [equivalence("b", "p", 3)],
        }
    )
    aggregate = make_aggregate("p", [make_source("p"), make_source("a"), make_source("b")])

    plan = _resolve(aggregate, repository)

    assert _event_summary(plan) == [("p", EventType.CONCEPT_UPDATED, None, None)]


def test_foreign_anchor_is_a_conflict() -> None:
    repository = FakeConceptGraphRepository(records={"a": [equivalence("a", "a", 2)]})
    aggregate = make_aggregate("p", [make_source("p"), make_source("a")])

    with pytest.raises(ConcordanceConflictError) as excinfo:
        _resolve(aggregate, repository)

    assert str(excinfo.value) == (
        "Cannot currently process this record as it will break an existing "
        "concordance with prefUUID: a"
    )
    assert excinfo.value.source_uuid == "a"


def test_singleton_non_anchor_is_dodgy_data() -> None:
    repository = FakeConceptGraphRepository(records={"s": [equivalence("s", "x", 1)]})
    aggregate = make_aggregate("p", [make_source("p"), make_source("s")])

    with pytest.raises(DataIntegrityError, match="prefUUID: x"):
        _resolve(aggregate, repository)


def test_stale_member_is_moved_with_removed_then_added_events() -> None:
    repository = FakeConceptGraphRepository(records={"s": [equivalence("s", "x", 3)]})
    aggregate = make_aggregate("p", [make_source("p"), make_source("s")])

    plan = _resolve(aggregate, repository)

    assert _event_summary(plan) == [
        ("s", EventType.CONCORDANCE_REMOVED, "x", "s"),
        ("s", EventType.CONCORDANCE_ADDED, "s", "p"),
        ("p", EventType.CONCEPT_UPDATED, None, None),
    ]
    assert plan.orphaned_canonicals == []


def test_taking_every_member_of_a_concordance_orphans_its_canonical() -> None:
    repository = FakeConceptGraphRepository(
        records={
            "s1": [equivalence("s1", "q", 2)],
            "s2": [equivalence("s2", "q", 2)],
            "t": [equivalence("t", "r", 3)],
        }
    )
    aggregate = make_aggregate("p", [make_source("s1"), make_source("s2"), make_source("t")])

    plan = _resolve(aggregate, repository)

    assert plan.orphaned_canonicals == ["q"]


def test_anchor_cannot_leave_its_own_concordance() -> None:
    existing = make_aggregate("p", [make_source("p"), make_source("p2")])
    repository = FakeConceptGraphRepository()

    with pytest.raises(InvalidRequestError, match="cannot be removed") as excinfo:
        _resolve(make_aggregate("p", [make_source("p2")]), repository, existing)

    assert excinfo.value.field == "sourceRepresentations"
    assert excinfo.value.uuid == "p"
    assert repository.lookups == []


def test_sources_already_in_stored_aggregate_are_not_looked_up() -> None:
    existing = make_aggregate("p", [make_source("p"), make_source("s")])
    repository = FakeConceptGraphRepository()

    _resolve(make_aggregate("p", [make_source("p"), make_source("s")]), repository, existing)

    assert repository.lookups == []


def test_dropped_sources_are_unconcorded_in_sorted_order() -> None:
    existing = make_aggregate(
        "p",
        [make_source("p"), make_source("z", type="Topic"), make_source("b")],
    )

    plan = _resolve(make_aggregate("p"), FakeConceptGraphRepository(), existing)

    assert [source.uuid for source in plan.unconcorded] == ["b", "z"]
    assert _event_summary(plan) == [
        ("b", EventType.CONCORDANCE_REMOVED, "p", "b"),
        ("z", EventType.CONCORDANCE_REMOVED, "p", "z"),
        ("p", EventType.CONCEPT_UPDATED, None, None),
    ]
    assert plan.changes.changed_records[1].concept_type == "Topic"
    assert plan.changes.updated_ids == ["p", "b", "z"]


def test_integrated_sources_are_processed_in_sorted_order() -> None:
    aggregate = make_aggregate("p", [make_source("p"), make_source("c"), make_source("a")])
    repository = FakeConceptGraphRepository()

    plan = _resolve(aggregate, repository)

    assert repository.lookups == ["a", "c", "p"]
    assert plan.changes.updated_ids == ["p", "c", "a"]
