from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from conceptgraph.adapters.sqlalchemy.mappings import identifier_table, relationship_table, thing_table
from conceptgraph.adapters.sqlalchemy.repositories import translate_store_errors
from conceptgraph.domain.errors import StoreError, StoreUnavailableError
from conceptgraph.domain.model import IdentifierLabel, RelationshipKind
from conceptgraph.domain.operations import (
    ClearNode,
    DeleteNode,
    DeleteRelationship,
    MergeIdentifier,
    MergeNode,
    MergeRelationship,
    NodeKey,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sqlalchemy.orm import Session

    from conceptgraph.adapters.sqlalchemy.unit_of_work import SqlAlchemyConceptGraphUnitOfWork
    from conceptgraph.domain.operations import GraphOperation

    type UnitOfWorkFactory = Callable[[], SqlAlchemyConceptGraphUnitOfWork]

BRAND = ("Brand", "Classification", "Concept", "Thing")


def _concordance(pref_uuid: str, *source_uuids: str) -> list[GraphOperation]:
    canonical = NodeKey.canonical(pref_uuid)
    operations: list[GraphOperation] = [
        MergeNode(key=canonical, labels=BRAND, properties={"prefLabel": f"Canonical {pref_uuid}"})
    ]
    for uuid in source_uuids:
        operations.append(
            MergeNode(
                key=NodeKey.source(uuid),
                labels=BRAND,
                properties={"prefLabel": f"Label {uuid}", "authority": "TME", "authorityValue": f"TME-{uuid}"},
            )
        )
        operations.append(
            MergeRelationship(kind=RelationshipKind.EQUIVALENT_TO, start=NodeKey.source(uuid), end=canonical)
        )
    return operations


def _apply(factory: UnitOfWorkFactory, operations: Sequence[GraphOperation]) -> None:
    with factory() as uow:
        uow.repositories.concepts.apply(operations)
        uow.commit()


def _count(session: Session, table_name: str) -> int:
    table = {
        "thing": thing_table,
        "relationship": relationship_table,
        "identifier": identifier_table,
    }[table_name]
    return session.execute(select(func.count()).select_from(table)).scalar_one()


def _source_node(session: Session, uuid: str) -> tuple[tuple[str, ...], dict[str, object]]:
    row = session.execute(
        select(thing_table.c.labels, thing_table.c.properties).where(thing_table.c.uuid == uuid)
    ).one()
    return tuple(row.labels), dict(row.properties or {})


def test_equivalence_reports_canonical_and_member_count(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    _apply(sqlite_unit_of_work, _concordance("p", "p", "s"))

    with sqlite_unit_of_work() as uow:
        records = uow.repositories.concepts.equivalence("s")
        missing = uow.repositories.concepts.equivalence("nope")
        labels, properties = _source_node(uow.session, "s")

    assert missing == []
    assert len(records) == 1
    record = records[0]
    assert record.pref_uuid == "p"
    assert record.member_count == 2
    assert labels == BRAND
    assert properties["authority"] == "TME"


def test_equivalence_of_unattached_stub(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    operations = _concordance("p", "p")
    operations.append(
        MergeRelationship(
            kind=RelationshipKind.HAS_PARENT,
            start=NodeKey.source("p"),
            end=NodeKey.source("parent-1"),
            identify_end=True,
        )
    )
    _apply(sqlite_unit_of_work, operations)

    with sqlite_unit_of_work() as uow:
        [record] = uow.repositories.concepts.equivalence("parent-1")
        labels, _ = _source_node(uow.session, "parent-1")
        identifiers = uow.session.execute(
            select(identifier_table.c.label, identifier_table.c.value)
        ).all()

    assert record.pref_uuid is None
    assert record.member_count == 0
    assert labels == ("Thing",)
    assert [(label, value) for label, value in identifiers] == [(IdentifierLabel.UPP, "parent-1")]


def test_apply_is_idempotent(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    operations = [
        *_concordance("p", "p", "s"),
        MergeIdentifier(key=NodeKey.source("s"), label=IdentifierLabel.TME, value="TME-s"),
    ]
    _apply(sqlite_unit_of_work, operations)
    _apply(sqlite_unit_of_work, operations)

    with sqlite_unit_of_work() as uow:
        counts = {name: _count(uow.session, name) for name in ("thing", "relationship", "identifier")}

    assert counts == {"thing": 3, "relationship": 2, "identifier": 1}


def test_aggregate_rows_join_sources_and_neighbours(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    operations = _concordance("p", "p", "s")
    operations.append(
        MergeRelationship(
            kind=RelationshipKind.HAS_ROLE,
            start=NodeKey.source("p"),
            end=NodeKey.source("role-1"),
            properties={"inceptionDate": "2020-01-31"},
        )
    )
    _apply(sqlite_unit_of_work, operations)

    with sqlite_unit_of_work() as uow:
        rows = uow.repositories.concepts.aggregate_rows("p")
        missing = uow.repositories.concepts.aggregate_rows("s")

    assert missing == []
    assert [(row.source_properties["uuid"], row.relationship, row.target_uuid) for row in rows] == [
        ("p", RelationshipKind.HAS_ROLE, "role-1"),
        ("s", None, None),
    ]
    assert rows[0].relationship_properties == {"inceptionDate": "2020-01-31"}
    assert rows[0].canonical_properties["prefUUID"] == "p"
    assert rows[0].canonical_labels == BRAND


def test_clear_node_strips_node_to_stub(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    operations = [
        *_concordance("p", "p"),
        MergeIdentifier(key=NodeKey.source("p"), label=IdentifierLabel.TME, value="TME-p"),
    ]
    _apply(sqlite_unit_of_work, operations)

    _apply(
        sqlite_unit_of_work,
        [ClearNode(key=NodeKey.source("p"), outgoing=frozenset(RelationshipKind), drop_identifiers=True)],
    )

    with sqlite_unit_of_work() as uow:
        [record] = uow.repositories.concepts.equivalence("p")
        identifiers = _count(uow.session, "identifier")
        labels, properties = _source_node(uow.session, "p")

    assert labels == ("Thing",)
    assert record.pref_uuid is None
    assert "authority" not in properties
    assert identifiers == 0


def test_clear_missing_node_is_a_noop(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    _apply(sqlite_unit_of_work, [ClearNode(key=NodeKey.canonical("nope"))])

    with sqlite_unit_of_work() as uow:
        assert _count(uow.session, "thing") == 0


def test_delete_node_removes_edges(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    _apply(sqlite_unit_of_work, _concordance("p", "p"))

    _apply(sqlite_unit_of_work, [DeleteNode(key=NodeKey.canonical("p"))])

    with sqlite_unit_of_work() as uow:
        [record] = uow.repositories.concepts.equivalence("p")
        relationships = _count(uow.session, "relationship")

    assert record.pref_uuid is None
    assert relationships == 0


def test_issued_instruments_and_relationship_deletion(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    issued = [
        MergeRelationship(
            kind=RelationshipKind.ISSUED_BY,
            start=NodeKey.source(uuid),
            end=NodeKey.source("org-1"),
        )
        for uuid in ("fi-2", "fi-1")
    ]
    _apply(sqlite_unit_of_work, issued)

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.concepts.issued_instruments("org-1") == ["fi-1", "fi-2"]

    _apply(
        sqlite_unit_of_work,
        [
            DeleteRelationship(
                kind=RelationshipKind.ISSUED_BY,
                start=NodeKey.source("fi-2"),
                end=NodeKey.source("org-1"),
            )
        ],
    )

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.concepts.issued_instruments("org-1") == ["fi-1"]
        uow.repositories.concepts.check()


def test_translate_store_errors_maps_sqlalchemy_failures() -> None:
    with pytest.raises(StoreUnavailableError), translate_store_errors():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    with pytest.raises(StoreError), translate_store_errors():
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
