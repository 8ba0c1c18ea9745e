"""Repository implementation backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, delete, distinct, func, insert, or_, select, update
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from conceptgraph.adapters.sqlalchemy.mappings import (
    create_all_tables,
    identifier_table,
    relationship_table,
    thing_table,
)
from conceptgraph.domain.errors import StoreError, StoreUnavailableError
from conceptgraph.domain.model import INTERNAL_IDENTIFIER_LABEL, RelationshipKind
from conceptgraph.domain.operations import (
    ClearNode,
    DeleteNode,
    DeleteRelationship,
    KeyField,
    MergeIdentifier,
    MergeNode,
    MergeRelationship,
    NodeKey,
)
from conceptgraph.domain.ports import AggregateRow, EquivalenceRecord

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import Session

    from conceptgraph.domain.model import IdentifierLabel
    from conceptgraph.domain.operations import GraphOperation

log = logging.getLogger(__name__)

_STUB_LABELS: tuple[str, ...] = ("Thing",)


@contextmanager
def translate_store_errors() -> Iterator[None]:
    """Re-raise SQLAlchemy failures as store errors of the domain."""

    try:
        yield
    except OperationalError as exc:
        raise StoreUnavailableError(f"Graph store unavailable: {exc}") from exc
    except SQLAlchemyError as exc:
        raise StoreError(f"Graph store request failed: {exc}") from exc


def _store_call[**P, R](method: Callable[P, R]) -> Callable[P, R]:
    @wraps(method)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with translate_store_errors():
            return method(*args, **kwargs)

    return wrapper


class SqlAlchemyConceptGraphRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    # Reads -------------------------------------------------------------------

    @_store_call
    def equivalence(self, uuid: str) -> list[EquivalenceRecord]:
        source = thing_table.alias("source")
        canonical = thing_table.alias("canonical")
        equivalent = relationship_table.alias("equivalent")
        members = relationship_table.alias("members")

        member_count = (
            select(func.count(distinct(members.c.start_id)))
            .where(members.c.end_id == equivalent.c.end_id)
            .where(members.c.kind == RelationshipKind.EQUIVALENT_TO)
            .correlate(equivalent)
            .scalar_subquery()
            .label("member_count")
        )
        stmt = (
            select(
                source.c.uuid,
                canonical.c.pref_uuid,
                member_count,
            )
            .select_from(
                source.outerjoin(
                    equivalent,
                    and_(
                        equivalent.c.start_id == source.c.id,
                        equivalent.c.kind == RelationshipKind.EQUIVALENT_TO,
                    ),
                ).outerjoin(canonical, canonical.c.id == equivalent.c.end_id)
            )
            .where(source.c.uuid == uuid)
        )
        return [
            EquivalenceRecord(
                source_uuid=row.uuid,
                pref_uuid=row.pref_uuid,
                member_count=int(row.member_count or 0) if row.pref_uuid is not None else 0,
            )
            for row in self.session.execute(stmt).all()
        ]

    @_store_call
    def aggregate_rows(self, pref_uuid: str) -> list[AggregateRow]:
        canonical = thing_table.alias("canonical")
        source = thing_table.alias("source")
        target = thing_table.alias("target")
        equivalent = relationship_table.alias("equivalent")
        neighbour = relationship_table.alias("neighbour")

        stmt = (
            select(
                canonical.c.labels.label("canonical_labels"),
                canonical.c.properties.label("canonical_properties"),
                source.c.labels.label("source_labels"),
                source.c.properties.label("source_properties"),
                neighbour.c.kind,
                target.c.uuid.label("target_uuid"),
                neighbour.c.properties.label("relationship_properties"),
            )
            .select_from(
                canonical.join(
                    equivalent,
                    and_(
                        equivalent.c.end_id == canonical.c.id,
                        equivalent.c.kind == RelationshipKind.EQUIVALENT_TO,
                    ),
                )
                .join(source, source.c.id == equivalent.c.start_id)
                .outerjoin(
                    neighbour,
                    and_(
                        neighbour.c.start_id == source.c.id,
                        neighbour.c.kind != RelationshipKind.EQUIVALENT_TO,
                    ),
                )
                .outerjoin(target, target.c.id == neighbour.c.end_id)
            )
            .where(canonical.c.pref_uuid == pref_uuid)
            .order_by(source.c.uuid, neighbour.c.kind, target.c.uuid)
        )
        return [
            AggregateRow(
                canonical_properties=dict(row.canonical_properties),
                canonical_labels=tuple(row.canonical_labels),
                source_properties=dict(row.source_properties),
                source_labels=tuple(row.source_labels),
                relationship=row.kind,
                target_uuid=row.target_uuid,
                relationship_properties=dict(row.relationship_properties or {}),
            )
            for row in self.session.execute(stmt).all()
        ]

    @_store_call
    def issued_instruments(self, issuer_uuid: str) -> list[str]:
        instrument = thing_table.alias("instrument")
        issuer = thing_table.alias("issuer")
        stmt = (
            select(instrument.c.uuid)
            .select_from(
                relationship_table.join(
                    instrument, instrument.c.id == relationship_table.c.start_id
                ).join(issuer, issuer.c.id == relationship_table.c.end_id)
            )
            .where(relationship_table.c.kind == RelationshipKind.ISSUED_BY)
            .where(issuer.c.uuid == issuer_uuid)
            .order_by(instrument.c.uuid)
        )
        return [uuid for uuid in self.session.execute(stmt).scalars() if uuid]

    @_store_call
    def check(self) -> None:
        self.session.execute(select(1)).scalar_one()

    @_store_call
    def ensure_schema(self) -> None:
        create_all_tables(self.session.connection())

    # Writes ------------------------------------------------------------------

    @_store_call
    def apply(self, operations: Sequence[GraphOperation]) -> None:
        for operation in operations:
            match operation:
                case ClearNode():
                    self._clear_node(operation)
                case DeleteNode():
                    self._delete_node(operation.key)
                case MergeNode():
                    self._merge_node(operation)
                case MergeRelationship():
                    self._merge_relationship(operation)
                case DeleteRelationship():
                    self._delete_relationship(operation)
                case MergeIdentifier():
                    node_id = self._ensure_node(operation.key)
                    self._merge_identifier(node_id, operation.label, operation.value)
        self.session.flush()

    def _clear_node(self, operation: ClearNode) -> None:
        node_id = self._find_node(operation.key)
        if node_id is None:
            return
        if operation.outgoing:
            self.session.execute(
                delete(relationship_table)
                .where(relationship_table.c.start_id == node_id)
                .where(relationship_table.c.kind.in_(sorted(operation.outgoing)))
            )
        if operation.incoming:
            self.session.execute(
                delete(relationship_table)
                .where(relationship_table.c.end_id == node_id)
                .where(relationship_table.c.kind.in_(sorted(operation.incoming)))
            )
        if operation.drop_identifiers:
            self.session.execute(
                delete(identifier_table).where(identifier_table.c.thing_id == node_id)
            )
        self.session.execute(
            update(thing_table)
            .where(thing_table.c.id == node_id)
            .values(
                labels=_STUB_LABELS,
                properties=_stub_properties(operation.key),
                authority_value=None,
            )
        )

    def _delete_node(self, key: NodeKey) -> None:
        node_id = self._find_node(key)
        if node_id is None:
            return
        log.debug("Deleting node %s", key)
        self.session.execute(
            delete(relationship_table).where(
                or_(relationship_table.c.start_id == node_id, relationship_table.c.end_id == node_id)
            )
        )
        self.session.execute(delete(identifier_table).where(identifier_table.c.thing_id == node_id))
        self.session.execute(delete(thing_table).where(thing_table.c.id == node_id))

    def _merge_node(self, operation: MergeNode) -> None:
        node_id = self._ensure_node(operation.key)
        properties = dict(operation.properties)
        properties[operation.key.key_field.value] = operation.key.value
        self.session.execute(
            update(thing_table)
            .where(thing_table.c.id == node_id)
            .values(
                labels=tuple(operation.labels),
                properties=properties,
                authority_value=properties.get("authorityValue"),
            )
        )

    def _merge_relationship(self, operation: MergeRelationship) -> None:
        start_id = self._ensure_node(operation.start)
        end_id = self._ensure_node(operation.end)
        if operation.identify_end and operation.end.key_field is KeyField.UUID:
            self._merge_identifier(end_id, INTERNAL_IDENTIFIER_LABEL, operation.end.value)
        existing = self.session.execute(
            select(relationship_table.c.id)
            .where(relationship_table.c.kind == operation.kind)
            .where(relationship_table.c.start_id == start_id)
            .where(relationship_table.c.end_id == end_id)
        ).scalar_one_or_none()
        if existing is not None:
            return
        self.session.execute(
            insert(relationship_table).values(
                kind=operation.kind,
                start_id=start_id,
                end_id=end_id,
                properties=dict(operation.properties),
            )
        )

    def _delete_relationship(self, operation: DeleteRelationship) -> None:
        start_id = self._find_node(operation.start)
        end_id = self._find_node(operation.end)
        if start_id is None or end_id is None:
            return
        self.session.execute(
            delete(relationship_table)
            .where(relationship_table.c.kind == operation.kind)
            .where(relationship_table.c.start_id == start_id)
            .where(relationship_table.c.end_id == end_id)
        )

    def _merge_identifier(self, node_id: int, label: IdentifierLabel, value: str) -> None:
        existing = self.session.execute(
            select(identifier_table.c.id)
            .where(identifier_table.c.label == label)
            .where(identifier_table.c.value == value)
            .where(identifier_table.c.thing_id == node_id)
        ).scalar_one_or_none()
        if existing is None:
            self.session.execute(
                insert(identifier_table).values(label=label, value=value, thing_id=node_id)
            )

    def _find_node(self, key: NodeKey) -> int | None:
        column = thing_table.c.uuid if key.key_field is KeyField.UUID else thing_table.c.pref_uuid
        return self.session.execute(
            select(thing_table.c.id).where(column == key.value)
        ).scalar_one_or_none()

    def _ensure_node(self, key: NodeKey) -> int:
        node_id = self._find_node(key)
        if node_id is not None:
            return node_id
        values: dict[str, Any] = {
            "labels": _STUB_LABELS,
            "properties": _stub_properties(key),
        }
        if key.key_field is KeyField.UUID:
            values["uuid"] = key.value
        else:
            values["pref_uuid"] = key.value
        result = self.session.execute(insert(thing_table).values(**values))
        return result.inserted_primary_key[0]


def _stub_properties(key: NodeKey) -> dict[str, Any]:
    return {key.key_field.value: key.value}
