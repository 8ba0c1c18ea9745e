"""Rebuild aggregates from flat store rows."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Final

from conceptgraph.domain.kinds import CANONICAL_PROPERTIES, policy_for
from conceptgraph.domain.model import (
    AggregatedConcept,
    Concept,
    MembershipRole,
    RelationshipKind,
    most_specific_type,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from conceptgraph.domain.ports import AggregateRow

_DIGITS = re.compile(r"(\d+)")

_LIST_RELATIONSHIPS: Final[dict[RelationshipKind, str]] = {
    RelationshipKind.HAS_PARENT: "parent_uuids",
    RelationshipKind.IS_RELATED_TO: "related_uuids",
    RelationshipKind.HAS_BROADER: "broader_uuids",
    RelationshipKind.SUPERSEDED_BY: "superseded_by_uuids",
}

_SINGLE_RELATIONSHIPS: Final[dict[RelationshipKind, str]] = {
    RelationshipKind.HAS_ORGANISATION: "organisation_uuid",
    RelationshipKind.HAS_MEMBER: "person_uuid",
    RelationshipKind.ISSUED_BY: "issued_by",
    RelationshipKind.SUB_ORGANISATION_OF: "parent_organisation",
    RelationshipKind.COUNTRY_OF_RISK: "country_of_risk_uuid",
    RelationshipKind.COUNTRY_OF_INCORPORATION: "country_of_incorporation_uuid",
    RelationshipKind.COUNTRY_OF_OPERATIONS: "country_of_operations_uuid",
}

# Aggregate references taken from the first source that carries them.
_INHERITED_REFERENCES: Final[tuple[str, ...]] = (*_SINGLE_RELATIONSHIPS.values(), "membership_roles")


def natural_key(value: str) -> tuple[str | int, ...]:
    return tuple(int(part) if part.isdigit() else part for part in _DIGITS.split(value))


def source_order(uuid: str) -> tuple[Any, ...]:
    """Sort key ordering source ids case-insensitively, then naturally."""

    return (uuid.casefold(), natural_key(uuid), uuid)


def reconstruct(rows: Sequence[AggregateRow]) -> AggregatedConcept | None:
    """Regroup the rows of one canonical id into an aggregate.

    Returns ``None`` when there are no rows. Raises ``UnrecognizedTypeError``
    when a node's labels do not resolve to a known kind.
    """

    if not rows:
        return None

    head = rows[0]
    canonical_type = most_specific_type(head.canonical_labels)
    policy = policy_for(canonical_type)
    properties = head.canonical_properties

    values: dict[str, Any] = {}
    for attribute in policy.canonical_fields:
        stored = properties.get(CANONICAL_PROPERTIES[attribute])
        if stored is not None:
            values[attribute] = list(stored) if isinstance(stored, list) else stored

    sources: dict[str, Concept] = {}
    for row in rows:
        uuid = row.source_properties.get("uuid")
        if not uuid:
            continue
        source = sources.get(uuid)
        if source is None:
            source = _source_from_row(row)
            sources[uuid] = source
        _attach(source, row)

    ordered = [sources[uuid] for uuid in sorted(sources, key=source_order)]
    for source in ordered:
        for attribute in _LIST_RELATIONSHIPS.values():
            setattr(source, attribute, sorted(getattr(source, attribute)))
        source.membership_roles.sort(key=_role_uuid)

    aggregate = AggregatedConcept(
        pref_uuid=properties["prefUUID"],
        pref_label=properties.get("prefLabel"),
        type=canonical_type.value,
        aggregated_hash=properties.get("aggregateHash"),
        source_representations=ordered,
        **values,
    )
    for attribute in _INHERITED_REFERENCES:
        inherited = next((v for s in ordered if (v := getattr(s, attribute))), None)
        if inherited is not None:
            setattr(aggregate, attribute, list(inherited) if isinstance(inherited, list) else inherited)
    return aggregate


def _source_from_row(row: AggregateRow) -> Concept:
    properties = row.source_properties
    return Concept(
        uuid=properties["uuid"],
        pref_label=properties.get("prefLabel"),
        type=most_specific_type(row.source_labels).value,
        authority=properties.get("authority"),
        authority_value=properties.get("authorityValue"),
        figi_code=properties.get("figiCode"),
        is_deprecated=bool(properties.get("isDeprecated", False)),
    )


def _attach(source: Concept, row: AggregateRow) -> None:
    kind = row.relationship
    target = row.target_uuid
    if kind is None or not target:
        return
    if kind in _LIST_RELATIONSHIPS:
        targets: list[str] = getattr(source, _LIST_RELATIONSHIPS[kind])
        if target not in targets:
            targets.append(target)
    elif kind in _SINGLE_RELATIONSHIPS:
        setattr(source, _SINGLE_RELATIONSHIPS[kind], target)
    elif kind is RelationshipKind.HAS_ROLE:
        if all(role.role_uuid != target for role in source.membership_roles):
            source.membership_roles.append(
                MembershipRole(
                    role_uuid=target,
                    inception_date=row.relationship_properties.get("inceptionDate"),
                    termination_date=row.relationship_properties.get("terminationDate"),
                )
            )


def _role_uuid(role: MembershipRole) -> str:
    return role.role_uuid

